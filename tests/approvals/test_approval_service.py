from __future__ import annotations

from datetime import date

import pytest

from approval_system.approvals.service import ApprovalService
from approval_system.core.constants import UNKNOWN_USER_NAME
from approval_system.core.enums import ActionType, DocStatus, LineStatus
from approval_system.core.exceptions import BusinessError, ErrorCode, RemoteServiceError
from approval_system.documents.memory_document_repository import InMemoryApprovalStore
from approval_system.documents.model import NewHistoryEntry

DRAFTER = 1


class FakeUsers:
    def __init__(self, fail=False):
        self.fail = fail

    def get_display_name(self, member_id):
        if self.fail:
            raise RemoteServiceError("user service down")
        return f"member-{member_id}"

    def exists(self, member_id):
        return True


class FakeLedger:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def decrease(self, request):
        self.calls.append(request)
        if self.fail:
            raise RemoteServiceError("ledger down")


def make_document(store, approvers=(2, 3, 5)):
    with store() as uow:
        doc_id = uow.documents.add(
            drafter_id=DRAFTER,
            title="Vacation",
            content="Family trip",
            start_vacation_date=date(2026, 3, 2),
            end_vacation_date=date(2026, 3, 4),
        )
        for seq, approver in enumerate(approvers, start=1):
            uow.lines.add(doc_id=doc_id, sequence=seq, approver_id=approver)
    return doc_id


def state(store, doc_id):
    with store() as uow:
        return (
            uow.documents.get(doc_id),
            {line.sequence: line.status for line in uow.lines.list_for_document(doc_id)},
            [h.action for h in uow.history.list_for_document(doc_id)],
        )


@pytest.fixture
def store():
    return InMemoryApprovalStore()


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def svc(store, ledger):
    return ApprovalService(store, FakeUsers(), ledger)


def test_submit_moves_document_to_in_progress_and_first_line_to_wait(store, svc):
    doc_id = make_document(store)

    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    doc, lines, actions = state(store, doc_id)
    assert doc.status == DocStatus.IN_PROGRESS
    assert doc.current_sequence == 1
    assert lines == {1: LineStatus.WAIT, 2: LineStatus.PENDING, 3: LineStatus.PENDING}
    assert actions == [ActionType.SUBMIT]


def test_second_submit_fails_with_already_submit(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    with pytest.raises(BusinessError) as e:
        svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    assert e.value.error_code == ErrorCode.ALREADY_SUBMIT


def test_submit_by_non_drafter_fails(store, svc):
    doc_id = make_document(store)

    with pytest.raises(BusinessError) as e:
        svc.submit_approval(doc_id=doc_id, member_id=2)

    assert e.value.error_code == ErrorCode.NOT_DRAFTER
    assert state(store, doc_id)[0].status == DocStatus.TEMP


def test_submit_unknown_document_fails(svc):
    with pytest.raises(BusinessError) as e:
        svc.submit_approval(doc_id=999, member_id=DRAFTER)

    assert e.value.error_code == ErrorCode.DOCUMENT_NOT_FOUND


def test_submit_without_approvers_fails(store, svc):
    doc_id = make_document(store, approvers=())

    with pytest.raises(BusinessError) as e:
        svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    assert e.value.error_code == ErrorCode.APPROVER_REQUIRED


def test_submit_records_placeholder_name_when_user_service_fails(store, ledger):
    svc = ApprovalService(store, FakeUsers(fail=True), ledger)
    doc_id = make_document(store)

    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    with store() as uow:
        history = uow.history.list_for_document(doc_id)
    assert history[0].actor_name == UNKNOWN_USER_NAME
    assert state(store, doc_id)[0].status == DocStatus.IN_PROGRESS


def test_cancel_right_after_submit_returns_to_temp(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    svc.cancel_submit(doc_id=doc_id, member_id=DRAFTER)

    doc, lines, actions = state(store, doc_id)
    assert doc.status == DocStatus.TEMP
    assert lines[1] == LineStatus.PENDING
    assert actions == [ActionType.SUBMIT, ActionType.CANCEL]


def test_cancel_fails_after_first_approver_read(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    with store() as uow:
        uow.history.append(NewHistoryEntry(doc_id=doc_id, actor_id=2, action=ActionType.READ))

    with pytest.raises(BusinessError) as e:
        svc.cancel_submit(doc_id=doc_id, member_id=DRAFTER)

    assert e.value.error_code == ErrorCode.CANNOT_CANCEL_SUBMIT
    assert state(store, doc_id)[0].status == DocStatus.IN_PROGRESS


def test_read_by_other_approver_does_not_block_cancel(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    with store() as uow:
        uow.history.append(NewHistoryEntry(doc_id=doc_id, actor_id=3, action=ActionType.READ))

    svc.cancel_submit(doc_id=doc_id, member_id=DRAFTER)

    assert state(store, doc_id)[0].status == DocStatus.TEMP


def test_cancel_fails_once_first_line_was_approved(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    svc.approve_document(doc_id=doc_id, member_id=2)

    with pytest.raises(BusinessError) as e:
        svc.cancel_submit(doc_id=doc_id, member_id=DRAFTER)

    assert e.value.error_code == ErrorCode.CANNOT_CANCEL_SUBMIT


def test_cancel_of_draft_never_submitted_fails(store, svc):
    doc_id = make_document(store)

    with pytest.raises(BusinessError) as e:
        svc.cancel_submit(doc_id=doc_id, member_id=DRAFTER)

    assert e.value.error_code == ErrorCode.CANNOT_CANCEL_SUBMIT


def test_cancel_by_non_drafter_fails(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    with pytest.raises(BusinessError) as e:
        svc.cancel_submit(doc_id=doc_id, member_id=2)

    assert e.value.error_code == ErrorCode.NOT_DRAFTER


def test_resubmit_after_cancel_starts_again_at_first_line(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    svc.cancel_submit(doc_id=doc_id, member_id=DRAFTER)

    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    doc, lines, actions = state(store, doc_id)
    assert doc.status == DocStatus.IN_PROGRESS
    assert doc.current_sequence == 1
    assert lines[1] == LineStatus.WAIT
    assert actions == [ActionType.SUBMIT, ActionType.CANCEL, ActionType.SUBMIT]


def test_three_approver_chain(store, svc, ledger):
    doc_id = make_document(store, approvers=(2, 3, 5))
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    svc.approve_document(doc_id=doc_id, member_id=2, comment="ok")
    doc, lines, _ = state(store, doc_id)
    assert lines[1] == LineStatus.APPROVED
    assert lines[2] == LineStatus.WAIT
    assert doc.current_sequence == 2

    with pytest.raises(BusinessError) as e:
        svc.approve_document(doc_id=doc_id, member_id=4)
    assert e.value.error_code == ErrorCode.NOT_MATCH_APPROVER

    svc.approve_document(doc_id=doc_id, member_id=3)
    assert state(store, doc_id)[0].current_sequence == 3
    assert ledger.calls == []

    svc.approve_document(doc_id=doc_id, member_id=5, comment="enjoy")
    doc, lines, actions = state(store, doc_id)
    assert doc.status == DocStatus.APPROVED
    assert lines == {1: LineStatus.APPROVED, 2: LineStatus.APPROVED, 3: LineStatus.APPROVED}
    assert actions == [ActionType.SUBMIT, ActionType.APPROVE, ActionType.APPROVE, ActionType.APPROVE]

    assert len(ledger.calls) == 1
    call = ledger.calls[0]
    assert call.doc_id == doc_id
    assert call.member_id == DRAFTER
    assert call.start_date == date(2026, 3, 2)
    assert call.end_date == date(2026, 3, 4)
    assert call.approver_id == 5


def test_approve_twice_on_same_line_fails_with_already_process(store, svc):
    doc_id = make_document(store, approvers=(2,))
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    svc.approve_document(doc_id=doc_id, member_id=2)

    with pytest.raises(BusinessError) as e:
        svc.approve_document(doc_id=doc_id, member_id=2)

    assert e.value.error_code == ErrorCode.ALREADY_PROCESS


def test_approve_at_wrong_sequence_fails(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    with pytest.raises(BusinessError) as e:
        svc.approve_document(doc_id=doc_id, member_id=3)

    assert e.value.error_code == ErrorCode.NOT_MATCH_APPROVER


def test_approve_before_submit_fails(store, svc):
    doc_id = make_document(store)

    with pytest.raises(BusinessError) as e:
        svc.approve_document(doc_id=doc_id, member_id=2)

    assert e.value.error_code == ErrorCode.ALREADY_PROCESS


def test_ledger_failure_rolls_back_final_approval(store):
    ledger = FakeLedger(fail=True)
    svc = ApprovalService(store, FakeUsers(), ledger)
    doc_id = make_document(store, approvers=(2, 3))
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    svc.approve_document(doc_id=doc_id, member_id=2)
    before = state(store, doc_id)

    with pytest.raises(BusinessError) as e:
        svc.approve_document(doc_id=doc_id, member_id=3)

    assert e.value.error_code == ErrorCode.ANNUAL_LEAVE_FAILURE
    assert len(ledger.calls) == 1
    after = state(store, doc_id)
    assert after[0].status == DocStatus.IN_PROGRESS
    assert after[1] == before[1]
    assert after[2] == before[2]


def test_final_approval_succeeds_after_ledger_recovers(store):
    ledger = FakeLedger(fail=True)
    svc = ApprovalService(store, FakeUsers(), ledger)
    doc_id = make_document(store, approvers=(2,))
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    with pytest.raises(BusinessError):
        svc.approve_document(doc_id=doc_id, member_id=2)

    ledger.fail = False
    svc.approve_document(doc_id=doc_id, member_id=2)

    assert state(store, doc_id)[0].status == DocStatus.APPROVED
    assert len(ledger.calls) == 2


def test_reject_halts_the_chain(store, svc, ledger):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)
    svc.approve_document(doc_id=doc_id, member_id=2)

    svc.reject_document(doc_id=doc_id, member_id=3, comment="dates clash")

    doc, lines, actions = state(store, doc_id)
    assert doc.status == DocStatus.REJECTED
    assert doc.current_sequence == 2
    assert lines == {1: LineStatus.APPROVED, 2: LineStatus.REJECTED, 3: LineStatus.PENDING}
    assert actions[-1] == ActionType.REJECT
    assert ledger.calls == []

    with pytest.raises(BusinessError) as e:
        svc.approve_document(doc_id=doc_id, member_id=5)
    assert e.value.error_code == ErrorCode.NOT_MATCH_APPROVER

    with pytest.raises(BusinessError) as e:
        svc.reject_document(doc_id=doc_id, member_id=3)
    assert e.value.error_code == ErrorCode.ALREADY_PROCESS


def test_reject_stores_comment(store, svc):
    doc_id = make_document(store, approvers=(2,))
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    svc.reject_document(doc_id=doc_id, member_id=2, comment="not this week")

    with store() as uow:
        last = uow.history.list_for_document(doc_id)[-1]
    assert last.action == ActionType.REJECT
    assert last.comment == "not this week"
    assert last.actor_name == "member-2"


def test_reject_by_wrong_member_fails(store, svc):
    doc_id = make_document(store)
    svc.submit_approval(doc_id=doc_id, member_id=DRAFTER)

    with pytest.raises(BusinessError) as e:
        svc.reject_document(doc_id=doc_id, member_id=DRAFTER)

    assert e.value.error_code == ErrorCode.NOT_MATCH_APPROVER
