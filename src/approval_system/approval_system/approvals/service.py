from __future__ import annotations

import logging
from typing import Optional

from ..common.datetime_utils import now_local
from ..core.constants import FIRST_SEQUENCE
from ..core.enums import ActionType, DocStatus, LineStatus
from ..core.exceptions import BusinessError, ErrorCode
from ..documents.model import ApprovalDocument, ApprovalLine, NewHistoryEntry
from ..documents.repository import ApprovalUnitOfWork, UnitOfWorkFactory
from ..documents.state import next_line_status
from ..remote.leave_ledger import LeaveDecreaseRequest, LeaveLedger
from ..remote.user_directory import UserDirectory, display_name_or_placeholder

logger = logging.getLogger(__name__)


class ApprovalService:
    """Use case: move a document through submit / cancel / approve / reject.

    Each public operation runs inside one unit of work and locks the document
    first, so concurrent calls on the same document are applied one at a time
    and the loser fails on a stale precondition.
    """

    def __init__(self, uow_factory: UnitOfWorkFactory, users: UserDirectory, leave_ledger: LeaveLedger):
        self._uow_factory = uow_factory
        self._users = users
        self._leave_ledger = leave_ledger

    def submit_approval(self, *, doc_id: int, member_id: int) -> None:
        actor_name = display_name_or_placeholder(self._users, member_id)
        with self._uow_factory() as uow:
            document = self.validate_submit_authority(uow, doc_id, member_id)
            if document.status != DocStatus.TEMP:
                raise BusinessError(ErrorCode.ALREADY_SUBMIT)

            lines = uow.lines.list_for_document(doc_id)
            if not any(line.sequence == FIRST_SEQUENCE for line in lines):
                raise BusinessError(ErrorCode.APPROVER_REQUIRED)

            uow.documents.update(document.submitted())

            # Force the first line to WAIT and clear any WAIT left by an earlier round.
            for line in lines:
                target = LineStatus.WAIT if line.sequence == FIRST_SEQUENCE else LineStatus.PENDING
                uow.lines.set_status_by_sequence(doc_id, line.sequence, next_line_status(line.status, target))

            self._log(uow, doc_id, member_id, ActionType.SUBMIT, actor_name)

        logger.info("Document %s submitted by %s", doc_id, member_id)

    def cancel_submit(self, *, doc_id: int, member_id: int) -> None:
        actor_name = display_name_or_placeholder(self._users, member_id)
        with self._uow_factory() as uow:
            document = self.validate_submit_authority(uow, doc_id, member_id)

            first_line = uow.lines.get_by_sequence(doc_id, FIRST_SEQUENCE)
            if not first_line:
                raise BusinessError(ErrorCode.APPROVER_REQUIRED)
            if first_line.status != LineStatus.WAIT:
                raise BusinessError(ErrorCode.CANNOT_CANCEL_SUBMIT)

            # Once the first approver has opened the document the drafter can no longer pull it back.
            if uow.history.exists_by_actor_and_action(doc_id, first_line.approver_id, ActionType.READ):
                raise BusinessError(ErrorCode.CANNOT_CANCEL_SUBMIT, "The first approver has already read the document")

            uow.documents.update(document.cancelled())
            uow.lines.update(first_line.with_status(LineStatus.PENDING))
            self._log(uow, doc_id, member_id, ActionType.CANCEL, actor_name)

        logger.info("Submission of document %s cancelled by %s", doc_id, member_id)

    def approve_document(self, *, doc_id: int, member_id: int, comment: Optional[str] = None) -> None:
        actor_name = display_name_or_placeholder(self._users, member_id)
        decreased: Optional[LeaveDecreaseRequest] = None
        try:
            with self._uow_factory() as uow:
                document = self._load_document(uow, doc_id)
                current_line = self.validate_approval_line(uow, doc_id, document.current_sequence, member_id)

                uow.lines.update(current_line.with_status(LineStatus.APPROVED, processed_at=now_local()))
                self._log(uow, doc_id, member_id, ActionType.APPROVE, actor_name, comment)

                next_line = uow.lines.get_by_sequence(doc_id, document.current_sequence + 1)
                if next_line:
                    uow.documents.update(document.advanced())
                    uow.lines.update(next_line.with_status(LineStatus.WAIT))
                    logger.info(
                        "Document %s approved at step %s by %s, waiting on %s",
                        doc_id, current_line.sequence, member_id, next_line.approver_id,
                    )
                    return

                # Terminal approver; the ledger call must succeed before commit.
                uow.documents.update(document.approved())
                decreased = self._decrease_annual_leave(document, member_id)
        except Exception:
            if decreased is not None:
                logger.error(
                    "Commit failed after annual leave was decreased, compensation needed: %s",
                    decreased.to_payload(),
                )
            raise

        logger.info("Document %s fully approved by %s", doc_id, member_id)

    def reject_document(self, *, doc_id: int, member_id: int, comment: Optional[str] = None) -> None:
        actor_name = display_name_or_placeholder(self._users, member_id)
        with self._uow_factory() as uow:
            document = self._load_document(uow, doc_id)
            current_line = self.validate_approval_line(uow, doc_id, document.current_sequence, member_id)

            uow.lines.update(current_line.with_status(LineStatus.REJECTED, processed_at=now_local()))
            uow.documents.update(document.rejected())
            self._log(uow, doc_id, member_id, ActionType.REJECT, actor_name, comment)

        logger.info("Document %s rejected at step %s by %s", doc_id, document.current_sequence, member_id)

    def validate_submit_authority(self, uow: ApprovalUnitOfWork, doc_id: int, member_id: int) -> ApprovalDocument:
        document = self._load_document(uow, doc_id)
        if int(member_id) != document.drafter_id:
            raise BusinessError(ErrorCode.NOT_DRAFTER)
        return document

    @staticmethod
    def validate_approval_line(uow: ApprovalUnitOfWork, doc_id: int, current_sequence: int, member_id: int) -> ApprovalLine:
        current_line = uow.lines.get_by_approver(doc_id, current_sequence, int(member_id))
        if not current_line:
            raise BusinessError(ErrorCode.NOT_MATCH_APPROVER)

        # Anything but WAIT means this step was already handled.
        if current_line.status != LineStatus.WAIT:
            raise BusinessError(ErrorCode.ALREADY_PROCESS)
        return current_line

    @staticmethod
    def _load_document(uow: ApprovalUnitOfWork, doc_id: int) -> ApprovalDocument:
        document = uow.documents.get(int(doc_id), for_update=True)
        if not document:
            raise BusinessError(ErrorCode.DOCUMENT_NOT_FOUND)
        return document

    def _decrease_annual_leave(self, document: ApprovalDocument, approver_id: int) -> LeaveDecreaseRequest:
        request = LeaveDecreaseRequest(
            doc_id=document.doc_id,
            member_id=document.drafter_id,
            start_date=document.start_vacation_date,
            end_date=document.end_vacation_date,
            approver_id=int(approver_id),
        )
        try:
            self._leave_ledger.decrease(request)
        except Exception as e:
            logger.error("Annual leave decrease failed for document %s: %s", document.doc_id, e, exc_info=True)
            raise BusinessError(ErrorCode.ANNUAL_LEAVE_FAILURE) from e
        return request

    @staticmethod
    def _log(
        uow: ApprovalUnitOfWork,
        doc_id: int,
        member_id: int,
        action: ActionType,
        actor_name: Optional[str],
        comment: Optional[str] = None,
    ) -> None:
        uow.history.append(
            NewHistoryEntry(
                doc_id=int(doc_id),
                actor_id=int(member_id),
                action=action,
                actor_name=actor_name,
                comment=comment,
            )
        )
