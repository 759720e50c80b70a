"""Example: drive the workflow through the service layer with the in-memory store.

Remote collaborators are replaced by tiny local stand-ins so the example runs
without the user and attendance services.
"""

import sys
from datetime import date
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src" / "approval_system"))

from approval_system.approvals.service import ApprovalService
from approval_system.common.logging_config import configure_logging
from approval_system.documents.memory_document_repository import InMemoryApprovalStore
from approval_system.documents.service import DocumentService

NAMES = {1: "Drafter Kim", 2: "Team Lead Lee", 3: "Manager Park"}


class LocalUsers:
    def get_display_name(self, member_id):
        return NAMES[member_id]

    def exists(self, member_id):
        return member_id in NAMES


class PrintingLedger:
    def decrease(self, request):
        print("leave ledger <-", request.to_payload())


def main():
    configure_logging("INFO")
    store = InMemoryApprovalStore()
    documents = DocumentService(store, LocalUsers())
    approvals = ApprovalService(store, LocalUsers(), PrintingLedger())

    doc_id = documents.create_document(
        drafter_id=1,
        title="Summer vacation",
        content="Two days off.",
        approver_ids=[2, 3],
        start_vacation_date=date(2026, 8, 3),
        end_vacation_date=date(2026, 8, 4),
    )
    approvals.submit_approval(doc_id=doc_id, member_id=1)
    approvals.approve_document(doc_id=doc_id, member_id=2, comment="OK")
    approvals.approve_document(doc_id=doc_id, member_id=3, comment="Enjoy")

    detail = documents.read_detail_document(member_id=1, doc_id=doc_id)
    print(detail.document.status.value, [(h.action.value, h.actor_name) for h in detail.history])


if __name__ == "__main__":
    main()
