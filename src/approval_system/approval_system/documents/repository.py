from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import ActionType, LineStatus
from .model import ApprovalDocument, ApprovalHistory, ApprovalLine, NewHistoryEntry


class DocumentRepository(Protocol):
    def get(self, doc_id: int, *, for_update: bool = False) -> Optional[ApprovalDocument]:
        """Load a document; ``for_update`` holds the document lock until the unit of work ends."""

        raise NotImplementedError

    def add(
        self,
        *,
        drafter_id: int,
        title: str,
        content: str,
        start_vacation_date: date,
        end_vacation_date: date,
    ) -> int:
        raise NotImplementedError

    def update(self, document: ApprovalDocument) -> None:
        raise NotImplementedError


class ApprovalLineRepository(Protocol):
    def add(self, *, doc_id: int, sequence: int, approver_id: int) -> int:
        raise NotImplementedError

    def get_by_sequence(self, doc_id: int, sequence: int) -> Optional[ApprovalLine]:
        raise NotImplementedError

    def get_by_approver(self, doc_id: int, sequence: int, approver_id: int) -> Optional[ApprovalLine]:
        raise NotImplementedError

    def exists_by_sequence(self, doc_id: int, sequence: int) -> bool:
        raise NotImplementedError

    def set_status_by_sequence(self, doc_id: int, sequence: int, status: LineStatus) -> None:
        """Write a status that the caller already checked against the line state machine."""

        raise NotImplementedError

    def update(self, line: ApprovalLine) -> None:
        raise NotImplementedError

    def list_for_document(self, doc_id: int) -> Sequence[ApprovalLine]:
        """Lines ordered by sequence."""

        raise NotImplementedError


class ApprovalHistoryRepository(Protocol):
    def append(self, entry: NewHistoryEntry) -> int:
        raise NotImplementedError

    def exists_by_actor_and_action(self, doc_id: int, actor_id: int, action: ActionType) -> bool:
        raise NotImplementedError

    def list_for_document(self, doc_id: int) -> Sequence[ApprovalHistory]:
        """Entries ordered by creation time, oldest first."""

        raise NotImplementedError


class ApprovalUnitOfWork(Protocol):
    """One transaction over the three stores.

    Leaving the ``with`` block normally commits; an exception rolls back and propagates.
    """

    documents: DocumentRepository
    lines: ApprovalLineRepository
    history: ApprovalHistoryRepository

    def __enter__(self) -> "ApprovalUnitOfWork":
        raise NotImplementedError

    def __exit__(self, exc_type, exc, tb) -> None:
        raise NotImplementedError


class UnitOfWorkFactory(Protocol):
    def __call__(self) -> ApprovalUnitOfWork:
        raise NotImplementedError
