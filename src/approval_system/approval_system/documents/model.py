from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import ActionType, DocStatus, LineStatus
from ..core.exceptions import IllegalTransitionError
from .state import next_doc_status, next_line_status


@dataclass(frozen=True)
class ApprovalDocument:
    doc_id: int
    drafter_id: int
    title: str
    content: str
    status: DocStatus
    current_sequence: int
    start_vacation_date: date
    end_vacation_date: date
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def submitted(self) -> "ApprovalDocument":
        return replace(self, status=next_doc_status(self.status, DocStatus.IN_PROGRESS), current_sequence=1)

    def cancelled(self) -> "ApprovalDocument":
        return replace(self, status=next_doc_status(self.status, DocStatus.TEMP))

    def advanced(self) -> "ApprovalDocument":
        if self.status != DocStatus.IN_PROGRESS:
            raise IllegalTransitionError(f"Cannot advance a document in {self.status.value}")
        return replace(self, current_sequence=self.current_sequence + 1)

    def approved(self) -> "ApprovalDocument":
        return replace(self, status=next_doc_status(self.status, DocStatus.APPROVED))

    def rejected(self) -> "ApprovalDocument":
        return replace(self, status=next_doc_status(self.status, DocStatus.REJECTED))


@dataclass(frozen=True)
class ApprovalLine:
    line_id: int
    doc_id: int
    sequence: int
    approver_id: int
    status: LineStatus
    processed_at: Optional[datetime] = None

    def with_status(self, status: LineStatus, *, processed_at: Optional[datetime] = None) -> "ApprovalLine":
        return replace(self, status=next_line_status(self.status, status), processed_at=processed_at)


@dataclass(frozen=True)
class ApprovalHistory:
    history_id: int
    doc_id: int
    actor_id: int
    action: ActionType
    actor_name: Optional[str] = None
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class NewHistoryEntry:
    """History entry before it gets an id and a timestamp from the store."""

    doc_id: int
    actor_id: int
    action: ActionType
    actor_name: Optional[str] = None
    comment: Optional[str] = None


@dataclass(frozen=True)
class DocumentDetail:
    document: ApprovalDocument
    lines: Sequence[ApprovalLine]
    history: Sequence[ApprovalHistory]
