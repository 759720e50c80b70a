"""In-process store with the same transactional contract as the MySQL one.

Writes made inside a unit of work are staged and only become visible to other
units of work on commit. ``get(..., for_update=True)`` takes a per-document
lock that is held until the unit of work ends, so two operations on the same
document run one after the other.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import date
from typing import Dict, List, Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.enums import ActionType, DocStatus, LineStatus
from .model import ApprovalDocument, ApprovalHistory, ApprovalLine, NewHistoryEntry
from .repository import (
    ApprovalHistoryRepository,
    ApprovalLineRepository,
    ApprovalUnitOfWork,
    DocumentRepository,
)


class InMemoryApprovalStore:
    def __init__(self):
        self._lock = threading.Lock()
        self._doc_locks: Dict[int, threading.Lock] = {}
        self._next_ids = {"doc": 1, "line": 1, "history": 1}
        self.documents: Dict[int, ApprovalDocument] = {}
        self.lines: Dict[int, ApprovalLine] = {}
        self.history: List[ApprovalHistory] = []

    def next_id(self, kind: str) -> int:
        with self._lock:
            value = self._next_ids[kind]
            self._next_ids[kind] = value + 1
            return value

    def doc_lock(self, doc_id: int) -> threading.Lock:
        with self._lock:
            return self._doc_locks.setdefault(int(doc_id), threading.Lock())

    def snapshot(self):
        with self._lock:
            return dict(self.documents), dict(self.lines), list(self.history)

    def apply(self, documents: Dict[int, ApprovalDocument], lines: Dict[int, ApprovalLine], history: List[ApprovalHistory]) -> None:
        with self._lock:
            self.documents.update(documents)
            self.lines.update(lines)
            self.history.extend(history)

    def unit_of_work(self) -> "InMemoryApprovalUnitOfWork":
        return InMemoryApprovalUnitOfWork(self)

    __call__ = unit_of_work


class _Staging:
    def __init__(self, store: InMemoryApprovalStore):
        self.store = store
        self.documents: Dict[int, ApprovalDocument] = {}
        self.lines: Dict[int, ApprovalLine] = {}
        self.history: List[ApprovalHistory] = []

    def view(self):
        documents, lines, history = self.store.snapshot()
        documents.update(self.documents)
        lines.update(self.lines)
        return documents, lines, history + self.history


class InMemoryDocumentRepository(DocumentRepository):
    def __init__(self, staging: _Staging, held_locks: List[threading.Lock]):
        self._staging = staging
        self._held_locks = held_locks

    def get(self, doc_id: int, *, for_update: bool = False) -> Optional[ApprovalDocument]:
        if for_update:
            lock = self._staging.store.doc_lock(doc_id)
            if lock not in self._held_locks:
                lock.acquire()
                self._held_locks.append(lock)
        documents, _, _ = self._staging.view()
        return documents.get(int(doc_id))

    def add(
        self,
        *,
        drafter_id: int,
        title: str,
        content: str,
        start_vacation_date: date,
        end_vacation_date: date,
    ) -> int:
        doc_id = self._staging.store.next_id("doc")
        now = now_local()
        self._staging.documents[doc_id] = ApprovalDocument(
            doc_id=doc_id,
            drafter_id=int(drafter_id),
            title=title,
            content=content,
            status=DocStatus.TEMP,
            current_sequence=1,
            start_vacation_date=start_vacation_date,
            end_vacation_date=end_vacation_date,
            created_at=now,
            updated_at=now,
        )
        return doc_id

    def update(self, document: ApprovalDocument) -> None:
        self._staging.documents[int(document.doc_id)] = replace(document, updated_at=now_local())


class InMemoryApprovalLineRepository(ApprovalLineRepository):
    def __init__(self, staging: _Staging):
        self._staging = staging

    def _lines(self, doc_id: int) -> List[ApprovalLine]:
        _, lines, _ = self._staging.view()
        return sorted((line for line in lines.values() if line.doc_id == int(doc_id)), key=lambda line: line.sequence)

    def add(self, *, doc_id: int, sequence: int, approver_id: int) -> int:
        line_id = self._staging.store.next_id("line")
        self._staging.lines[line_id] = ApprovalLine(
            line_id=line_id,
            doc_id=int(doc_id),
            sequence=int(sequence),
            approver_id=int(approver_id),
            status=LineStatus.PENDING,
        )
        return line_id

    def get_by_sequence(self, doc_id: int, sequence: int) -> Optional[ApprovalLine]:
        for line in self._lines(doc_id):
            if line.sequence == int(sequence):
                return line
        return None

    def get_by_approver(self, doc_id: int, sequence: int, approver_id: int) -> Optional[ApprovalLine]:
        line = self.get_by_sequence(doc_id, sequence)
        if line and line.approver_id == int(approver_id):
            return line
        return None

    def exists_by_sequence(self, doc_id: int, sequence: int) -> bool:
        return self.get_by_sequence(doc_id, sequence) is not None

    def set_status_by_sequence(self, doc_id: int, sequence: int, status: LineStatus) -> None:
        line = self.get_by_sequence(doc_id, sequence)
        if line:
            self._staging.lines[line.line_id] = replace(line, status=status)

    def update(self, line: ApprovalLine) -> None:
        self._staging.lines[int(line.line_id)] = line

    def list_for_document(self, doc_id: int) -> Sequence[ApprovalLine]:
        return self._lines(doc_id)


class InMemoryApprovalHistoryRepository(ApprovalHistoryRepository):
    def __init__(self, staging: _Staging):
        self._staging = staging

    def append(self, entry: NewHistoryEntry) -> int:
        history_id = self._staging.store.next_id("history")
        self._staging.history.append(
            ApprovalHistory(
                history_id=history_id,
                doc_id=int(entry.doc_id),
                actor_id=int(entry.actor_id),
                action=entry.action,
                actor_name=entry.actor_name,
                comment=entry.comment,
                created_at=now_local(),
            )
        )
        return history_id

    def exists_by_actor_and_action(self, doc_id: int, actor_id: int, action: ActionType) -> bool:
        return any(
            h.doc_id == int(doc_id) and h.actor_id == int(actor_id) and h.action == action
            for h in self.list_for_document(doc_id)
        )

    def list_for_document(self, doc_id: int) -> Sequence[ApprovalHistory]:
        _, _, history = self._staging.view()
        items = [h for h in history if h.doc_id == int(doc_id)]
        items.sort(key=lambda h: (h.created_at, h.history_id))
        return items


class InMemoryApprovalUnitOfWork(ApprovalUnitOfWork):
    def __init__(self, store: InMemoryApprovalStore):
        self._store = store
        self._staging: Optional[_Staging] = None
        self._held_locks: List[threading.Lock] = []

    def __enter__(self) -> "InMemoryApprovalUnitOfWork":
        self._staging = _Staging(self._store)
        self._held_locks = []
        self.documents = InMemoryDocumentRepository(self._staging, self._held_locks)
        self.lines = InMemoryApprovalLineRepository(self._staging)
        self.history = InMemoryApprovalHistoryRepository(self._staging)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        staging, self._staging = self._staging, None
        try:
            if exc_type is None:
                self._store.apply(staging.documents, staging.lines, staging.history)
        finally:
            while self._held_locks:
                self._held_locks.pop().release()
