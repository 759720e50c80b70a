from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..core.enums import ActionType, DocStatus, LineStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_transaction, fetchall, fetchone
from .model import ApprovalDocument, ApprovalHistory, ApprovalLine, NewHistoryEntry
from .repository import (
    ApprovalHistoryRepository,
    ApprovalLineRepository,
    ApprovalUnitOfWork,
    DocumentRepository,
)


def _row_to_document(r: dict) -> ApprovalDocument:
    return ApprovalDocument(
        doc_id=int(r["doc_id"]),
        drafter_id=int(r["drafter_id"]),
        title=r["title"],
        content=r["content"],
        status=DocStatus(r["status"]),
        current_sequence=int(r["current_sequence"]),
        start_vacation_date=r["start_vacation_date"],
        end_vacation_date=r["end_vacation_date"],
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _row_to_line(r: dict) -> ApprovalLine:
    return ApprovalLine(
        line_id=int(r["line_id"]),
        doc_id=int(r["doc_id"]),
        sequence=int(r["sequence"]),
        approver_id=int(r["approver_id"]),
        status=LineStatus(r["status"]),
        processed_at=r.get("processed_at"),
    )


def _row_to_history(r: dict) -> ApprovalHistory:
    return ApprovalHistory(
        history_id=int(r["history_id"]),
        doc_id=int(r["doc_id"]),
        actor_id=int(r["actor_id"]),
        action=ActionType(r["action"]),
        actor_name=r.get("actor_name"),
        comment=r.get("comment"),
        created_at=r.get("created_at"),
    )


class MySQLDocumentRepository(DocumentRepository):
    def __init__(self, cur):
        self._cur = cur

    def get(self, doc_id: int, *, for_update: bool = False) -> Optional[ApprovalDocument]:
        lock = " FOR UPDATE" if for_update else ""
        self._cur.execute(
            f"""
            SELECT doc_id, drafter_id, title, content, status, current_sequence,
                   start_vacation_date, end_vacation_date, created_at, updated_at
            FROM approval_documents
            WHERE doc_id=%s{lock}
            """,
            (int(doc_id),),
        )
        r = fetchone(self._cur)
        return _row_to_document(r) if r else None

    def add(
        self,
        *,
        drafter_id: int,
        title: str,
        content: str,
        start_vacation_date: date,
        end_vacation_date: date,
    ) -> int:
        self._cur.execute(
            """
            INSERT INTO approval_documents(
                drafter_id, title, content, status, current_sequence,
                start_vacation_date, end_vacation_date
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(drafter_id),
                title,
                content,
                DocStatus.TEMP.value,
                1,
                start_vacation_date,
                end_vacation_date,
            ),
        )
        return int(self._cur.lastrowid)

    def update(self, document: ApprovalDocument) -> None:
        self._cur.execute(
            """
            UPDATE approval_documents
            SET status=%s, current_sequence=%s, updated_at=CURRENT_TIMESTAMP
            WHERE doc_id=%s
            """,
            (document.status.value, int(document.current_sequence), int(document.doc_id)),
        )


class MySQLApprovalLineRepository(ApprovalLineRepository):
    _COLUMNS = "line_id, doc_id, sequence, approver_id, status, processed_at"

    def __init__(self, cur):
        self._cur = cur

    def add(self, *, doc_id: int, sequence: int, approver_id: int) -> int:
        self._cur.execute(
            """
            INSERT INTO approval_lines(doc_id, sequence, approver_id, status)
            VALUES(%s,%s,%s,%s)
            """,
            (int(doc_id), int(sequence), int(approver_id), LineStatus.PENDING.value),
        )
        return int(self._cur.lastrowid)

    def get_by_sequence(self, doc_id: int, sequence: int) -> Optional[ApprovalLine]:
        self._cur.execute(
            f"SELECT {self._COLUMNS} FROM approval_lines WHERE doc_id=%s AND sequence=%s",
            (int(doc_id), int(sequence)),
        )
        r = fetchone(self._cur)
        return _row_to_line(r) if r else None

    def get_by_approver(self, doc_id: int, sequence: int, approver_id: int) -> Optional[ApprovalLine]:
        self._cur.execute(
            f"""
            SELECT {self._COLUMNS} FROM approval_lines
            WHERE doc_id=%s AND sequence=%s AND approver_id=%s
            """,
            (int(doc_id), int(sequence), int(approver_id)),
        )
        r = fetchone(self._cur)
        return _row_to_line(r) if r else None

    def exists_by_sequence(self, doc_id: int, sequence: int) -> bool:
        self._cur.execute(
            "SELECT 1 AS found FROM approval_lines WHERE doc_id=%s AND sequence=%s LIMIT 1",
            (int(doc_id), int(sequence)),
        )
        return fetchone(self._cur) is not None

    def set_status_by_sequence(self, doc_id: int, sequence: int, status: LineStatus) -> None:
        self._cur.execute(
            "UPDATE approval_lines SET status=%s WHERE doc_id=%s AND sequence=%s",
            (status.value, int(doc_id), int(sequence)),
        )

    def update(self, line: ApprovalLine) -> None:
        self._cur.execute(
            "UPDATE approval_lines SET status=%s, processed_at=%s WHERE line_id=%s",
            (line.status.value, line.processed_at, int(line.line_id)),
        )

    def list_for_document(self, doc_id: int) -> Sequence[ApprovalLine]:
        self._cur.execute(
            f"SELECT {self._COLUMNS} FROM approval_lines WHERE doc_id=%s ORDER BY sequence",
            (int(doc_id),),
        )
        return [_row_to_line(r) for r in fetchall(self._cur)]


class MySQLApprovalHistoryRepository(ApprovalHistoryRepository):
    def __init__(self, cur):
        self._cur = cur

    def append(self, entry: NewHistoryEntry) -> int:
        self._cur.execute(
            """
            INSERT INTO approval_history(doc_id, actor_id, action, actor_name, comment)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (int(entry.doc_id), int(entry.actor_id), entry.action.value, entry.actor_name, entry.comment),
        )
        return int(self._cur.lastrowid)

    def exists_by_actor_and_action(self, doc_id: int, actor_id: int, action: ActionType) -> bool:
        self._cur.execute(
            """
            SELECT 1 AS found FROM approval_history
            WHERE doc_id=%s AND actor_id=%s AND action=%s
            LIMIT 1
            """,
            (int(doc_id), int(actor_id), action.value),
        )
        return fetchone(self._cur) is not None

    def list_for_document(self, doc_id: int) -> Sequence[ApprovalHistory]:
        self._cur.execute(
            """
            SELECT history_id, doc_id, actor_id, action, actor_name, comment, created_at
            FROM approval_history
            WHERE doc_id=%s
            ORDER BY created_at, history_id
            """,
            (int(doc_id),),
        )
        return [_row_to_history(r) for r in fetchall(self._cur)]


class MySQLApprovalUnitOfWork(ApprovalUnitOfWork):
    """Binds the three repositories to one MySQL transaction."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory
        self._tx = None

    def __enter__(self) -> "MySQLApprovalUnitOfWork":
        self._tx = db_transaction(self._conn_factory)
        _, cur = self._tx.__enter__()
        self.documents = MySQLDocumentRepository(cur)
        self.lines = MySQLApprovalLineRepository(cur)
        self.history = MySQLApprovalHistoryRepository(cur)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        tx, self._tx = self._tx, None
        tx.__exit__(exc_type, exc, tb)


class MySQLUnitOfWorkFactory:
    def __init__(self, conn_factory: DatabaseConnection):
        self.conn_factory = conn_factory

    def __call__(self) -> MySQLApprovalUnitOfWork:
        return MySQLApprovalUnitOfWork(self.conn_factory)
