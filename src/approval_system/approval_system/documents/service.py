from __future__ import annotations

import logging
from datetime import date
from typing import Sequence

from ..common.validators import require_non_empty
from ..core.constants import MAX_APPROVERS, MIN_APPROVERS
from ..core.enums import ActionType, DocStatus
from ..core.exceptions import BusinessError, ErrorCode, RemoteServiceError
from ..remote.user_directory import UserDirectory, display_name_or_placeholder
from .model import ApprovalHistory, DocumentDetail, NewHistoryEntry
from .repository import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class DocumentService:
    """Use case: draft vacation documents and read them back."""

    def __init__(self, uow_factory: UnitOfWorkFactory, users: UserDirectory):
        self._uow_factory = uow_factory
        self._users = users

    def create_document(
        self,
        *,
        drafter_id: int,
        title: str,
        content: str,
        approver_ids: Sequence[int],
        start_vacation_date: date,
        end_vacation_date: date,
    ) -> int:
        title = require_non_empty(title, "Title")
        content = require_non_empty(content, "Content")
        approvers = [int(a) for a in approver_ids]

        if not MIN_APPROVERS <= len(approvers) <= MAX_APPROVERS:
            raise BusinessError(
                ErrorCode.INVALID_APPROVER_COUNT,
                f"Between {MIN_APPROVERS} and {MAX_APPROVERS} approvers are required",
            )
        if len(set(approvers)) != len(approvers):
            raise BusinessError(ErrorCode.DUPLICATE_APPROVER)
        if int(drafter_id) in approvers:
            raise BusinessError(ErrorCode.DRAFTER_EQUALS_APPROVER)
        if end_vacation_date < start_vacation_date:
            raise BusinessError(ErrorCode.INVALID_VACATION_PERIOD)

        for approver_id in approvers:
            try:
                found = self._users.exists(approver_id)
            except RemoteServiceError as e:
                logger.warning("Could not verify approver %s: %s", approver_id, e)
                found = False
            if not found:
                raise BusinessError(ErrorCode.MEMBER_NOT_FOUND, f"Member {approver_id} does not exist")

        with self._uow_factory() as uow:
            doc_id = uow.documents.add(
                drafter_id=int(drafter_id),
                title=title,
                content=content,
                start_vacation_date=start_vacation_date,
                end_vacation_date=end_vacation_date,
            )
            for sequence, approver_id in enumerate(approvers, start=1):
                uow.lines.add(doc_id=doc_id, sequence=sequence, approver_id=approver_id)

        logger.info("Document %s drafted by %s with %s approver(s)", doc_id, drafter_id, len(approvers))
        return doc_id

    def read_detail_document(self, *, member_id: int, doc_id: int) -> DocumentDetail:
        """Return the document with its lines and history.

        The first time an approver opens a submitted document a READ entry is
        logged; from then on the drafter can no longer cancel the submission.
        """

        member_id = int(member_id)
        actor_name = display_name_or_placeholder(self._users, member_id)
        with self._uow_factory() as uow:
            document = uow.documents.get(int(doc_id), for_update=True)
            if not document:
                raise BusinessError(ErrorCode.DOCUMENT_NOT_FOUND)

            lines = uow.lines.list_for_document(doc_id)
            is_approver = any(line.approver_id == member_id for line in lines)
            if member_id != document.drafter_id and not is_approver:
                raise BusinessError(ErrorCode.NO_READ_AUTHORIZATION)

            if (
                is_approver
                and document.status == DocStatus.IN_PROGRESS
                and not uow.history.exists_by_actor_and_action(doc_id, member_id, ActionType.READ)
            ):
                uow.history.append(
                    NewHistoryEntry(
                        doc_id=int(doc_id),
                        actor_id=member_id,
                        action=ActionType.READ,
                        actor_name=actor_name,
                    )
                )
                logger.info("Document %s read by approver %s", doc_id, member_id)

            history = uow.history.list_for_document(doc_id)

        return DocumentDetail(document=document, lines=list(lines), history=list(history))

    def list_history(self, *, doc_id: int) -> Sequence[ApprovalHistory]:
        with self._uow_factory() as uow:
            if not uow.documents.get(int(doc_id)):
                raise BusinessError(ErrorCode.DOCUMENT_NOT_FOUND)
            return list(uow.history.list_for_document(doc_id))

