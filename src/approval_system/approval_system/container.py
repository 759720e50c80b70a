from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .approvals.service import ApprovalService
from .core.constants import DEFAULT_LEAVE_RETRY_ATTEMPTS, DEFAULT_REMOTE_TIMEOUT_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .documents.memory_document_repository import InMemoryApprovalStore
from .documents.mysql_document_repository import MySQLUnitOfWorkFactory
from .documents.repository import UnitOfWorkFactory
from .documents.service import DocumentService
from .remote.leave_ledger import HttpLeaveLedger, LeaveLedger
from .remote.user_directory import HttpUserDirectory, UserDirectory


@dataclass(frozen=True)
class Container:
    uow_factory: UnitOfWorkFactory

    user_directory: UserDirectory
    leave_ledger: LeaveLedger

    document_service: DocumentService
    approval_service: ApprovalService


def build_container(
    *,
    db_config: Optional[dict] = None,
    user_service_url: str,
    leave_service_url: str,
    remote_timeout: float = DEFAULT_REMOTE_TIMEOUT_SECONDS,
    leave_retry_attempts: int = DEFAULT_LEAVE_RETRY_ATTEMPTS,
    store: str = "mysql",
) -> Container:
    if store == "memory":
        uow_factory: UnitOfWorkFactory = InMemoryApprovalStore()
    elif store == "mysql":
        if not db_config:
            raise ValueError("db_config is required for the mysql store")
        config = DBConfig(
            host=str(db_config["host"]),
            port=int(db_config.get("port", 3306)),
            user=str(db_config["user"]),
            password=str(db_config["password"]),
            database=str(db_config["database"]),
        )
        uow_factory = MySQLUnitOfWorkFactory(DatabaseConnection(config))
    else:
        raise ValueError(f"Unknown store: {store!r}")

    user_directory = HttpUserDirectory(user_service_url, timeout=remote_timeout)
    leave_ledger = HttpLeaveLedger(
        leave_service_url,
        timeout=remote_timeout,
        retry_attempts=leave_retry_attempts,
    )

    document_service = DocumentService(uow_factory, user_directory)
    approval_service = ApprovalService(uow_factory, user_directory, leave_ledger)

    return Container(
        uow_factory=uow_factory,
        user_directory=user_directory,
        leave_ledger=leave_ledger,
        document_service=document_service,
        approval_service=approval_service,
    )
