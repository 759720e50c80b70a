from __future__ import annotations

from enum import Enum


class DomainError(Exception):
    """Base exception for business rule violations."""


class ErrorCode(Enum):
    """Stable error kinds surfaced to callers: (status, code, message)."""

    DOCUMENT_NOT_FOUND = (404, "D001", "Document does not exist")
    MEMBER_NOT_FOUND = (404, "M001", "Member does not exist")
    NOT_DRAFTER = (403, "D002", "Only the drafter can perform this action")
    NO_READ_AUTHORIZATION = (403, "D003", "You are not allowed to read this document")
    ALREADY_SUBMIT = (400, "D004", "Document has already been submitted")
    APPROVER_REQUIRED = (400, "L001", "Document has no first approver")
    CANNOT_CANCEL_SUBMIT = (400, "D005", "Submission can no longer be cancelled")
    NOT_MATCH_APPROVER = (403, "L002", "You are not the approver for the current step")
    ALREADY_PROCESS = (400, "L003", "This approval step has already been processed")
    ANNUAL_LEAVE_FAILURE = (502, "A001", "Annual leave could not be deducted")
    INVALID_APPROVER_COUNT = (400, "L004", "Invalid number of approvers")
    DUPLICATE_APPROVER = (400, "L005", "The same approver is listed more than once")
    DRAFTER_EQUALS_APPROVER = (400, "L006", "The drafter cannot be an approver")
    INVALID_VACATION_PERIOD = (400, "D006", "Vacation end date must not be before its start date")
    INVALID_INPUT = (400, "C001", "Invalid input")

    def __init__(self, status: int, code: str, message: str):
        self.status = status
        self.code = code
        self.message = message


class BusinessError(DomainError):
    """Raised when a workflow rule rejects an operation."""

    def __init__(self, error_code: ErrorCode, detail: str | None = None):
        self.error_code = error_code
        self.detail = detail
        super().__init__(detail or error_code.message)

    @property
    def status(self) -> int:
        return self.error_code.status

    @property
    def code(self) -> str:
        return self.error_code.code


class IllegalTransitionError(DomainError):
    """Raised when a status change is not allowed by the state machine."""


class RemoteServiceError(DomainError):
    """Raised when a remote collaborator call fails (timeout, non-2xx, bad payload)."""
