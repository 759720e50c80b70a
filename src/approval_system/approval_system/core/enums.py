from __future__ import annotations

from enum import Enum


class DocStatus(str, Enum):
    """Lifecycle state of an approval document."""

    TEMP = "TEMP"
    IN_PROGRESS = "IN_PROGRESS"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class LineStatus(str, Enum):
    """State of one approver's slot in the approval chain."""

    PENDING = "PENDING"
    WAIT = "WAIT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ActionType(str, Enum):
    """Actions recorded in the approval history."""

    SUBMIT = "SUBMIT"
    CANCEL = "CANCEL"
    APPROVE = "APPROVE"
    REJECT = "REJECT"
    READ = "READ"
