"""Status transition tables for documents and approval lines.

Every status write goes through these functions; an edge missing from the
table raises ``IllegalTransitionError``.
"""

from __future__ import annotations

from ..core.enums import DocStatus, LineStatus
from ..core.exceptions import IllegalTransitionError

DOC_TRANSITIONS: dict[DocStatus, frozenset[DocStatus]] = {
    DocStatus.TEMP: frozenset({DocStatus.IN_PROGRESS}),
    DocStatus.IN_PROGRESS: frozenset({DocStatus.TEMP, DocStatus.APPROVED, DocStatus.REJECTED}),
    DocStatus.APPROVED: frozenset(),
    DocStatus.REJECTED: frozenset(),
}

# WAIT -> WAIT and PENDING -> PENDING are allowed so submit can force-write the
# first line and reset leftovers without caring about their exact state.
LINE_TRANSITIONS: dict[LineStatus, frozenset[LineStatus]] = {
    LineStatus.PENDING: frozenset({LineStatus.PENDING, LineStatus.WAIT}),
    LineStatus.WAIT: frozenset({LineStatus.WAIT, LineStatus.PENDING, LineStatus.APPROVED, LineStatus.REJECTED}),
    LineStatus.APPROVED: frozenset(),
    LineStatus.REJECTED: frozenset(),
}


def next_doc_status(current: DocStatus, target: DocStatus) -> DocStatus:
    if target not in DOC_TRANSITIONS[current]:
        raise IllegalTransitionError(f"Document cannot move from {current.value} to {target.value}")
    return target


def next_line_status(current: LineStatus, target: LineStatus) -> LineStatus:
    if target not in LINE_TRANSITIONS[current]:
        raise IllegalTransitionError(f"Approval line cannot move from {current.value} to {target.value}")
    return target

