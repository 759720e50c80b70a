from __future__ import annotations

from datetime import datetime


def now_local() -> datetime:
    """Naive local time used for ``created_at``, ``updated_at`` and ``processed_at``."""
    return datetime.now()
