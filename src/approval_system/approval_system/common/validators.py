from __future__ import annotations

from ..core.exceptions import BusinessError, ErrorCode


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise BusinessError(ErrorCode.INVALID_INPUT, f"{field_name} must not be empty")
    return value.strip()
