from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional, Protocol

import requests

from ..core.constants import DEFAULT_LEAVE_RETRY_ATTEMPTS, DEFAULT_REMOTE_TIMEOUT_SECONDS
from ..core.exceptions import RemoteServiceError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LeaveDecreaseRequest:
    doc_id: int
    member_id: int
    start_date: date
    end_date: date
    approver_id: int

    def to_payload(self) -> dict:
        # docId lets the attendance service drop a repeated decrease for the same document.
        return {
            "docId": int(self.doc_id),
            "memberId": int(self.member_id),
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "approverId": int(self.approver_id),
        }


class LeaveLedger(Protocol):
    def decrease(self, request: LeaveDecreaseRequest) -> None:
        """Deduct the leave range from the member's balance; raise on any failure."""

        raise NotImplementedError


def _is_success(response) -> bool:
    return 200 <= response.status_code < 300


class HttpLeaveLedger(LeaveLedger):
    """Client for the attendance service's annual-leave endpoint.

    Every attempt is bounded by ``timeout``. ``retry_attempts`` extra attempts
    are made only when the POST cannot have been applied: the connection was
    never established, or the service answered 5xx. A read timeout, 3xx or 4xx
    answer fails at once.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_REMOTE_TIMEOUT_SECONDS,
        retry_attempts: int = DEFAULT_LEAVE_RETRY_ATTEMPTS,
        session: Optional[requests.Session] = None,
    ):
        self._url = f"{base_url.rstrip('/')}/leave/annual/decrease"
        self._timeout = float(timeout)
        self._attempts = 1 + max(0, int(retry_attempts))
        self._session = session or requests.Session()

    def decrease(self, request: LeaveDecreaseRequest) -> None:
        payload = request.to_payload()
        for attempt in range(1, self._attempts + 1):
            last = attempt == self._attempts
            try:
                response = self._session.post(self._url, json=payload, timeout=self._timeout)
            except (requests.exceptions.ConnectTimeout, requests.exceptions.ConnectionError) as e:
                # ReadTimeout is not a ConnectionError, so it never lands here.
                logger.warning("Leave ledger attempt %s/%s could not connect: %s", attempt, self._attempts, e)
                if last:
                    raise RemoteServiceError(f"Leave ledger unreachable after {attempt} attempt(s): {e}") from e
                continue
            except requests.exceptions.RequestException as e:
                raise RemoteServiceError(f"Leave ledger call failed: {e}") from e

            if _is_success(response):
                logger.info("Annual leave decreased for member %s (document %s)", request.member_id, request.doc_id)
                return

            logger.warning("Leave ledger attempt %s/%s answered %s", attempt, self._attempts, response.status_code)
            if response.status_code < 500 or last:
                raise RemoteServiceError(f"Leave ledger answered HTTP {response.status_code}")