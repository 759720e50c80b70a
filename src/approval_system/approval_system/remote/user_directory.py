from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from ..core.constants import DEFAULT_REMOTE_TIMEOUT_SECONDS, UNKNOWN_USER_NAME
from ..core.exceptions import RemoteServiceError

logger = logging.getLogger(__name__)


class UserDirectory(Protocol):
    def get_display_name(self, member_id: int) -> str:
        raise NotImplementedError

    def exists(self, member_id: int) -> bool:
        raise NotImplementedError


class HttpUserDirectory(UserDirectory):
    """Client for the member service.

    ``GET {base_url}/users/{id}`` answers ``{"data": {"user": {"name": ...}}}``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = DEFAULT_REMOTE_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self._timeout = float(timeout)
        self._session = session or requests.Session()

    def _fetch(self, member_id: int) -> requests.Response:
        url = f"{self._base_url}/users/{int(member_id)}"
        try:
            return self._session.get(url, timeout=self._timeout)
        except requests.exceptions.RequestException as e:
            raise RemoteServiceError(f"User service unreachable: {e}") from e

    def get_display_name(self, member_id: int) -> str:
        response = self._fetch(member_id)
        if not 200 <= response.status_code < 300:
            raise RemoteServiceError(f"User service returned {response.status_code} for member {member_id}")
        try:
            payload = response.json()
        except ValueError as e:
            raise RemoteServiceError("User service returned a non-JSON body") from e

        user = ((payload or {}).get("data") or {}).get("user") or {}
        name = user.get("name")
        if not name:
            raise RemoteServiceError(f"User service has no name for member {member_id}")
        return str(name)

    def exists(self, member_id: int) -> bool:
        response = self._fetch(member_id)
        if response.status_code == 404:
            return False
        if not 200 <= response.status_code < 300:
            raise RemoteServiceError(f"User service returned {response.status_code} for member {member_id}")
        logger.debug("Member %s found in user service", member_id)
        return True


def display_name_or_placeholder(users: UserDirectory, member_id: int) -> str:
    """Best-effort name lookup; any failure yields the placeholder name."""
    try:
        return users.get_display_name(int(member_id))
    except Exception as e:
        logger.warning("Display name lookup failed for member %s: %s", member_id, e)
        return UNKNOWN_USER_NAME
