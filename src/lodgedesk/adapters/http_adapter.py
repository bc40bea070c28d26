"""
Booking API client over HTTP.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx

from lodgedesk.clock import format_instant
from lodgedesk.exceptions import (
    AuthenticationError,
    ConflictError,
    IllegalTransitionError,
    NotFoundError,
    ServerValidationError,
    TransportError,
)
from lodgedesk.models import LifecycleAction

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3000/api"


def _error_detail(response: httpx.Response) -> str:
    """Best-effort message from an error body ({"message": ...}, {"error": ...} or text)."""
    try:
        body = response.json()
    except ValueError:
        return response.text.strip()
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if body.get(key):
                return str(body[key])
    return str(body)


class HTTPBookingAdapter:
    """
    Remote collaborator speaking the booking REST API.

    Session cookies are kept by the underlying ``httpx.Client``. An expired
    session (401) is refreshed once through ``/auth/refresh`` and the original
    request replayed once; nothing else is retried.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        timeout: float = 30,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)
        logger.info(f"HTTPBookingAdapter ready for {self.base_url}")

    # ------------------------------------
    # Lifecycle
    # ------------------------------------
    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> HTTPBookingAdapter:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------
    # Transport helpers
    # ------------------------------------
    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {path} failed: {e}")
            raise TransportError(f"Could not reach the booking API: {e}") from e

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        logger.debug(f"{method} {path}")
        response = self._send(method, path, **kwargs)
        if response.status_code == 401 and not path.startswith("/auth/"):
            logger.info("Session expired, refreshing before a single retry")
            refresh = self._send("POST", "/auth/refresh")
            if not refresh.is_success:
                raise AuthenticationError("Session expired and could not be refreshed")
            response = self._send(method, path, **kwargs)
        return response

    def _raise_for_status(
        self, response: httpx.Response, action: Optional[LifecycleAction] = None
    ) -> None:
        if response.is_success:
            return
        code = response.status_code
        detail = _error_detail(response)
        if code == 401:
            raise AuthenticationError(detail or "Not authenticated")
        if code == 404:
            raise NotFoundError(detail or f"{response.request.url} not found")
        if code == 409:
            raise ConflictError(detail or "Concurrent modification detected")
        if code in (400, 422):
            if action is not None:
                raise IllegalTransitionError(None, action.value, detail or None)
            raise ServerValidationError(detail or "Request rejected by the booking API")
        logger.error(f"Booking API answered {code}: {detail}")
        raise TransportError(f"Booking API answered {code}: {detail}", status_code=code)

    def _json(self, response: httpx.Response) -> Any:
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from the booking API: {e}", status_code=response.status_code
            ) from e

    def _call(self, method: str, path: str, **kwargs: Any) -> Any:
        response = self._request(method, path, **kwargs)
        self._raise_for_status(response)
        return self._json(response)

    def _get_optional(self, path: str) -> Optional[Dict[str, Any]]:
        response = self._request("GET", path)
        if response.status_code == 404:
            return None
        self._raise_for_status(response)
        return self._json(response)

    # ------------------------------------
    # Auth
    # ------------------------------------
    def login(self, username: str, password: str) -> Dict[str, Any]:
        response = self._request("POST", "/auth/login", json={"username": username, "password": password})
        if response.status_code in (400, 401):
            raise AuthenticationError("Invalid username or password")
        self._raise_for_status(response)
        return self._json(response)

    def logout(self) -> None:
        self._call("POST", "/auth/logout")

    def get_auth_status(self) -> Dict[str, Any]:
        return self._call("GET", "/auth/status") or {"isAuthenticated": False, "user": None}

    # ------------------------------------
    # Users
    # ------------------------------------
    def list_users(self) -> List[Dict[str, Any]]:
        return self._call("GET", "/users") or []

    def create_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("POST", "/users", json=payload)

    def update_user(self, user_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("PUT", f"/users/{user_id}", json={"id": user_id, **payload})

    def delete_user(self, user_id: int) -> None:
        self._call("DELETE", f"/users/{user_id}")

    # ------------------------------------
    # Rooms
    # ------------------------------------
    def get_room(self, room_id: int) -> Optional[Dict[str, Any]]:
        return self._get_optional(f"/rooms/{room_id}")

    def list_rooms(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"status": status} if status else None
        return self._call("GET", "/rooms", params=params) or []

    def list_available_rooms(self, check_in: datetime, check_out: datetime) -> List[Dict[str, Any]]:
        params = {"checkIn": format_instant(check_in), "checkOut": format_instant(check_out)}
        return self._call("GET", "/rooms/available", params=params) or []

    def create_room(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("POST", "/rooms", json=payload)

    def update_room(self, room_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("PUT", f"/rooms/{room_id}", json=payload)

    def delete_room(self, room_id: int) -> None:
        self._call("DELETE", f"/rooms/{room_id}")

    # ------------------------------------
    # Reservations
    # ------------------------------------
    def create_reservation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("POST", "/reservations", json=payload)

    def get_reservation(self, reservation_id: int) -> Optional[Dict[str, Any]]:
        return self._get_optional(f"/reservations/{reservation_id}")

    def update_reservation(self, reservation_id: int, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("PUT", f"/reservations/{reservation_id}", json=payload)

    def list_reservations(self, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        params = dict(params or {})
        status = params.pop("status", None)
        if status and not params:
            return self._call("GET", "/reservations/status", params={"status": status}) or []

        reservations = self._call("GET", "/reservations", params=params or None) or []
        if status:
            # /reservations does not filter by status
            reservations = [r for r in reservations if r.get("status") == status]
        return reservations

    def transition_reservation(self, reservation_id: int, action: LifecycleAction) -> Dict[str, Any]:
        action = LifecycleAction(action)
        response = self._request("PATCH", f"/reservations/{reservation_id}/{action.value}")
        self._raise_for_status(response, action=action)
        return self._json(response)

    # ------------------------------------
    # Guest registry
    # ------------------------------------
    def list_guests(self) -> List[Dict[str, Any]]:
        return self._call("GET", "/guests") or []

    def create_guest(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self._call("POST", "/guests", json=payload)
