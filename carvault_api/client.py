"""CarVault API client.

A thin wrapper around the HTTP API for front ends, scripts and tests
against a running server.  It uses the ``requests`` library and keeps
the bearer token obtained from :meth:`CarVaultClient.login` (or
:meth:`CarVaultClient.register`) for subsequent calls.

Every public method returns a tuple ``(data, error)``: ``data`` holds
the parsed JSON body on success and ``error`` is ``None``; on failure
``data`` is ``None`` and ``error`` is a dictionary with the keys
``status_code``, ``kind`` and ``message`` taken from the API's error
body.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import requests


logger = logging.getLogger(__name__)

Result = Tuple[Optional[Any], Optional[Dict[str, Any]]]


class CarVaultClient:
    """Client for the CarVault API (version 1)."""

    def __init__(
        self,
        *,
        base_url: str,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 15,
    ) -> None:
        """Initialise the API client.

        Args:
            base_url: Server root, e.g. ``http://localhost:8000``.  The
                ``/api/v1`` prefix is added by the client.
            token: Optional bearer token from an earlier login.
            session: Optional requests session.  If not supplied a
                session will be created automatically.
            timeout: Seconds to wait for each response.
        """
        self.base_url = base_url.rstrip("/") + "/api/v1"
        self.token = token
        self.session = session or requests.Session()
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Low level HTTP helpers
    # ------------------------------------------------------------------
    def _request(self, method: str, path: str, *, json_body: Any | None = None) -> Result:
        url = f"{self.base_url}{path}"
        headers: Dict[str, str] = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        try:
            logger.debug("Sending %s request to %s", method, url)
            response = self.session.request(
                method=method,
                url=url,
                json=json_body,
                headers=headers,
                timeout=self.timeout,
            )
            response.raise_for_status()
            if response.content:
                return response.json(), None
            return None, None
        except requests.HTTPError as exc:
            return None, self._error_from_response(exc.response, exc)
        except requests.RequestException as exc:
            logger.error("API request failed: %s", exc)
            return None, {"status_code": None, "kind": "ConnectionError", "message": str(exc)}

    @staticmethod
    def _error_from_response(response: Optional[requests.Response], exc: Exception) -> Dict[str, Any]:
        status = response.status_code if response is not None else None
        kind = "HTTPError"
        message = ""
        if response is not None:
            try:
                body = response.json()
            except ValueError:
                message = response.text
            else:
                if isinstance(body, dict):
                    kind = body.get("kind", kind)
                    message = body.get("message") or body.get("detail") or ""
        if not message:
            message = str(exc)
        logger.error("API request failed (%s %s): %s", status, kind, message)
        return {"status_code": status, "kind": kind, "message": message}

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------
    def register(self, name: str, email: str, password: str) -> Result:
        """Create an account; on success the returned token is kept."""
        data, error = self._request(
            "POST", "/auth/register", json_body={"name": name, "email": email, "password": password}
        )
        if data:
            self.token = data["token"]
        return data, error

    def login(self, email: str, password: str) -> Result:
        data, error = self._request("POST", "/auth/login", json_body={"email": email, "password": password})
        if data:
            self.token = data["token"]
        return data, error

    def me(self) -> Result:
        return self._request("GET", "/auth/me")

    # ------------------------------------------------------------------
    # Cars
    # ------------------------------------------------------------------
    def list_cars(self) -> Result:
        return self._request("GET", "/cars")

    def get_car(self, car_id: str) -> Result:
        return self._request("GET", f"/cars/{car_id}")

    def create_car(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/cars", json_body=payload)

    def update_car(self, car_id: str, changes: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/cars/{car_id}", json_body=changes)

    def delete_car(self, car_id: str) -> Result:
        return self._request("DELETE", f"/cars/{car_id}")

    def car_summary(self, car_id: str) -> Result:
        return self._request("GET", f"/cars/{car_id}/summary")

    # ------------------------------------------------------------------
    # Maintenance and expenses
    # ------------------------------------------------------------------
    def list_maintenance(self, car_id: Optional[str] = None) -> Result:
        """List all maintenance records, or only those of ``car_id``."""
        path = f"/maintenance/car/{car_id}" if car_id else "/maintenance"
        return self._request("GET", path)

    def get_maintenance(self, record_id: str) -> Result:
        return self._request("GET", f"/maintenance/{record_id}")

    def create_maintenance(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/maintenance", json_body=payload)

    def update_maintenance(self, record_id: str, changes: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/maintenance/{record_id}", json_body=changes)

    def delete_maintenance(self, record_id: str) -> Result:
        return self._request("DELETE", f"/maintenance/{record_id}")

    def list_expenses(self, car_id: Optional[str] = None) -> Result:
        """List all expenses, or only those of ``car_id``."""
        path = f"/expenses/car/{car_id}" if car_id else "/expenses"
        return self._request("GET", path)

    def get_expense(self, expense_id: str) -> Result:
        return self._request("GET", f"/expenses/{expense_id}")

    def create_expense(self, payload: Dict[str, Any]) -> Result:
        return self._request("POST", "/expenses", json_body=payload)

    def update_expense(self, expense_id: str, changes: Dict[str, Any]) -> Result:
        return self._request("PUT", f"/expenses/{expense_id}", json_body=changes)

    def delete_expense(self, expense_id: str) -> Result:
        return self._request("DELETE", f"/expenses/{expense_id}")

    # ------------------------------------------------------------------
    # Reports
    # ------------------------------------------------------------------
    def expense_categories(self) -> Result:
        return self._request("GET", "/expenses/summary/categories")

    def overview(self) -> Result:
        return self._request("GET", "/statistics/overview")
