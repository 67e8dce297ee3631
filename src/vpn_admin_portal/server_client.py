"""
HTTP client for the VPN server API.

PURPOSE: Issue GET/POST calls to the remote server API and unwrap replies.
AI CONTEXT: The only module that talks to the network. Everything else
receives plain Python data from here.

WIRE FORMAT:
    GET  {base}/{operation}?key=value        (reads)
    POST {base}/{operation}  key=value form  (writes)

    Reply: {"<operation>": {"ok": true, "data": <value>}}
       or  {"<operation>": {"ok": false, "error": "<message>"}}

ERROR HANDLING STRATEGY:
- Transport errors, non-2xx statuses, bad JSON, a missing envelope,
  "ok": false and data of an unexpected type all raise ServerClientError
- No retries; the caller decides how to surface the failure

USAGE:
    client = ServerClient("https://vpn.example.org/vpn-server-api/api.php",
                          "vpn-admin-portal", "secret")
    profiles = client.get_require_mapping("profile_list")
    client.post("disable_user", {"user_id": "alice"})
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import httpx

__all__ = ["ServerClient", "ServerClientError"]

logger = logging.getLogger(__name__)

Params = Mapping[str, str]


class ServerClientError(RuntimeError):
    """Raised when a server API call fails or returns unexpected data."""

    def __init__(self, operation: str, message: str) -> None:
        super().__init__(f"{operation}: {message}")
        self.operation = operation


class ServerClient:
    """
    Synchronous JSON-over-HTTP client for the server API.

    DESIGN:
    - One httpx.Client per instance, reused for connection pooling
    - Read-only after construction, safe to share between requests
    - Typed accessors (get_require_*) turn shape mismatches into errors
      close to the call site instead of deep inside a template

    THREAD SAFETY:
    httpx.Client is thread-safe for concurrent requests, so the instance
    can serve FastAPI's worker threads.
    """

    def __init__(
        self,
        base_uri: str,
        user: str,
        password: str,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client for a server API endpoint.

        Business context: The server API owns all VPN state. The portal
        authenticates to it as a service account with HTTP Basic, using
        credentials distinct from any administrator's.

        Args:
            base_uri: Base URI; operation names are appended as path
                segments (e.g. ``{base_uri}/profile_list``).
            user: Service account name for HTTP Basic.
            password: Service account password.
            timeout: Seconds before a call fails. None waits forever.
            transport: Optional httpx transport. Tests pass an
                httpx.MockTransport to avoid network I/O.

        Example:
            >>> client = ServerClient("http://localhost/api.php", "portal", "pw")
            >>> client.base_uri
            'http://localhost/api.php'
        """
        self.base_uri = base_uri.rstrip("/")
        self._client = httpx.Client(
            base_url=self.base_uri + "/",
            auth=(user, password),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> ServerClient:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # =========================================================================
    # RAW CALLS
    # =========================================================================

    def get(self, operation: str, params: Params | None = None) -> Any:
        """
        Call a read operation and return its unwrapped data.

        Args:
            operation: Server API operation name, e.g. "user_list".
            params: Optional query parameters.

        Returns:
            The "data" member of the reply, of whatever JSON type.

        Raises:
            ServerClientError: On any transport, HTTP or envelope failure.

        Example:
            >>> client.get("stats")
            {'generated_at': 1700000000, 'profiles': {...}}
        """
        return self._send("GET", operation, params)

    def post(self, operation: str, params: Params | None = None) -> Any:
        """
        Call a write operation with form-encoded parameters.

        Args:
            operation: Server API operation name, e.g. "disable_user".
            params: Form parameters.

        Returns:
            The "data" member of the reply (often a boolean).

        Raises:
            ServerClientError: On any transport, HTTP or envelope failure.
        """
        logger.info("Server API call: %s %s", operation, dict(params or {}))
        return self._send("POST", operation, params)

    # =========================================================================
    # TYPED ACCESSORS
    # =========================================================================

    def get_require_list(self, operation: str, params: Params | None = None) -> list[Any]:
        data = self.get(operation, params)
        if not isinstance(data, list):
            raise ServerClientError(operation, f"expected a list, got {type(data).__name__}")
        return data

    def get_require_mapping(
        self, operation: str, params: Params | None = None
    ) -> dict[str, Any]:
        data = self.get(operation, params)
        # The server's JSON encoder cannot tell an empty object from an
        # empty array and always emits [].
        if data == []:
            return {}
        if not isinstance(data, dict):
            raise ServerClientError(operation, f"expected an object, got {type(data).__name__}")
        return data

    def get_require_bool(self, operation: str, params: Params | None = None) -> bool:
        data = self.get(operation, params)
        if not isinstance(data, bool):
            raise ServerClientError(operation, f"expected a boolean, got {type(data).__name__}")
        return data

    def get_optional_list(
        self, operation: str, params: Params | None = None
    ) -> list[Any] | None:
        """
        Call an operation that answers with a list or ``false``.

        The server API signals "nothing found" with ``false`` rather than
        an empty list for some operations (e.g. "log"). This accessor maps
        that to None so callers can tell it apart from a malformed reply.

        Args:
            operation: Server API operation name.
            params: Optional query parameters.

        Returns:
            The list, or None when the server answered ``false``.

        Raises:
            ServerClientError: If the data is neither a list nor ``false``.

        Example:
            >>> client.get_optional_list("log", {"date_time": "...", "ip_address": "10.0.0.2"})
            None
        """
        data = self.get(operation, params)
        if data is False:
            return None
        if not isinstance(data, list):
            raise ServerClientError(
                operation, f"expected a list or false, got {type(data).__name__}"
            )
        return data

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _send(self, method: str, operation: str, params: Params | None) -> Any:
        try:
            if method == "GET":
                response = self._client.get(operation, params=dict(params or {}))
            else:
                response = self._client.post(operation, data=dict(params or {}))
        except httpx.HTTPError as exc:
            raise ServerClientError(operation, f"request failed: {exc}") from exc

        if response.status_code >= 400:
            raise ServerClientError(
                operation, f"server API responded with status {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ServerClientError(operation, "server API returned invalid JSON") from exc

        return self._unwrap(operation, payload)

    @staticmethod
    def _unwrap(operation: str, payload: Any) -> Any:
        envelope = payload.get(operation) if isinstance(payload, dict) else None
        if not isinstance(envelope, dict) or "ok" not in envelope:
            raise ServerClientError(operation, "unexpected response envelope")
        if envelope["ok"] is not True:
            raise ServerClientError(operation, str(envelope.get("error", "unknown error")))
        return envelope.get("data")
