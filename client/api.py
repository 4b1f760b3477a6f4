"""
Warden - Backend API Client
=============================
Every request the console makes to the management backend goes through
ApiClient, which classifies the reply exactly once:

    no response             -> Unreachable
    401                     -> session-expired policy, then SessionExpired
    204                     -> None (body is not read)
    other 4xx               -> ClientError(status)
    anything else           -> JSON envelope:
                                 success=true  -> envelope.result
                                 success=false -> RemoteFailure(message, cause)

Envelope format (produced by the backend):
    {
        "success": true,
        "result": { ... },          # on success
        "message": "auth.invalid",  # on failure, usually a lang key
        "err_cause": "..."          # optional
    }

Usage:
    api = ApiClient("http://127.0.0.1:2500",
                    on_session_expired=LoginRedirect(navigator),
                    notifier=notifier)
    info = await api.get("/api/v1/info")
    alive = await api.ping()
    await api.close()
"""

import logging
from typing import Any, Awaitable, Callable

import httpx
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from client.alerts import Notifier, Severity
from client.errors import ClientError, RemoteFailure, SessionExpired, Unreachable

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
PING_PATH = f"{API_PREFIX}/auth/ping"


class Envelope(BaseModel):
    """Structured reply of every backend endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    result: Any = None
    message: str | None = None
    cause: str | None = Field(
        default=None,
        validation_alias=AliasChoices("err_cause", "cause"),
    )


class ApiClient:
    """
    Response interceptor around an httpx.AsyncClient.

    Attributes:
        on_session_expired: Async callable run on every 401 (see
                            client/navigation.py LoginRedirect). Its
                            failures are logged, never raised.
        notifier:           Receives the "server unreachable" alert from
                            ping(). Optional.
        ping_path:          Liveness endpoint used by ping().
    """

    def __init__(
        self,
        base_url: str = "",
        *,
        on_session_expired: Callable[[], Awaitable[Any]] | None = None,
        notifier: Notifier | None = None,
        ping_path: str = PING_PATH,
        timeout: float = 10.0,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.on_session_expired = on_session_expired
        self.notifier = notifier
        self.ping_path = ping_path

        # Cookies set by the backend (the session) persist in the client jar
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers={"Accept": "application/json", "Cache-Control": "no-cache"},
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        self.set_token(token)

    def set_token(self, token: str | None) -> None:
        """Send token as a Bearer credential on later requests; None stops sending one."""
        if token:
            self._client.headers["Authorization"] = f"Bearer {token}"
        else:
            self._client.headers.pop("Authorization", None)

    # -- Intercepted requests --------------------------------------------------

    async def request(self, method: str, path: str, body: Any = None) -> Any:
        """
        Send a request and classify the reply.

        Args:
            method: HTTP method.
            path:   Path relative to the backend base URL.
            body:   JSON-serializable payload; strings are sent verbatim.

        Returns:
            The envelope's result, or None for 204 replies.

        Raises:
            SessionExpired, ClientError, RemoteFailure, Unreachable
        """
        response = await self._send(method, path, body)
        status = response.status_code

        if status == 401:
            await self._session_expired()
            raise SessionExpired(response.text)

        if status == 204:
            return None

        if 400 <= status < 500:
            logger.debug("%s %s rejected with %d", method, path, status)
            raise ClientError(status)

        envelope = self._decode(response)
        if envelope.success:
            return envelope.result
        raise RemoteFailure(envelope.message, envelope.cause)

    async def get(self, path: str) -> Any:
        return await self.request("GET", path)

    async def post(self, path: str, body: Any = None) -> Any:
        return await self.request("POST", path, body)

    async def put(self, path: str, body: Any = None) -> Any:
        return await self.request("PUT", path, body)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    # -- Raw requests ----------------------------------------------------------

    async def raw_get(self, path: str) -> Envelope:
        """GET and decode the envelope without checking status or success."""
        return self._decode(await self._send("GET", path))

    async def raw_post(self, path: str, body: Any = None) -> Envelope:
        """POST and decode the envelope without checking status or success."""
        return self._decode(await self._send("POST", path, body))

    # -- Health check ----------------------------------------------------------

    async def ping(self) -> bool:
        """
        Check that the backend answers at all.

        Returns:
            True if a reply arrived and its body is JSON. On False an urgent
            "server.unreachable" alert is raised through the notifier.
        """
        try:
            response = await self._send("GET", self.ping_path)
            response.json()
        except (Unreachable, ValueError) as e:
            logger.warning("Backend health check failed: %s", e)
            if self.notifier is not None:
                self.notifier.urgent("server.unreachable", Severity.DANGER)
            return False
        return True

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    # -- Internal helpers ------------------------------------------------------

    async def _send(self, method: str, path: str, body: Any = None) -> httpx.Response:
        kwargs: dict[str, Any] = {}
        if isinstance(body, str):
            kwargs["content"] = body
            kwargs["headers"] = {"Content-Type": "application/json"}
        elif body is not None:
            kwargs["json"] = body

        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.TransportError as e:
            logger.warning("Backend unreachable: %s %s (%s)", method, path, e)
            raise Unreachable(str(e)) from e

    async def _session_expired(self) -> None:
        if self.on_session_expired is None:
            return
        try:
            await self.on_session_expired()
        except Exception:
            logger.exception("Login redirect failed")

    @staticmethod
    def _decode(response: httpx.Response) -> Envelope:
        try:
            return Envelope.model_validate_json(response.content)
        except ValidationError as e:
            raise RemoteFailure("response.invalid", str(e)) from e
