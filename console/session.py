"""
Warden - Panel Session
========================
Owns the process-wide console state and wires it together.

One PanelSession exists per console process. It holds:
    - the AlertQueue and its Notifier (the single notification stream)
    - the ConsoleNavigator (the browser's route, as reported over /ws)
    - the ApiClient used for every backend call, with the login redirect
      policy attached
    - the in-memory file store and the page route table

Every change of the visible alert is forwarded to all browsers through the
WebSocket manager.

Usage:
    session = PanelSession(config, ws_manager, token=token)
    alive = await session.api.ping()
    status = session.status
    await session.close()
"""

import asyncio
import logging
from typing import Any

import httpx

from client.alerts import AlertMessage, AlertQueue, Notifier, Severity
from client.api import ApiClient
from client.clock import LoopScheduler
from client.errors import ApiError, ClientError, RemoteFailure, SessionExpired, Unreachable
from client.navigation import LoginRedirect
from client.remote_fs import PseudoRemoteFs
from client.routes import default_routes
from console.websocket import WebSocketManager

logger = logging.getLogger(__name__)


class ConsoleNavigator:
    """
    Navigator backed by the connected browsers.

    The route is whatever a browser last reported; replace() records the new
    route immediately and broadcasts a "navigate" event.
    """

    def __init__(self, ws_manager: WebSocketManager, route: str = "/"):
        self.ws = ws_manager
        self.route = route

    def current_route(self) -> str:
        return self.route

    def report(self, path: str) -> None:
        """Called when a browser tells us where it is."""
        self.route = path

    async def replace(self, path: str) -> None:
        self.route = path
        await self.ws.send_navigate(path)


class PanelSession:
    """
    Bridge between the web console and the backend client.

    Attributes:
        ws:             WebSocket manager for broadcasting to browsers.
        queue:          The process-wide AlertQueue.
        notifier:       Notifier bound to the queue.
        navigator:      ConsoleNavigator used by the login redirect.
        login_redirect: Session-expired policy handed to the ApiClient.
        api:            ApiClient for backend calls.
        files:          File browser stub.
        routes:         Page route table.
    """

    def __init__(
        self,
        config: dict,
        ws_manager: WebSocketManager,
        token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        scheduler=None,
    ):
        backend = config["backend"]
        alerts = config["alerts"]
        login_route = config["routes"]["login"]

        self.ws = ws_manager
        self.backend_url = backend["url"]
        self.queue = AlertQueue(scheduler or LoopScheduler())
        self.notifier = Notifier(
            self.queue,
            duration=alerts["duration"],
            fast_duration=alerts["fast_duration"],
            urgent_duration=alerts["urgent_duration"],
        )
        self.navigator = ConsoleNavigator(ws_manager)
        self.login_redirect = LoginRedirect(self.navigator, login_route)
        self.files = PseudoRemoteFs()
        self.routes = default_routes(login_route)
        self.api = ApiClient(
            self.backend_url,
            on_session_expired=self.login_redirect,
            notifier=self.notifier,
            ping_path=backend["ping_path"],
            timeout=backend["timeout"],
            token=token,
            transport=transport,
        )

        self._tasks: set[asyncio.Task] = set()
        self.queue.subscribe(self._on_alert)

    @property
    def status(self) -> dict[str, Any]:
        """Snapshot of the session for the status endpoint."""
        return {
            "backend": self.backend_url,
            "route": self.navigator.route,
            "alerts": self.queue.snapshot(),
            "ws_clients": self.ws.client_count,
        }

    def report_failure(self, err: ApiError) -> None:
        """Turn a backend failure into a danger alert."""
        self.notifier.notify(alert_key(err), Severity.DANGER)

    async def close(self) -> None:
        await self.api.close()

    def _on_alert(self, alert: AlertMessage | None) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Without a running loop no browser can be connected
            return

        task = loop.create_task(self.ws.send_alert(alert))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


def alert_key(err: ApiError) -> str:
    """Lang key describing a backend failure."""
    if isinstance(err, SessionExpired):
        return "auth.expired"
    if isinstance(err, ClientError):
        return "request.rejected"
    if isinstance(err, RemoteFailure):
        return err.message or "_"
    if isinstance(err, Unreachable):
        return "server.unreachable"
    return "_"
