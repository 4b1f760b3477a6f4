"""
Warden - Client Package
=========================
Everything the console needs to talk to the management backend and to keep
the user informed.

Architecture:
    alerts.py     -> AlertQueue (single visible alert + FIFO backlog) and Notifier
    clock.py      -> Timer sources for the queue (asyncio loop / manual)
    api.py        -> ApiClient: response interceptor and envelope decoding
    errors.py     -> SessionExpired / ClientError / RemoteFailure / Unreachable
    navigation.py -> Navigator interface and the login redirect policy
    endpoints.py  -> Typed backend calls (system info, instances, auth, user)
    lang.py       -> Localization tables for alert and error keys
    routes.py     -> Page route table
    remote_fs.py  -> In-memory file browser stub
    units.py      -> Memory size formatting

Usage:
    from client import AlertQueue, ApiClient, LoginRedirect, Notifier

    # inside a running event loop
    queue = AlertQueue()
    notifier = Notifier(queue)
    api = ApiClient(backend_url,
                    on_session_expired=LoginRedirect(navigator),
                    notifier=notifier)
"""

from client.alerts import AlertMessage, AlertQueue, Notifier, Severity
from client.api import ApiClient, Envelope
from client.errors import ApiError, ClientError, RemoteFailure, SessionExpired, Unreachable
from client.navigation import LoginRedirect, MemoryNavigator

__all__ = [
    "AlertMessage",
    "AlertQueue",
    "Notifier",
    "Severity",
    "ApiClient",
    "Envelope",
    "ApiError",
    "ClientError",
    "RemoteFailure",
    "SessionExpired",
    "Unreachable",
    "LoginRedirect",
    "MemoryNavigator",
]
