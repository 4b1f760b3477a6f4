"""
Warden - Navigation and Login Redirect
========================================
The interceptor in client/api.py never talks to a router directly. It gets a
session-expired policy at construction time, and the policy in turn works
against a small navigator interface:

    current_route() -> str        the route the user is looking at
    await replace(path)           send the user somewhere else

LoginRedirect is the standard policy: on session expiry, send the user to the
login page with a ?next= parameter so they come back after logging in, unless
they are already on the login page.
"""

import logging
from typing import Protocol
from urllib.parse import urlencode

logger = logging.getLogger(__name__)

LOGIN_ROUTE = "/login"


class Navigator(Protocol):
    def current_route(self) -> str: ...

    async def replace(self, path: str) -> None: ...


class MemoryNavigator:
    """
    Navigator that only remembers where it has been.

    Used by the CLI health check and by tests.

    Attributes:
        history: Every route passed to replace(), oldest first.
    """

    def __init__(self, route: str = "/"):
        self._route = route
        self.history: list[str] = []

    def current_route(self) -> str:
        return self._route

    def go(self, path: str) -> None:
        """Move to a route without recording it as a replacement."""
        self._route = path

    async def replace(self, path: str) -> None:
        self.history.append(path)
        self._route = path


def targets_route(route: str, base: str) -> bool:
    """True if `route` points at `base` (query string and trailing slash ignored)."""
    path = route.split("?", 1)[0].split("#", 1)[0].rstrip("/") or "/"
    return path == (base.rstrip("/") or "/")


class LoginRedirect:
    """
    Session-expired policy that redirects to the login route.

    The guard reads the navigator's route at call time, so several 401s
    resolved back to back only redirect once as long as the navigator updates
    its route on replace(). Replies that arrive before that update each
    redirect (see DESIGN.md, open questions).

    Attributes:
        navigator:   Navigator to read and replace the route on.
        login_route: Path of the login page.
    """

    def __init__(self, navigator: Navigator, login_route: str = LOGIN_ROUTE):
        self.navigator = navigator
        self.login_route = login_route

    def target_for(self, route: str) -> str:
        """Login URL that returns the user to `route` afterwards."""
        return f"{self.login_route}?{urlencode({'next': route}, safe='/')}"

    async def __call__(self) -> bool:
        """
        Redirect to the login page if needed.

        Returns:
            True if a redirect was issued.
        """
        route = self.navigator.current_route()
        if targets_route(route, self.login_route):
            return False

        target = self.target_for(route)
        logger.info("Session expired on %s, redirecting to %s", route, target)
        await self.navigator.replace(target)
        return True
