"""
Warden - Page Route Table
===========================
Pages of the console and their navigation metadata. Hidden pages (login)
are reachable but left out of the navigation bar.
"""

from dataclasses import dataclass

from client.navigation import LOGIN_ROUTE


@dataclass
class RouteInfo:
    name: str
    hidden: bool = False
    disabled: bool = False


class RouteTable:
    """Ordered page table built with chained add() calls."""

    def __init__(self):
        self.routes: dict[str, RouteInfo] = {}

    def add(self, path: str, name: str, hidden: bool = False, disabled: bool = False) -> "RouteTable":
        self.routes[path] = RouteInfo(name=name, hidden=hidden, disabled=disabled)
        return self

    def hide(self, path: str) -> None:
        self.routes[path].hidden = True

    def show(self, path: str) -> None:
        self.routes[path].hidden = False

    def visible(self) -> dict[str, RouteInfo]:
        """Routes that belong in the navigation bar."""
        return {path: info for path, info in self.routes.items() if not info.hidden}


def default_routes(login_route: str = LOGIN_ROUTE) -> RouteTable:
    return (
        RouteTable()
        .add("/", "nav.home")
        .add("/instances", "nav.instances")
        .add("/files", "nav.files")
        .add("/system", "nav.system")
        .add(login_route, "form.login", hidden=True)
    )
