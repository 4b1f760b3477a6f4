from __future__ import annotations

import asyncio

import pytest

from client.navigation import LoginRedirect, MemoryNavigator, targets_route


@pytest.mark.parametrize(
    "route, expected",
    [
        ("/login", True),
        ("/login/", True),
        ("/login?next=/files", True),
        ("/login#top", True),
        ("/", False),
        ("/logins", False),
        ("/instances/login", False),
    ],
)
def test_targets_route(route, expected) -> None:
    assert targets_route(route, "/login") is expected


def test_next_parameter_keeps_slashes_and_escapes_query() -> None:
    redirect = LoginRedirect(MemoryNavigator())
    assert redirect.target_for("/dashboard") == "/login?next=/dashboard"
    assert redirect.target_for("/files?prefix=a b") == "/login?next=/files%3Fprefix%3Da+b"


def test_custom_login_route() -> None:
    navigator = MemoryNavigator("/signin")
    redirect = LoginRedirect(navigator, login_route="/signin")

    assert asyncio.run(redirect()) is False

    navigator.go("/system")
    assert asyncio.run(redirect()) is True
    assert navigator.history == ["/signin?next=/system"]
