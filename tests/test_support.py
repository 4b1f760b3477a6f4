from __future__ import annotations

import asyncio

import pytest

from client.lang import EN, pick_locale, translate
from client.remote_fs import PseudoRemoteFs
from client.routes import default_routes
from client.units import gib, kib, memory_unit_from_k, mib


# -- units ---------------------------------------------------------------------

@pytest.mark.parametrize(
    "value, expected",
    [
        (0, "0 KiB"),
        (None, "0 KiB"),
        (512, "512.000 KiB"),
        (1024, "1024.000 KiB"),
        (2048, "2.000 MiB"),
        (3 * 1024 * 1024, "3.000 GiB"),
        (1536 * 1024 * 1024, "1.500 TiB"),
    ],
)
def test_memory_unit_from_k(value, expected) -> None:
    assert memory_unit_from_k(value) == expected


def test_unit_converters() -> None:
    assert kib(2048) == 2
    assert mib(2 * 1024 * 1024) == 2
    assert gib(1024 ** 3) == 1


# -- lang ----------------------------------------------------------------------

def test_translate() -> None:
    assert translate("auth.invalid") == "Invalid username or password"
    assert translate("nav.home", "fr") == "Home"


@pytest.mark.parametrize("key", ["missing.key", "auth", "auth.invalid.deeper", ""])
def test_translate_unknown_key_gives_bug_string(key) -> None:
    assert translate(key) == EN["_"]


@pytest.mark.parametrize(
    "header, expected",
    [
        (None, "en"),
        ("", "en"),
        ("en-US,en;q=0.9", "en"),
        ("de-DE,de;q=0.9,en;q=0.8", "en"),
        ("fr;q=bad", "en"),
    ],
)
def test_pick_locale(header, expected) -> None:
    assert pick_locale(header) == expected


# -- routes --------------------------------------------------------------------

def test_login_route_is_hidden_from_navigation() -> None:
    routes = default_routes()

    assert "/login" in routes.routes
    assert "/login" not in routes.visible()
    assert routes.visible()["/"].name == "nav.home"


def test_hide_and_show() -> None:
    routes = default_routes()
    routes.hide("/files")
    assert "/files" not in routes.visible()

    routes.show("/login")
    assert "/login" in routes.visible()


# -- remote fs -----------------------------------------------------------------

def test_pseudo_remote_fs() -> None:
    async def scenario():
        fs = PseudoRemoteFs()
        await fs.upload("world/level.dat", b"v1")
        await fs.upload("world/level.dat", b"v2")
        await fs.upload("server.properties", b"motd=hi")

        listing = await fs.list("world/")
        content = await fs.get("world/level.dat")
        missing = await fs.get("nope")
        moved = await fs.move("server.properties", "a")
        deleted = await fs.delete("server.properties")
        deleted_again = await fs.delete("server.properties")
        return listing, content, missing, moved, deleted, deleted_again

    listing, content, missing, moved, deleted, deleted_again = asyncio.run(scenario())
    assert [(e.name, e.is_dir) for e in listing] == [("level.dat", False)]
    assert content == b"v2"
    assert missing is None
    assert moved is False
    assert deleted is True
    assert deleted_again is False
