"""
Warden - Remote Filesystem Stub
=================================
In-memory stand-in for the instance file browser until the backend exposes
real file routes. Paths are plain strings; "directories" are prefixes.
"""

from dataclasses import dataclass


@dataclass
class RemoteDirEntry:
    name: str
    is_dir: bool


class PseudoRemoteFs:
    """Flat in-memory file store with the async interface of a remote one."""

    def __init__(self):
        self._files: dict[str, bytes] = {}

    async def list(self, path: str) -> list[RemoteDirEntry]:
        """Entries whose path starts with `path`, named relative to it."""
        return [
            RemoteDirEntry(name=name[len(path):], is_dir=False)
            for name in self._files
            if name.startswith(path)
        ]

    async def get(self, path: str) -> bytes | None:
        return self._files.get(path)

    async def delete(self, path: str) -> bool:
        return self._files.pop(path, None) is not None

    async def upload(self, path: str, data: bytes) -> bool:
        """Store `data` at `path`, replacing any existing file."""
        self._files[path] = data
        return True

    async def move(self, src: str, dst: str) -> bool:
        # Not supported by the stub
        return False
