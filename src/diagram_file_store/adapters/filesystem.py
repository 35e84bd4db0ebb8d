"""Filesystem capability injected into the diagram store.

The store only talks to the disk through ``AbstractFileSystem`` so tests can
swap in the in-memory ``FakeFileSystem``. Both implementations raise the same
builtin ``OSError`` subclasses for the same situations.
"""

from abc import ABC, abstractmethod
from pathlib import Path

import anyio
import anyio.lowlevel


class AbstractFileSystem(ABC):
    """Async filesystem operations used by the diagram store."""

    @abstractmethod
    async def exists(self, path: Path) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def is_dir(self, path: Path) -> bool:
        raise NotImplementedError

    @abstractmethod
    async def list_dir(self, path: Path) -> list[str]:
        """Return the names of the entries directly inside ``path``."""
        raise NotImplementedError

    @abstractmethod
    async def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        raise NotImplementedError

    @abstractmethod
    async def write_text(self, path: Path, content: str, encoding: str = "utf-8") -> None:
        """Write ``content`` to ``path``, replacing any existing file.

        Never creates missing parent directories.
        """
        raise NotImplementedError

    @abstractmethod
    async def rename(self, source: Path, destination: Path) -> None:
        raise NotImplementedError

    @abstractmethod
    async def same_file(self, first: Path, second: Path) -> bool:
        """Check whether both paths refer to the same existing file."""
        raise NotImplementedError


class LocalFileSystem(AbstractFileSystem):
    """Local disk access through anyio's worker-thread file API."""

    async def exists(self, path: Path) -> bool:
        return await anyio.Path(path).exists()

    async def is_dir(self, path: Path) -> bool:
        return await anyio.Path(path).is_dir()

    async def list_dir(self, path: Path) -> list[str]:
        return [entry.name async for entry in anyio.Path(path).iterdir()]

    async def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        async with await anyio.open_file(path, encoding=encoding, newline="") as f:
            return await f.read()

    async def write_text(self, path: Path, content: str, encoding: str = "utf-8") -> None:
        async with await anyio.open_file(path, "w", encoding=encoding, newline="") as f:
            await f.write(content)

    async def rename(self, source: Path, destination: Path) -> None:
        await anyio.Path(source).rename(destination)

    async def same_file(self, first: Path, second: Path) -> bool:
        try:
            return await anyio.Path(first).samefile(second)
        except FileNotFoundError:
            return False


class FakeFileSystem(AbstractFileSystem):
    """In-memory filesystem for testing."""

    def __init__(self):
        self._files: dict[Path, str] = {}
        self._dirs: set[Path] = set()
        self._failing_roots: list[Path] = []

    @staticmethod
    def _key(path: Path | str) -> Path:
        return Path(path)

    def add_dir(self, path: Path | str) -> Path:
        """Create ``path`` and all of its parents."""
        key = self._key(path)
        self._dirs.add(key)
        self._dirs.update(key.parents)
        return key

    def add_file(self, path: Path | str, content: str = "") -> Path:
        """Create a file, creating its parent directories as needed."""
        key = self._key(path)
        self.add_dir(key.parent)
        self._files[key] = content
        return key

    def fail_writes_under(self, path: Path | str) -> None:
        """Make every write or rename into ``path`` raise ``PermissionError``."""
        self._failing_roots.append(self._key(path))

    def files(self) -> dict[Path, str]:
        """Snapshot of all stored files."""
        return dict(self._files)

    def _check_writable(self, path: Path) -> None:
        if path.parent not in self._dirs:
            raise FileNotFoundError(f"No such file or directory: '{path}'")
        if path in self._dirs:
            raise IsADirectoryError(f"Is a directory: '{path}'")
        for root in self._failing_roots:
            if path == root or root in path.parents:
                raise PermissionError(f"Permission denied: '{path}'")

    async def exists(self, path: Path) -> bool:
        key = self._key(path)
        return key in self._files or key in self._dirs

    async def is_dir(self, path: Path) -> bool:
        return self._key(path) in self._dirs

    async def list_dir(self, path: Path) -> list[str]:
        key = self._key(path)
        if key in self._files:
            raise NotADirectoryError(f"Not a directory: '{key}'")
        if key not in self._dirs:
            raise FileNotFoundError(f"No such file or directory: '{key}'")
        children = [entry for entry in (*self._files, *self._dirs) if entry.parent == key and entry != key]
        return [entry.name for entry in children]

    async def read_text(self, path: Path, encoding: str = "utf-8") -> str:
        key = self._key(path)
        if key in self._dirs:
            raise IsADirectoryError(f"Is a directory: '{key}'")
        if key not in self._files:
            raise FileNotFoundError(f"No such file or directory: '{key}'")
        await anyio.lowlevel.checkpoint()
        return self._files[key]

    async def write_text(self, path: Path, content: str, encoding: str = "utf-8") -> None:
        key = self._key(path)
        self._check_writable(key)
        await anyio.lowlevel.checkpoint()
        self._files[key] = content

    async def rename(self, source: Path, destination: Path) -> None:
        src = self._key(source)
        dst = self._key(destination)
        if src not in self._files:
            raise FileNotFoundError(f"No such file or directory: '{src}'")
        self._check_writable(dst)
        await anyio.lowlevel.checkpoint()
        self._files[dst] = self._files.pop(src)

    async def same_file(self, first: Path, second: Path) -> bool:
        first_key = self._key(first)
        return first_key in self._files and first_key == self._key(second)
