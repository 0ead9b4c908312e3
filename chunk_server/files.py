"""File-system access for the served directory."""

from __future__ import annotations

import logging
from pathlib import Path

LOG = logging.getLogger("chunk_server.files")


class FileStore:
    """Reads files and listings from a single served directory."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def resolve(self, file_name: str) -> Path | None:
        """Map a requested file name onto a path inside the served directory.

        Returns:
            The path, or None if the name would escape the directory.
        """
        if not file_name or file_name in {".", ".."}:
            return None
        if "/" in file_name or "\\" in file_name or "\0" in file_name:
            return None
        return self.directory / file_name

    def file_exists(self, path: Path) -> bool:
        try:
            return path.is_file()
        except OSError as error:
            LOG.debug("could not stat %s: %s", path, error)
            return False

    def file_size(self, path: Path) -> int | None:
        """Size of the file in bytes, or None if it cannot be stat'ed."""
        try:
            return path.stat().st_size
        except OSError as error:
            LOG.debug("could not stat %s: %s", path, error)
            return None

    def read_window(self, path: Path, offset: int, length: int) -> bytes | None:
        """Read up to ``length`` bytes at ``offset``.

        Returns:
            The bytes read (short or empty near the end of the file), or None
            if the file could not be opened.
        """
        try:
            with path.open("rb") as f:
                f.seek(offset)
                return f.read(length)
        except OSError as error:
            LOG.debug("could not read %s: %s", path, error)
            return None

    def list_directory_entries(self) -> list[str]:
        """Names of the regular files in the served directory, sorted."""
        try:
            entries = [entry.name for entry in self.directory.iterdir() if entry.is_file()]
        except OSError as error:
            LOG.warning("could not list directory %s: %s", self.directory, error)
            return []
        return sorted(entries)

    def directory_listing(self) -> bytes:
        """Serialize the directory listing into one buffer, one name per line."""
        listing = "".join(f"{entry}\n" for entry in self.list_directory_entries())
        return listing.encode("utf-8", "surrogateescape")


class FileOrigin:
    """A file on disk as a chunk origin. Availability and size are re-read on every call."""

    def __init__(self, store: FileStore, path: Path):
        self.store = store
        self.path = path

    def available(self) -> bool:
        return self.store.file_exists(self.path)

    def size(self) -> int | None:
        return self.store.file_size(self.path)

    def read(self, offset: int, length: int) -> bytes | None:
        return self.store.read_window(self.path, offset, length)
