"""Exceptions raised by the chunk server."""

from __future__ import annotations


class ChunkServerError(Exception):
    """Base class for chunk server errors."""


class MalformedNameError(ChunkServerError, ValueError):
    """A request name does not follow the prefix/command/.../chunk layout."""
