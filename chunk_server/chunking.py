"""Fixed-size chunk arithmetic and windowed reads over chunk origins.

Chunk size: 1200 bytes
======================

Every payload is cut into 1200-byte chunks, small enough that a response
message does not get fragmented at the IP layer. The size is part of the
wire contract shared with clients and is therefore not configurable.

The final chunk number is 0-based and never negative: an empty origin still
has exactly one (empty) chunk, numbered 0.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from .names import Name

CHUNK_SIZE = 1200


def chunks_required(data_length: int, chunk_size: int = CHUNK_SIZE) -> int:
    """Number of chunks needed to hold ``data_length`` bytes (at least 1)."""
    chunks = -(-data_length // chunk_size)
    return chunks or 1


def final_chunk_number(data_length: int, chunk_size: int = CHUNK_SIZE) -> int:
    """Index of the last chunk covering ``data_length`` bytes.

    Call this again whenever the origin may have changed size; the value is
    what gets advertised to the requester.
    """
    return max(chunks_required(data_length, chunk_size) - 1, 0)


@dataclass(frozen=True, slots=True)
class Chunk:
    """One named response payload."""

    name: Name
    index: int
    payload: bytes
    final_chunk_number: int

    @property
    def is_final(self) -> bool:
        return self.index == self.final_chunk_number


class ChunkOrigin(Protocol):
    """Byte source that chunks are cut from."""

    def available(self) -> bool: ...

    def size(self) -> int | None: ...

    def read(self, offset: int, length: int) -> bytes | None: ...


class BufferOrigin:
    """In-memory origin, windowed without copying the whole buffer per chunk."""

    def __init__(self, data: bytes):
        self._view = memoryview(data)

    def available(self) -> bool:
        return True

    def size(self) -> int:
        return len(self._view)

    def read(self, offset: int, length: int) -> bytes:
        return self._view[offset : offset + length].tobytes()


def read_chunk(
    origin: ChunkOrigin, index: int, chunk_size: int = CHUNK_SIZE
) -> bytes | None:
    """Read chunk ``index`` from ``origin``.

    Returns:
        Up to ``chunk_size`` bytes starting at ``index * chunk_size``, an
        empty payload past the end, or None if the origin is unavailable.
    """
    if not origin.available():
        return None
    return origin.read(index * chunk_size, chunk_size)
