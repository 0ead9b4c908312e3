"""Segmented names and the positional request-name codec."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING
from urllib.parse import quote, unquote

from .errors import MalformedNameError

if TYPE_CHECKING:
    from collections.abc import Iterator

SCHEME = "lci:"
MAX_CHUNK_INDEX = 2**64 - 1


class SegmentType(enum.Enum):
    LABEL = "name"
    CHUNK = "chunk"


@dataclass(frozen=True, slots=True)
class NameSegment:
    type: SegmentType
    value: str | int

    @classmethod
    def label(cls, token: str) -> NameSegment:
        return cls(SegmentType.LABEL, token)

    @classmethod
    def chunk(cls, index: int) -> NameSegment:
        if not 0 <= index <= MAX_CHUNK_INDEX:
            msg = f"chunk index out of range: {index}"
            raise MalformedNameError(msg)
        return cls(SegmentType.CHUNK, index)

    @classmethod
    def parse(cls, text: str) -> NameSegment:
        """Parse one URI segment (``chunk=3``, ``name=foo`` or ``foo``)."""
        kind, sep, rest = text.partition("=")
        if sep and kind.lower() == SegmentType.CHUNK.value:
            if not (rest.isascii() and rest.isdigit()):
                msg = f"invalid chunk segment {text!r}"
                raise MalformedNameError(msg)
            return cls.chunk(int(rest))
        if sep and kind.lower() == SegmentType.LABEL.value:
            return cls.label(unquote(rest))
        return cls.label(unquote(text))

    def __str__(self) -> str:
        if self.type is SegmentType.CHUNK:
            return f"chunk={self.value}"
        token = quote(str(self.value), safe="")
        if "=" in str(self.value):
            return f"name={token}"
        return token


@dataclass(frozen=True, slots=True)
class Name:
    segments: tuple[NameSegment, ...] = ()

    @classmethod
    def from_uri(cls, uri: str) -> Name:
        """Parse an ``lci:/a/b/chunk=0`` style URI into a Name.

        The scheme is optional. Empty path components are ignored.
        """
        text = uri.strip()
        if text[: len(SCHEME)].lower() == SCHEME:
            text = text[len(SCHEME) :]
        parts = [part for part in text.split("/") if part]
        return cls(tuple(NameSegment.parse(part) for part in parts))

    def append(self, segment: NameSegment) -> Name:
        return Name((*self.segments, segment))

    def startswith(self, prefix: Name) -> bool:
        return self.segments[: len(prefix)] == prefix.segments

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self) -> Iterator[NameSegment]:
        return iter(self.segments)

    def __getitem__(self, index: int) -> NameSegment:
        return self.segments[index]

    def __str__(self) -> str:
        return SCHEME + "/" + "/".join(str(segment) for segment in self.segments)


def _segment_at(name: Name, position: int) -> NameSegment | None:
    if position < 0 or position >= len(name):
        return None
    return name[position]


def extract_command(name: Name, prefix_length: int) -> str:
    """Return the command token that follows the domain prefix."""
    segment = _segment_at(name, prefix_length)
    if segment is None or segment.type is not SegmentType.LABEL:
        msg = f"expected a command label after {prefix_length} prefix segments in {name}"
        raise MalformedNameError(msg)
    return str(segment.value)


def extract_chunk_index(name: Name) -> int:
    """Return the chunk index held by the trailing segment."""
    segment = _segment_at(name, len(name) - 1)
    if segment is None or segment.type is not SegmentType.CHUNK:
        msg = f"last segment of {name} is not a chunk segment"
        raise MalformedNameError(msg)
    return int(segment.value)


def extract_target_file_name(name: Name) -> str:
    """Return the file name held by the second-to-last segment."""
    segment = _segment_at(name, len(name) - 2)
    if segment is None or segment.type is not SegmentType.LABEL:
        msg = f"second-to-last segment of {name} is not a file name label"
        raise MalformedNameError(msg)
    return str(segment.value)


def strip_trailing_chunk(name: Name) -> Name:
    return Name(name.segments[:-1])
