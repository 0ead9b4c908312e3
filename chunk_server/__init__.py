"""Chunked list/fetch content server for segmented names."""

from .app import create_app
from .cache import ChunkCache
from .chunking import CHUNK_SIZE, Chunk, chunks_required, final_chunk_number
from .errors import ChunkServerError, MalformedNameError
from .names import Name, NameSegment, SegmentType
from .server import ChunkServer
from .settings import ServerSettings

__all__ = [
    "CHUNK_SIZE",
    "Chunk",
    "ChunkCache",
    "ChunkServer",
    "ChunkServerError",
    "MalformedNameError",
    "Name",
    "NameSegment",
    "SegmentType",
    "ServerSettings",
    "chunks_required",
    "create_app",
    "final_chunk_number",
]
