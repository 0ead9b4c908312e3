from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .cache import ChunkCache
from .chunking import (
    CHUNK_SIZE,
    BufferOrigin,
    Chunk,
    final_chunk_number,
    read_chunk,
)
from .files import FileOrigin, FileStore
from .names import (
    NameSegment,
    extract_chunk_index,
    extract_command,
    extract_target_file_name,
    strip_trailing_chunk,
)
from .settings import ServerSettings, load_settings_from_env

if TYPE_CHECKING:
    from .names import Name

LOG = logging.getLogger("chunk_server.server")

COMMAND_LIST = "list"
COMMAND_FETCH = "fetch"


class ChunkServer:
    """Turns request names into response chunks for one served directory.

    ``respond`` returns None whenever a request cannot be answered (unknown
    command, missing file, chunk index past the end). Callers send nothing
    back in that case.
    """

    def __init__(
        self,
        settings: ServerSettings,
        store: FileStore | None = None,
        cache: ChunkCache | None = None,
    ):
        self._settings = settings
        self._prefix = settings.prefix_name
        self._store = store or FileStore(settings.directory)
        self._cache = cache if cache is not None else ChunkCache()

    @property
    def settings(self) -> ServerSettings:
        return self._settings

    @property
    def cache(self) -> ChunkCache:
        return self._cache

    def startup(self) -> None:
        LOG.info(
            "now serving files from %s (prefix=%s, mode=%s, commands=%s)",
            self._store.directory,
            self._prefix,
            "pre-chunked" if self._settings.pre_chunk else "on-demand",
            self._settings.command_matching,
        )

    def shutdown(self) -> None:
        self._cache.clear()

    def respond(self, name: Name) -> Chunk | None:
        if not name.startswith(self._prefix):
            LOG.debug("ignoring %s: outside prefix %s", name, self._prefix)
            return None

        command = extract_command(name, len(self._prefix))
        chunk_index = extract_chunk_index(name)
        LOG.debug("request for chunk %d of %s, command=%s", chunk_index, name, command)

        if self._matches(command, COMMAND_LIST):
            return self._list_response(name, chunk_index)
        if self._matches(command, COMMAND_FETCH):
            file_name = extract_target_file_name(name)
            if self._settings.pre_chunk:
                return self._pre_chunked_fetch_response(name, file_name, chunk_index)
            return self._fetch_response(name, file_name, chunk_index)

        LOG.debug("unknown command %r in %s", command, name)
        return None

    def _matches(self, token: str, command: str) -> bool:
        token = token.lower()
        if self._settings.command_matching == "prefix":
            return command.startswith(token)
        return token == command

    def _list_response(self, name: Name, chunk_index: int) -> Chunk | None:
        listing = BufferOrigin(self._store.directory_listing())
        final = final_chunk_number(listing.size())
        if chunk_index > final:
            LOG.debug("list chunk %d requested, final is %d", chunk_index, final)
            return None

        payload = read_chunk(listing, chunk_index)
        assert payload is not None
        LOG.info("responding to 'list' with chunk %d/%d", chunk_index, final)
        return Chunk(name, chunk_index, payload, final)

    def _file_origin(self, file_name: str) -> tuple[FileOrigin, int] | None:
        """Resolve ``file_name`` and sample its current size.

        Returns:
            The origin and its size, or None if the file cannot be served.
        """
        path = self._store.resolve(file_name)
        if path is None:
            LOG.warning("refusing file name %r outside %s", file_name, self._store.directory)
            return None
        origin = FileOrigin(self._store, path)
        if not origin.available():
            return None
        size = origin.size()
        if size is None:
            return None
        return origin, size

    def _fetch_response(
        self, name: Name, file_name: str, chunk_index: int
    ) -> Chunk | None:
        # The file may be growing while it is fetched, so its size and final
        # chunk number are sampled again for every request.
        resolved = self._file_origin(file_name)
        if resolved is None:
            LOG.info("requested file %s is not available", file_name)
            return None

        origin, size = resolved
        final = final_chunk_number(size)
        if chunk_index > final:
            LOG.debug("chunk %d of %s requested, final is %d", chunk_index, file_name, final)
            return None

        payload = read_chunk(origin, chunk_index)
        if payload is None:
            return None
        chunk_name = strip_trailing_chunk(name).append(NameSegment.chunk(chunk_index))
        return Chunk(chunk_name, chunk_index, payload, final)

    def _pre_chunked_fetch_response(
        self, name: Name, file_name: str, chunk_index: int
    ) -> Chunk | None:
        chunks = self._cache.get_or_build(
            file_name, lambda: self._chunk_file_into_memory(name, file_name)
        )
        if chunks is None:
            return None

        chunk = self._cache.lookup(file_name, chunk_index)
        if chunk is None:
            LOG.info(
                "requested out of range chunk %d for %s (final is %d)",
                chunk_index,
                file_name,
                len(chunks) - 1,
            )
        return chunk

    def _chunk_file_into_memory(self, name: Name, file_name: str) -> list[Chunk] | None:
        resolved = self._file_origin(file_name)
        if resolved is None:
            LOG.warning("could not access requested file %s, not pre-chunking", file_name)
            return None

        origin, size = resolved
        final = final_chunk_number(size)
        base_name = strip_trailing_chunk(name)
        LOG.info("pre-chunking %s into memory (%d chunks)", origin.path, final + 1)

        chunks: list[Chunk] = []
        for index in range(final + 1):
            payload = read_chunk(origin, index, CHUNK_SIZE)
            if payload is None:
                LOG.warning("could not read chunk %d of %s, not pre-chunking", index, origin.path)
                return None
            chunk_name = base_name.append(NameSegment.chunk(index))
            chunks.append(Chunk(chunk_name, index, payload, final))
        return chunks

    @classmethod
    def from_env(cls) -> ChunkServer:
        """Create a ChunkServer from environment variables.

        Returns:
            ChunkServer configured from environment variables.
        """
        return cls(settings=load_settings_from_env())
