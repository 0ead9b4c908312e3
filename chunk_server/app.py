from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from anyio import to_thread
from litestar import Litestar, Request, get
from litestar.config.cors import CORSConfig
from litestar.handlers import asgi
from litestar.logging.config import LoggingConfig
from litestar.plugins.prometheus import PrometheusConfig, PrometheusController
from litestar.response import Response

from .errors import MalformedNameError
from .names import Name
from .server import ChunkServer

if TYPE_CHECKING:
    from collections.abc import Callable

    from litestar.types import Receive, Scope, Send

    from .chunking import Chunk

LOG = logging.getLogger("chunk_server.app")

prometheus_config = PrometheusConfig(app_name="chunk_server", prefix="chunk_server")

CHUNK_HEADERS = ["X-Chunk-Number", "X-Final-Chunk-Number", "X-Content-Name"]


async def _run_sync(func: Callable[..., Any], /, *args: Any) -> Any:
    return await to_thread.run_sync(func, *args)


def _request_path(scope: Scope) -> str:
    """Return the request path still percent-encoded, as name parsing expects."""
    raw_path = scope.get("raw_path")
    if raw_path:
        return raw_path.decode("latin-1").split("?", 1)[0]
    return quote(scope.get("path", "/"), safe="/=")


def chunk_response(chunk: Chunk, *, head: bool = False) -> Response:
    headers = {
        "X-Chunk-Number": str(chunk.index),
        "X-Final-Chunk-Number": str(chunk.final_chunk_number),
        "X-Content-Name": str(chunk.name),
    }
    return Response(
        content=b"" if head else chunk.payload,
        status_code=200,
        media_type="application/octet-stream",
        headers=headers,
    )


async def handle(server: ChunkServer, request: Request, path: str) -> Response:
    """Answer one HTTP request whose path is a request name.

    A request the server cannot answer gets an empty 404, the HTTP form of
    not responding at all.
    """
    if request.method not in {"GET", "HEAD"}:
        return Response(content=b"", status_code=405, headers={"Allow": "GET, HEAD"})

    try:
        name = Name.from_uri(path)
        chunk = await _run_sync(server.respond, name)
    except MalformedNameError as error:
        LOG.warning("malformed request name %s: %s", path, error)
        return Response(content=str(error), status_code=400, media_type="text/plain")

    if chunk is None:
        return Response(content=b"", status_code=404)
    return chunk_response(chunk, head=request.method == "HEAD")


def create_app(server: ChunkServer | None = None) -> Litestar:
    """Create the chunk server ASGI application."""
    if server is None:
        server = ChunkServer.from_env()

    @get("/health", include_in_schema=False)
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @asgi(path="/", is_mount=True, copy_scope=True)
    async def name_handler(scope: Scope, receive: Receive, send: Send) -> None:
        request = Request(scope=scope, receive=receive)
        response = await handle(server, request, _request_path(scope))
        asgi_response = response.to_asgi_response(None, request)
        await asgi_response(scope, receive, send)

    def startup(app: Litestar) -> None:
        server.startup()

    def shutdown(app: Litestar) -> None:
        server.shutdown()

    cors_config = CORSConfig(
        allow_origins=["*"],
        allow_methods=["GET", "HEAD"],
        allow_headers=["*"],
        expose_headers=CHUNK_HEADERS,
    )

    level = server.settings.log_level
    logging_config = LoggingConfig(
        loggers={"chunk_server": {"level": level, "propagate": True}},
    )

    return Litestar(
        route_handlers=[health, name_handler, PrometheusController],
        on_startup=[startup],
        on_shutdown=[shutdown],
        cors_config=cors_config,
        logging_config=logging_config,
        middleware=[prometheus_config.middleware],
    )


app = create_app()
