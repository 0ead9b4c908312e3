"""Single-threaded receive/respond loop over a message transport."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from .errors import MalformedNameError

if TYPE_CHECKING:
    from .chunking import Chunk
    from .names import Name
    from .server import ChunkServer

LOG = logging.getLogger("chunk_server.loop")


class Transport(Protocol):
    """Session that delivers request names and carries responses back."""

    def receive(self) -> Name | None:
        """Block until the next request arrives; None once the session ends."""
        ...

    def send(self, chunk: Chunk, request_name: Name) -> bool:
        """Send ``chunk`` in answer to ``request_name``; False on failure."""
        ...


def serve(server: ChunkServer, transport: Transport) -> bool:
    """Answer requests from ``transport`` until it stops delivering them.

    Requests that cannot be answered get no response. A failed send is logged
    and the loop carries on with the next request.

    Returns:
        True if at least one request was answered.
    """
    answered = False
    while (request_name := transport.receive()) is not None:
        try:
            response = server.respond(request_name)
        except MalformedNameError:
            LOG.exception("malformed request name %s", request_name)
            raise

        if response is None:
            continue

        if not transport.send(response, request_name):
            LOG.error(
                "send failed for %s. Is the forwarder running?", response.name
            )
        answered = True
    return answered
