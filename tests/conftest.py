from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest
from chunk_server import ChunkServer, Name, ServerSettings

if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path

PREFIX = "lci:/ccnx/tutorial"


def _request_name(*segments: str) -> Name:
    return Name.from_uri("/".join([PREFIX, *segments]))


@pytest.fixture
def request_name() -> Callable[..., Name]:
    """Build request names under the default prefix, e.g. ("fetch", "a.txt", "chunk=0")."""
    return _request_name


@pytest.fixture
def served_dir(tmp_path: Path) -> Path:
    """A served directory with a few files of known sizes."""
    directory = tmp_path / "served"
    directory.mkdir()
    (directory / "two-chunks.bin").write_bytes(bytes(range(256)) * 9 + b"\x01" * 96)
    (directory / "empty.txt").write_bytes(b"")
    (directory / "hello.txt").write_bytes(b"hello from chunk-server\n")
    (directory / "subdir").mkdir()
    return directory


@pytest.fixture
def make_server(served_dir: Path) -> Callable[..., ChunkServer]:
    def factory(**overrides: object) -> ChunkServer:
        settings = ServerSettings(directory=served_dir, **overrides)
        return ChunkServer(settings)

    return factory


@pytest.fixture
def server_env(served_dir: Path) -> Generator[dict[str, str]]:
    """Point the environment-driven settings at the served directory."""
    env_vars = {
        "CHUNK_SERVER_DIRECTORY": str(served_dir),
        "CHUNK_SERVER_DOMAIN_PREFIX": PREFIX,
        "CHUNK_SERVER_PRE_CHUNK": "false",
    }

    original_values = {}
    for key, value in env_vars.items():
        original_values[key] = os.environ.get(key)
        os.environ[key] = value

    yield env_vars

    for key, original_value in original_values.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value
