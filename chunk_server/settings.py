from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import MalformedNameError
from .names import Name, SegmentType

DEFAULT_DOMAIN_PREFIX = "lci:/ccnx/tutorial"


class ServerSettings(BaseSettings):
    """Configuration for the chunk server."""

    model_config = SettingsConfigDict(
        env_prefix="", case_sensitive=False, extra="ignore", populate_by_name=True
    )

    domain_prefix: str = Field(
        default=DEFAULT_DOMAIN_PREFIX,
        validation_alias="CHUNK_SERVER_DOMAIN_PREFIX",
    )
    directory: Path = Field(
        default=Path(),
        validation_alias="CHUNK_SERVER_DIRECTORY",
    )
    pre_chunk: bool = Field(
        default=True,
        validation_alias="CHUNK_SERVER_PRE_CHUNK",
    )
    command_matching: Literal["exact", "prefix"] = Field(
        default="exact",
        validation_alias="CHUNK_SERVER_COMMAND_MATCHING",
    )
    log_level: str = Field(
        default="INFO",
        validation_alias="CHUNK_SERVER_LOG_LEVEL",
    )

    @field_validator("domain_prefix")
    @classmethod
    def _check_domain_prefix(cls, value: str) -> str:
        try:
            name = Name.from_uri(value)
        except MalformedNameError as error:
            raise ValueError(str(error)) from error
        if not len(name):
            msg = "domain prefix must have at least one segment"
            raise ValueError(msg)
        if any(segment.type is not SegmentType.LABEL for segment in name):
            msg = "domain prefix may only contain label segments"
            raise ValueError(msg)
        return str(name)

    @field_validator("log_level")
    @classmethod
    def _normalise_log_level(cls, value: str) -> str:
        return value.strip().upper()

    @property
    def prefix_name(self) -> Name:
        return Name.from_uri(self.domain_prefix)


def load_settings_from_env() -> ServerSettings:
    """Load server settings from environment variables.

    Returns:
        ServerSettings instance populated from environment variables.
    """
    return ServerSettings()
