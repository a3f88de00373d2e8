# -*- coding: utf-8 -*-
"""Pydantic settings of configured buckets."""

import hashlib
import re
from typing import Any, Dict, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

_TABLE_NAME = re.compile(r"\A(?:[A-Za-z_][A-Za-z0-9_]*\.)?[A-Za-z_][A-Za-z0-9_]*\Z")


class BucketSettings(BaseModel):
    """Configuration of one bucket."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = ""
    dir: str
    dir_depth: int = Field(default=0, ge=0, le=16)
    links_table: str = "file_links"
    files_table: str = "files"
    machines: Tuple[str, ...] = ()
    scp_user: str = ""
    algorithm: str = "sha256"
    remote_dir: Optional[str] = None

    @field_validator("dir")
    @classmethod
    def _validate_dir(cls, value: str) -> str:
        """Require a non-blank root directory."""
        if value.strip() == "":
            raise ValueError("dir is required")
        return value

    @field_validator("links_table", "files_table")
    @classmethod
    def _validate_table(cls, value: str) -> str:
        if not _TABLE_NAME.match(value):
            raise ValueError("invalid table name: %r" % value)
        return value

    @field_validator("machines")
    @classmethod
    def _validate_machines(cls, value: Tuple[str, ...]) -> Tuple[str, ...]:
        machines = tuple(addr.strip() for addr in value)
        if any(addr == "" for addr in machines):
            raise ValueError("machines must not contain blank addresses")
        return machines

    @field_validator("algorithm")
    @classmethod
    def _validate_algorithm(cls, value: str) -> str:
        """Restrict to hashlib algorithms with a fixed digest size."""
        normalized = value.strip().lower()
        if normalized not in hashlib.algorithms_guaranteed or normalized.startswith("shake_"):
            raise ValueError("unsupported hash algorithm: %r" % value)
        return normalized


def load_settings(config: Mapping[str, Any]) -> Dict[str, BucketSettings]:
    """Build bucket settings keyed by name from a parsed config document such
    as ``{"images": {"dir": "/data/images", "dir_depth": 2}}``.
    """
    settings = {}
    for name, values in config.items():
        if isinstance(values, BucketSettings):
            settings[name] = values.model_copy(update={"name": name})
        else:
            settings[name] = BucketSettings(**dict(values, name=name))
    return settings
