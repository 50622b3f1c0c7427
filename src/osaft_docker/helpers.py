"""Shared helpers for osaft_docker (text, tags, sources file).

Used by config, recipe, docker and cli modules.
"""

from __future__ import annotations

import shlex
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from osaft_docker.errors import SourcesFileError

# --- Text ---


def shell_join(argv: list[str]) -> str:
    """Quote argv for display (dry-run and verbose output)."""
    return shlex.join(argv)


def is_absent(value: str | None) -> bool:
    """True for the checksum sentinel spellings: None, '', 'none', '-'."""
    return value is None or value.strip().lower() in ("", "none", "-")


# --- Image naming ---


def date_tag(now: datetime | None = None) -> str:
    """Default build tag: today as YYMMDD (e.g. 261018)."""
    return (now or datetime.now()).strftime("%y%m%d")


def image_ref(registry: str, tag: str) -> str:
    """registry:tag."""
    return f"{registry}:{tag}"


# --- Sources file ---

SOURCE_FILE_KEYS = ("url", "sha256", "tar")


def load_sources_file(p: Path) -> dict[str, dict[str, Any]]:
    """Load YAML source overrides: {component: {url, sha256, tar}}. Raises SourcesFileError."""
    if not p.is_file():
        msg = f"Sources file not found: {p}"
        raise SourcesFileError(msg)
    with p.open() as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            msg = f"Invalid YAML in {p}: {e}"
            raise SourcesFileError(msg) from e
    if not isinstance(data, dict):
        msg = f"Sources file must be a mapping of components: {p}"
        raise SourcesFileError(msg)
    out: dict[str, dict[str, Any]] = {}
    for name, entry in data.items():
        if not isinstance(entry, dict):
            msg = f"Source entry '{name}' must be a mapping in {p}"
            raise SourcesFileError(msg)
        unknown = set(entry) - set(SOURCE_FILE_KEYS)
        if unknown:
            msg = f"Unknown keys for '{name}' in {p}: {', '.join(sorted(unknown))}"
            raise SourcesFileError(msg)
        out[str(name)] = dict(entry)
    return out
