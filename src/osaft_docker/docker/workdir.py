"""Per-invocation working directory that holds the generated Dockerfile (build context)."""

from __future__ import annotations

import shutil
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from osaft_docker.errors import RecipeError, WorkdirCreateError, WorkdirExistsError

WORKDIR_PREFIX = "o-saft-docker-"


def default_workdir(now: datetime | None = None, parent: Path | None = None) -> Path:
    """o-saft-docker-YYYYmmddHHMMSS under parent (default: cwd)."""
    stamp = (now or datetime.now()).strftime("%Y%m%d%H%M%S")
    return (parent or Path.cwd()) / f"{WORKDIR_PREFIX}{stamp}"


def create_workdir(path: Path) -> Path:
    """Create path fresh. A leftover directory of the same name is an error, not reused."""
    if path.exists():
        msg = f"Working directory already exists: {path}"
        raise WorkdirExistsError(msg)
    try:
        path.mkdir(parents=True)
    except OSError as e:
        msg = f"Cannot create working directory {path}: {e}"
        raise WorkdirCreateError(msg) from e
    return path


def stage_files(files: Mapping[str, Path], workdir: Path) -> list[Path]:
    """Copy local archives into workdir under their staged names so COPY finds them."""
    out: list[Path] = []
    for name, src in files.items():
        if not src.is_file():
            msg = f"Local archive not found: {src}"
            raise RecipeError(msg)
        dest = workdir / name
        shutil.copy2(src, dest)
        out.append(dest)
    return out


def remove_workdir(path: Path) -> None:
    shutil.rmtree(path, ignore_errors=True)
