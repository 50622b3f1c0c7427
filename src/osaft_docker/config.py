"""BuildConfig: the one configuration record of an invocation.

Created from defaults and the environment, overridden by parsed arguments,
then read by the recipe generator and the dispatcher.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from osaft_docker.errors import SourcesFileError
from osaft_docker.helpers import date_tag, image_ref, is_absent
from osaft_docker.platforms import DEFAULT_PLATFORM, default_features

ENV_REGISTRY = "OSAFT_DOCKER_REGISTRY"
ENV_TAG = "OSAFT_DOCKER_TAG"

DEFAULT_REGISTRY = "owasp/o-saft"
RUNNER_DEFAULT_TAG = "latest"

COMPONENTS = ("osaft", "ssleay", "openssl")

DEFAULT_SOURCES: dict[str, dict[str, str | None]] = {
    "osaft": {
        "url": "https://github.com/OWASP/O-Saft/raw/master/o-saft.tgz",
        "checksum": None,
    },
    "ssleay": {
        "url": "https://cpan.metacpan.org/authors/id/C/CH/CHRISN/Net-SSLeay-1.92.tar.gz",
        "checksum": None,
    },
    "openssl": {
        "url": "https://github.com/PeterMosmans/openssl/archive/1.0.2-chacha.tar.gz",
        "checksum": None,
    },
}

DEFAULT_OPTIONS: dict[str, bool] = {
    "force_rm": True,
    "rm": True,
    "rm_tar": True,
    "alias": False,
    "rm_workdir": True,
}

# Options switched together by -clean / -no-clean.
CLEAN_OPTIONS = ("force_rm", "rm", "rm_tar", "rm_workdir")


@dataclass
class SourceSpec:
    """Where a component's archive comes from. checksum None means absent (no verification)."""

    url: str | None = None
    checksum: str | None = None
    local_path: Path | None = None

    def set_url(self, url: str) -> None:
        self.url = url or None
        self.local_path = None

    def set_local(self, path: str | Path) -> None:
        self.local_path = Path(path) if str(path) else None
        self.url = None

    def set_checksum(self, value: str | None) -> None:
        self.checksum = None if is_absent(value) else value.strip()


@dataclass
class BuildOptions:
    force_rm: bool = DEFAULT_OPTIONS["force_rm"]
    rm: bool = DEFAULT_OPTIONS["rm"]
    rm_tar: bool = DEFAULT_OPTIONS["rm_tar"]
    alias: bool = DEFAULT_OPTIONS["alias"]
    rm_workdir: bool = DEFAULT_OPTIONS["rm_workdir"]

    def set_clean(self, value: bool) -> None:
        for name in CLEAN_OPTIONS:
            setattr(self, name, value)


def _default_sources() -> dict[str, SourceSpec]:
    return {name: SourceSpec(**spec) for name, spec in DEFAULT_SOURCES.items()}


@dataclass
class BuildConfig:
    platform: str = DEFAULT_PLATFORM
    dry_run: bool = False
    verbose: bool = False
    image_registry: str = DEFAULT_REGISTRY
    image_tag: str = RUNNER_DEFAULT_TAG
    image_id: str | None = None
    base_image: str | None = None
    sources: dict[str, SourceSpec] = field(default_factory=_default_sources)
    features: dict[str, bool] = field(default_factory=lambda: default_features(DEFAULT_PLATFORM))
    options: BuildOptions = field(default_factory=BuildOptions)
    workdir: Path | None = None
    archive: Path | None = None
    sources_file: Path | None = None

    @property
    def image(self) -> str:
        """Image identifier registry:tag."""
        return image_ref(self.image_registry, self.image_tag)

    @property
    def alias_image(self) -> str:
        return image_ref(self.image_registry, "latest")

    def apply_platform(self, name: str) -> None:
        """Select a platform variant and reset feature toggles to its defaults."""
        self.features = default_features(name)
        self.platform = name

    def apply_sources(self, overrides: Mapping[str, Mapping[str, Any]]) -> None:
        """Apply {component: {url, sha256, tar}} overrides (sources file format)."""
        for name, entry in overrides.items():
            if name not in self.sources:
                msg = f"Unknown source component: {name} (expected one of {', '.join(COMPONENTS)})"
                raise SourcesFileError(msg)
            spec = self.sources[name]
            if "url" in entry:
                spec.url = str(entry["url"]) if entry["url"] else None
            if "tar" in entry:
                spec.local_path = Path(entry["tar"]) if entry["tar"] else None
            if "sha256" in entry:
                spec.set_checksum(None if entry["sha256"] is None else str(entry["sha256"]))


def default_config(
    *,
    build: bool = True,
    environ: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> BuildConfig:
    """BuildConfig seeded from the environment.

    build=True uses today's date (YYMMDD) as default tag, the runner uses 'latest'.
    OSAFT_DOCKER_REGISTRY and OSAFT_DOCKER_TAG override both.
    """
    env = os.environ if environ is None else environ
    tag = env.get(ENV_TAG) or (date_tag(now) if build else RUNNER_DEFAULT_TAG)
    registry = env.get(ENV_REGISTRY) or DEFAULT_REGISTRY
    return BuildConfig(image_registry=registry, image_tag=tag)
