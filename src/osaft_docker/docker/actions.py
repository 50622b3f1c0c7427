"""Fixed engine command sequences for the terminal actions of both scripts."""

from __future__ import annotations

from pathlib import Path

from osaft_docker.config import BuildConfig
from osaft_docker.docker.dispatch import Command, docker

RUN_BASE = ("run", "--rm", "-it")
X11_SOCKET = "/tmp/.X11-unix"
HOST_MOUNT = "/O-Saft/host"


def build_image(
    config: BuildConfig, dockerfile: Path, context: Path, extra: list[str] | None = None
) -> list[Command]:
    """docker build [--force-rm] [--rm] -f DOCKERFILE -t IMAGE [extra...] CONTEXT."""
    args = ["build"]
    if config.options.force_rm:
        args.append("--force-rm")
    if config.options.rm:
        args.append("--rm")
    args += ["-f", str(dockerfile), "-t", config.image, *(extra or []), str(context)]
    return [docker(*args)]


def save_image(image: str, archive: Path) -> list[Command]:
    return [docker("save", "-o", str(archive), image)]


def remove_image(image: str) -> list[Command]:
    return [docker("rmi", image)]


def load_image(archive: Path, extra: list[str] | None = None) -> list[Command]:
    return [docker("load", *(extra or []), "-i", str(archive))]


def pull_image(image: str, extra: list[str] | None = None) -> list[Command]:
    return [docker("pull", *(extra or []), image)]


def tag_image(image: str, alias: str) -> list[Command]:
    return [docker("tag", image, alias)]


def reimport_image(image: str, archive: Path) -> list[Command]:
    """save, rmi, load: drops the build's intermediate images and cache from the engine."""
    return save_image(image, archive) + remove_image(image) + load_image(archive)


def run_container(
    image: str,
    args: list[str] | None = None,
    *,
    entrypoint: str | None = None,
    user: str | None = None,
    env: dict[str, str] | None = None,
    volumes: list[str] | None = None,
) -> list[Command]:
    """docker run --rm -it [--user U] [-e K=V...] [-v SPEC...] [--entrypoint E] IMAGE [args...]."""
    argv = list(RUN_BASE)
    if user:
        argv += ["--user", user]
    for key, value in (env or {}).items():
        argv += ["-e", f"{key}={value}"]
    for spec in volumes or []:
        argv += ["-v", spec]
    if entrypoint is not None:
        argv += ["--entrypoint", entrypoint]
    argv.append(image)
    argv += args or []
    return [docker(*argv)]


def list_images(registry: str) -> list[Command]:
    return [docker("images", registry)]


def list_containers(image: str) -> list[Command]:
    return [docker("ps", "-a", "--filter", f"ancestor={image}")]


def remove_by_id(ident: str) -> list[Command]:
    """docker rmi ID; ID may be an image id or name:tag."""
    return [docker("rmi", ident)]
