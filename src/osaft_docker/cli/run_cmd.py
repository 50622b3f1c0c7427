"""`osaft-docker` — run O-Saft in its container; unmatched arguments go to o-saft.pl."""

from __future__ import annotations

import os
import sys
from collections.abc import Mapping
from pathlib import Path

from osaft_docker.cli import build_cmd
from osaft_docker.config import BuildConfig, default_config
from osaft_docker.docker.actions import (
    HOST_MOUNT,
    X11_SOCKET,
    list_containers,
    list_images,
    remove_by_id,
    run_container,
)
from osaft_docker.docker.dispatch import Command, dispatch
from osaft_docker.errors import EXIT_USAGE
from osaft_docker.options import parse_run_argv
from osaft_docker.recipe.generate import ENTRYPOINT, GUI_ENTRYPOINT

SHELL = "/bin/sh"

USAGE = """\
Usage: osaft-docker [-n] [-v] [-id=ID] [-tag=TAG] [MODE] [ARGS...]

Modes:
  build        build image (options as for osaft-docker-build)
  usage        show how to call O-Saft in the image with docker directly
  shell        run /bin/sh in the image
  root         run /bin/sh in the image as root
  call CMD     run CMD in the image
  status       list image and its containers
  rmi          remove image (or -id=ID)
  gui          run o-saft.tcl with the host's X display
  hacker       root shell with the current directory mounted at /O-Saft/host
  help         this text

Anything else is passed to o-saft.pl in the image, for example:
  osaft-docker +cipher --enabled example.tld

Options:
  -n           dry run: print docker commands, execute nothing
  -v           print docker commands before executing them
  -id=ID       image id or name to use instead of REGISTRY:TAG
  -tag=TAG     image tag (env OSAFT_DOCKER_TAG, default latest)
  -registry=NAME
               image name (env OSAFT_DOCKER_REGISTRY, default owasp/o-saft)
"""

DOCKER_USAGE = """\
O-Saft in image {image} can be called directly with docker:

  docker run --rm -it {image} +check example.tld
  docker run --rm -it --entrypoint {shell} {image}
  docker run --rm -it -e DISPLAY=$DISPLAY -v {x11}:{x11}:ro --entrypoint {gui} {image}
"""


def _build_argv(config: BuildConfig, rest: list[str]) -> list[str]:
    argv = ["build", f"-registry={config.image_registry}", f"-tag={config.image_tag}"]
    if config.dry_run:
        argv.insert(0, "-n")
    if config.verbose:
        argv.insert(0, "-v")
    return argv + rest


def mode_commands(
    mode: str | None,
    config: BuildConfig,
    rest: list[str],
    environ: Mapping[str, str],
    cwd: Path,
) -> list[Command]:
    """Engine commands for a runner mode (not build/usage/help)."""
    image = config.image_id or config.image
    if mode == "shell":
        return run_container(image, entrypoint=SHELL)
    if mode == "root":
        return run_container(image, entrypoint=SHELL, user="root")
    if mode == "call":
        return run_container(image, rest[1:], entrypoint=rest[0])
    if mode == "status":
        return list_images(config.image_registry) + list_containers(image)
    if mode == "rmi":
        return remove_by_id(image)
    if mode == "gui":
        return run_container(
            image,
            rest,
            entrypoint=GUI_ENTRYPOINT,
            env={"DISPLAY": environ.get("DISPLAY", ":0")},
            volumes=[f"{X11_SOCKET}:{X11_SOCKET}:ro"],
        )
    if mode == "hacker":
        return run_container(
            image, entrypoint=SHELL, user="root", volumes=[f"{cwd}:{HOST_MOUNT}"]
        )
    return run_container(image, rest, entrypoint=ENTRYPOINT)


def run(
    argv: list[str],
    environ: Mapping[str, str] | None = None,
    cwd: Path | None = None,
) -> int:
    """Parse argv and run the runner mode. Returns the process exit code."""
    if not argv:
        print(USAGE, end="", file=sys.stderr)
        return EXIT_USAGE
    env = os.environ if environ is None else environ
    config = default_config(build=False, environ=env)
    result = parse_run_argv(argv, config)
    build_cmd.configure_logging(config.verbose)
    mode, rest = result.mode, result.passthrough

    if mode == "help":
        print(USAGE, end="")
        return 0
    if mode == "usage":
        image = config.image_id or config.image
        print(
            DOCKER_USAGE.format(image=image, shell=SHELL, x11=X11_SOCKET, gui=GUI_ENTRYPOINT),
            end="",
        )
        return 0
    if mode == "build":
        return build_cmd.run(_build_argv(config, rest), environ=env)
    if mode == "call" and not rest:
        print("❌ call: missing command to run in the image", file=sys.stderr)
        return EXIT_USAGE

    commands = mode_commands(mode, config, rest, env, cwd or Path.cwd())
    return dispatch(commands, dry_run=config.dry_run, verbose=config.verbose)


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
