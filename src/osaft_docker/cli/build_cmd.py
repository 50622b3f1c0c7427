"""`osaft-docker-build` — generate the O-Saft Dockerfile and build, load or pull the image."""

from __future__ import annotations

import logging
import sys
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from osaft_docker.config import BuildConfig, default_config
from osaft_docker.docker.actions import (
    build_image,
    load_image,
    pull_image,
    reimport_image,
    tag_image,
)
from osaft_docker.docker.dispatch import DRY_RUN_PREFIX, Command, dispatch
from osaft_docker.docker.workdir import (
    create_workdir,
    default_workdir,
    remove_workdir,
    stage_files,
)
from osaft_docker.errors import EXIT_UNKNOWN_MODE, OsaftDockerError
from osaft_docker.helpers import load_sources_file
from osaft_docker.options import ParseResult, parse_build_argv
from osaft_docker.recipe import generate_text, recipe_context_files

log = logging.getLogger(__name__)

DOCKERFILE_NAME = "Dockerfile"

USAGE = """\
Usage: osaft-docker-build [-n] [-v] MODE [OPTIONS] [-- ARGS...]

Modes:
  build        generate Dockerfile in a fresh working directory and build the image
  load         load image from archive (-archive=PATH)
  pull         pull image from registry
  config       print generated Dockerfile (alias: dockerfile)
  help         this text

Options:
  -n                     dry run: print commands, execute nothing
  -v                     print each command before executing it
  -alpine -debian -custom
                         platform variant (sets feature defaults)
  -from=IMAGE            base image
  -registry=NAME         image name (env OSAFT_DOCKER_REGISTRY, default owasp/o-saft)
  -tag=TAG               image tag (env OSAFT_DOCKER_TAG, default YYMMDD)
  -osaft=URL    -osaft-sha=SUM    -osaft-tar=PATH
  -ssleay=URL   -ssleay-sha=SUM   -ssleay-tar=PATH
  -openssl=URL  -openssl-sha=SUM  -openssl-tar=PATH
                         source of component; SUM 'none' disables verification
  -sources=FILE          YAML file with {component: {url, sha256, tar}}
  -[no-]openssl -[no-]ssleay -[no-]ssl-alt -[no-]tcl -[no-]wget -[no-]sha
                         feature toggles
  -[no-]force-rm -[no-]rm -[no-]rm-tar -[no-]alias -[no-]rm-dir
                         build options; -clean / -no-clean switch all removals
  -workdir=PATH          working directory (default ./o-saft-docker-YYYYmmddHHMMSS)
  -archive=PATH          saved image archive (default ./o-saft-docker-TAG.tar)
  --                     end of options; remaining ARGS are passed to docker
"""


def default_archive(config: BuildConfig) -> Path:
    return config.archive or Path.cwd() / f"o-saft-docker-{config.image_tag}.tar"


def make_config(
    argv: list[str],
    environ: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> tuple[BuildConfig, ParseResult]:
    """Defaults, then the sources file (if -sources= is given), then command-line flags."""
    config = default_config(build=True, environ=environ, now=now)
    result = parse_build_argv(argv, config)
    if config.sources_file is None:
        return config, result
    overrides = load_sources_file(config.sources_file)
    config = default_config(build=True, environ=environ, now=now)
    config.apply_sources(overrides)
    result = parse_build_argv(argv, config)
    return config, result


def _with_alias(config: BuildConfig, commands: list[Command]) -> list[Command]:
    if config.options.alias:
        return commands + tag_image(config.image, config.alias_image)
    return commands


def do_build(config: BuildConfig, extra: list[str], now: datetime | None = None) -> int:
    workdir = config.workdir or default_workdir(now)
    dockerfile = workdir / DOCKERFILE_NAME
    archive = default_archive(config)
    text = generate_text(config)
    local_files = recipe_context_files(config)

    commands = build_image(config, dockerfile, workdir, extra)
    if config.options.rm:
        commands += reimport_image(config.image, archive)
    commands = _with_alias(config, commands)

    if config.dry_run:
        print(f"{DRY_RUN_PREFIX} mkdir {workdir}")
        print(f"{DRY_RUN_PREFIX} write {dockerfile}:")
        print(text, end="")
        for name, src in local_files.items():
            print(f"{DRY_RUN_PREFIX} copy {src} {workdir / name}")
        dispatch(commands, dry_run=True)
        if config.options.rm and config.options.rm_tar:
            print(f"{DRY_RUN_PREFIX} remove {archive}")
        if config.options.rm_workdir:
            print(f"{DRY_RUN_PREFIX} remove {workdir}")
        return 0

    create_workdir(workdir)
    try:
        dockerfile.write_text(text)
        stage_files(local_files, workdir)
        rc = dispatch(commands, verbose=config.verbose)
        if rc == 0 and config.options.rm and config.options.rm_tar:
            archive.unlink(missing_ok=True)
    finally:
        if config.options.rm_workdir:
            remove_workdir(workdir)
    if rc == 0:
        print(f"✅ Built image: {config.image}")
    return rc


def do_load(config: BuildConfig, extra: list[str]) -> int:
    archive = default_archive(config)
    commands = _with_alias(config, load_image(archive, extra))
    rc = dispatch(commands, dry_run=config.dry_run, verbose=config.verbose)
    if rc == 0 and not config.dry_run:
        print(f"✅ Loaded image from {archive}")
    return rc


def do_pull(config: BuildConfig, extra: list[str]) -> int:
    commands = _with_alias(config, pull_image(config.image, extra))
    rc = dispatch(commands, dry_run=config.dry_run, verbose=config.verbose)
    if rc == 0 and not config.dry_run:
        print(f"✅ Pulled image: {config.image}")
    return rc


def run(
    argv: list[str],
    environ: Mapping[str, str] | None = None,
    now: datetime | None = None,
) -> int:
    """Parse argv and run the selected mode. Returns the process exit code."""
    try:
        config, result = make_config(argv, environ=environ, now=now)
        configure_logging(config.verbose)
        mode, extra = result.mode, result.passthrough
        if mode == "help":
            print(USAGE, end="")
            return 0
        if mode == "config":
            print(generate_text(config), end="")
            return 0
        if mode == "build":
            return do_build(config, extra, now=now)
        if mode == "load":
            return do_load(config, extra)
        if mode == "pull":
            return do_pull(config, extra)
    except OsaftDockerError as e:
        print(f"❌ {e}", file=sys.stderr)
        return e.exit_code

    if extra:
        log.warning("unknown mode '%s'; nothing done", extra[0])
    else:
        log.warning("no mode given; nothing done")
    print(USAGE, end="", file=sys.stderr)
    return EXIT_UNKNOWN_MODE


def configure_logging(verbose: bool) -> None:
    """Package loggers at DEBUG with parsed -v, WARNING otherwise."""
    logging.basicConfig(format="%(levelname)s: %(message)s")
    logging.getLogger("osaft_docker").setLevel(logging.DEBUG if verbose else logging.WARNING)


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    sys.exit(run(argv))


if __name__ == "__main__":
    main()
