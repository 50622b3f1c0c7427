"""Generate the O-Saft recipe (Dockerfile) from a BuildConfig.

Block order is fixed: base system, O-Saft, Net::SSLeay, custom OpenSSL,
then entrypoint. Every component block is a single RUN so fetch, verify,
extract, build, install and cleanup land in one layer.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any

from osaft_docker.config import BuildConfig, SourceSpec
from osaft_docker.errors import RecipeError
from osaft_docker.platforms import get_platform
from osaft_docker.recipe.instructions import (
    Cmd,
    Comment,
    Copy,
    Entrypoint,
    Env,
    From,
    Instruction,
    Label,
    Run,
    Workdir,
    render,
)

OSAFT_DIR = "/O-Saft"
OPENSSL_DIR = "/openssl"
ENTRYPOINT = f"{OSAFT_DIR}/o-saft.pl"
GUI_ENTRYPOINT = f"{OSAFT_DIR}/o-saft.tcl"
DEFAULT_CMD = ("--norc", "--help=docker")

# Per component: archive inside the image, extract dir, build and install steps.
COMPONENT_LAYOUT: dict[str, dict[str, Any]] = {
    "osaft": {
        "title": "O-Saft",
        "feature": None,
        "archive": "/tmp/o-saft.tgz",
        "dir": OSAFT_DIR,
        "steps": [
            f"cd {OSAFT_DIR}",
            "chmod 755 o-saft.pl",
            f"ln -sf {ENTRYPOINT} /usr/local/bin/o-saft",
            "cd /",
        ],
    },
    "ssleay": {
        "title": "Net::SSLeay",
        "feature": "ssleay",
        "archive": "/tmp/Net-SSLeay.tgz",
        "dir": "/tmp/Net-SSLeay",
        "steps": [
            "cd /tmp/Net-SSLeay",
            "PERL_MM_USE_DEFAULT=1 perl Makefile.PL",
            "make",
            "make install",
            "cd /",
            "rm -rf /tmp/Net-SSLeay",
        ],
    },
    "openssl": {
        "title": "OpenSSL",
        "feature": "openssl",
        "archive": "/tmp/openssl.tgz",
        "dir": "/tmp/openssl",
        "steps": [
            "cd /tmp/openssl",
            "./config --prefix=$OPENSSL_DIR --openssldir=$OPENSSL_DIR/ssl"
            " enable-ssl2 enable-ssl3 enable-weak-ssl-ciphers enable-md2 enable-rc5 zlib",
            "make depend",
            "make",
            "make install_sw",
            "cd /",
            "rm -rf /tmp/openssl",
            'echo "--openssl=$OPENSSL_DIR/bin/openssl" >> $OSAFT_DIR/.o-saft.pl',
        ],
    },
}

BLOCK_ORDER = ("osaft", "ssleay", "openssl")


def enabled_components(config: BuildConfig) -> list[str]:
    """Components whose block is emitted, in block order. O-Saft itself is always on."""
    out: list[str] = []
    for name in BLOCK_ORDER:
        feature = COMPONENT_LAYOUT[name]["feature"]
        if feature is None or config.features.get(feature, False):
            out.append(name)
    return out


def fetch_command(url: str, dest: str, use_wget: bool) -> str:
    if use_wget:
        return f"wget -q {shlex.quote(url)} -O {dest}"
    return f"curl -fsSL {shlex.quote(url)} -o {dest}"


def verify_command(checksum: str, archive: str) -> str:
    return f"echo {shlex.quote(f'{checksum}  {archive}')} | sha256sum -c -"


def base_packages(config: BuildConfig) -> list[str]:
    platform = get_platform(config.platform)
    features = config.features
    pkgs = list(platform["packages"])
    pkgs.append("wget" if features.get("wget") else "curl")
    if features.get("ssl_alt"):
        pkgs += platform["ssl_alt_packages"]
    if features.get("tcl_gui"):
        pkgs += platform["tcl_packages"]
    if not features.get("ssleay"):
        pkgs.append(platform["ssleay_package"])
    return pkgs


def _header(config: BuildConfig) -> list[Instruction]:
    platform = get_platform(config.platform)
    enabled = ",".join(sorted(k for k, v in config.features.items() if v))
    path = f"{OSAFT_DIR}:$PATH"
    if config.features.get("openssl"):
        path = f"{OSAFT_DIR}:{OPENSSL_DIR}/bin:$PATH"
    return [
        Comment("O-Saft image recipe generated by osaft-docker-build; do not edit."),
        From(config.base_image or platform["base_image"]),
        Label(
            (
                ("org.opencontainers.image.title", "O-Saft"),
                ("org.opencontainers.image.version", config.image_tag),
                ("org.opencontainers.image.source", "https://github.com/OWASP/O-Saft"),
                ("osaft.platform", config.platform),
                ("osaft.features", enabled),
            )
        ),
        Env(
            (
                ("OSAFT_DIR", OSAFT_DIR),
                ("OPENSSL_DIR", OPENSSL_DIR),
                ("TERM", "xterm"),
                ("PATH", path),
            )
        ),
        Workdir("/"),
    ]


def _base_block(config: BuildConfig) -> list[Instruction]:
    platform = get_platform(config.platform)
    return [
        Comment("base system"),
        Run(
            (
                platform["update"],
                platform["install"].format(packages=" ".join(base_packages(config))),
                platform["cleanup"],
            )
        ),
    ]


def _component_block(config: BuildConfig, name: str) -> list[Instruction]:
    platform = get_platform(config.platform)
    layout = COMPONENT_LAYOUT[name]
    spec: SourceSpec = config.sources[name]
    archive = layout["archive"]
    out: list[Instruction] = [Comment(layout["title"])]
    commands: list[str] = []

    # Runtime packages are never build deps, or the purge below would remove them.
    runtime = set(base_packages(config))
    deps = [p for p in platform["build_deps"].get(name, []) if p not in runtime]
    virtual = f".build-{name}"
    if deps:
        commands.append(platform["update"])
        commands.append(platform["install_build"].format(name=virtual, packages=" ".join(deps)))

    if spec.local_path is not None:
        out.append(Copy(staged_name(name, spec.local_path), archive))
    elif spec.url:
        commands.append(fetch_command(spec.url, archive, bool(config.features.get("wget"))))
    else:
        msg = f"No source for {layout['title']}: use -{name}=URL or -{name}-tar=PATH"
        raise RecipeError(msg)

    if spec.checksum is not None and config.features.get("checksum"):
        commands.append(verify_command(spec.checksum, archive))

    commands += [
        f"mkdir -p {layout['dir']}",
        f"tar -xzf {archive} -C {layout['dir']} --strip-components=1",
        f"rm -f {archive}",
        *layout["steps"],
    ]
    if deps:
        commands.append(platform["remove_build"].format(name=virtual, packages=" ".join(deps)))
        commands.append(platform["cleanup"])
    out.append(Run(tuple(commands)))
    return out


def _runtime(config: BuildConfig) -> list[Instruction]:
    return [
        Comment("runtime"),
        Workdir(OSAFT_DIR),
        Entrypoint((ENTRYPOINT,)),
        Cmd(DEFAULT_CMD),
    ]


def generate(config: BuildConfig) -> list[Instruction]:
    """Instruction list for config. Raises RecipeError if an enabled component has no source."""
    instructions = _header(config) + _base_block(config)
    for name in enabled_components(config):
        instructions += _component_block(config, name)
    instructions += _runtime(config)
    return instructions


def generate_text(config: BuildConfig) -> str:
    return render(generate(config))


def staged_name(name: str, local_path: Path) -> str:
    """File name of a local archive inside the build context, unique per component."""
    return f"{name}-{local_path.name}"


def recipe_context_files(config: BuildConfig) -> dict[str, Path]:
    """Local archives the recipe COPYs, keyed by their name in the build context."""
    out: dict[str, Path] = {}
    for name in enabled_components(config):
        local_path = config.sources[name].local_path
        if local_path is not None:
            out[staged_name(name, local_path)] = local_path
    return out
