"""Platform variants: base image, package-manager syntax, package lists and feature defaults."""

from __future__ import annotations

from typing import Any

FEATURES = ("openssl", "ssleay", "ssl_alt", "tcl_gui", "wget", "checksum")

_ALPINE: dict[str, Any] = {
    "base_image": "alpine:3.18",
    "update": "apk update",
    "install": "apk add --no-cache {packages}",
    "install_build": "apk add --no-cache --virtual {name} {packages}",
    "remove_build": "apk del --purge {name}",
    "cleanup": "rm -rf /var/cache/apk/*",
    "packages": [
        "perl",
        "perl-readonly",
        "perl-io-socket-ssl",
        "perl-net-dns",
        "perl-mozilla-ca",
        "ncurses",
        "ca-certificates",
        "openssl",
    ],
    "ssleay_package": "perl-net-ssleay",
    "ssl_alt_packages": ["libressl"],
    "tcl_packages": ["tcl", "tk", "font-misc-misc"],
    "build_deps": {
        "ssleay": ["gcc", "make", "musl-dev", "perl-dev", "openssl-dev", "zlib-dev"],
        "openssl": ["gcc", "make", "musl-dev", "linux-headers", "perl", "zlib-dev"],
    },
    "features": {
        "openssl": False,
        "ssleay": True,
        "ssl_alt": False,
        "tcl_gui": False,
        "wget": True,
        "checksum": True,
    },
}

_DEBIAN: dict[str, Any] = {
    "base_image": "debian:stable-slim",
    "update": "apt-get update",
    "install": "apt-get install -y --no-install-recommends {packages}",
    "install_build": "apt-get install -y --no-install-recommends {packages}",
    "remove_build": "apt-get purge -y --auto-remove {packages}",
    "cleanup": "rm -rf /var/lib/apt/lists/*",
    "packages": [
        "perl",
        "libreadonly-perl",
        "libio-socket-ssl-perl",
        "libnet-dns-perl",
        "libmozilla-ca-perl",
        "ncurses-bin",
        "ca-certificates",
        "openssl",
    ],
    "ssleay_package": "libnet-ssleay-perl",
    "ssl_alt_packages": ["gnutls-bin"],
    "tcl_packages": ["tcl", "tk"],
    "build_deps": {
        "ssleay": ["gcc", "make", "libc6-dev", "libperl-dev", "libssl-dev", "zlib1g-dev"],
        "openssl": ["gcc", "make", "libc6-dev", "perl", "zlib1g-dev"],
    },
    "features": {
        "openssl": False,
        "ssleay": False,
        "ssl_alt": True,
        "tcl_gui": False,
        "wget": True,
        "checksum": True,
    },
}

# Same package syntax as alpine; base image normally comes from -from=IMAGE.
_CUSTOM: dict[str, Any] = {
    **_ALPINE,
    "features": {
        "openssl": False,
        "ssleay": False,
        "ssl_alt": False,
        "tcl_gui": False,
        "wget": False,
        "checksum": True,
    },
}

PLATFORMS: dict[str, dict[str, Any]] = {
    "alpine": _ALPINE,
    "debian": _DEBIAN,
    "custom": _CUSTOM,
}

DEFAULT_PLATFORM = "alpine"


def get_platform(name: str) -> dict[str, Any]:
    """Platform table for name. Raises ValueError for unknown variants."""
    try:
        return PLATFORMS[name]
    except KeyError:
        msg = f"Unknown platform variant: {name} (expected one of {', '.join(PLATFORMS)})"
        raise ValueError(msg) from None


def default_features(name: str) -> dict[str, bool]:
    """Fresh copy of the platform's feature defaults."""
    return dict(get_platform(name)["features"])
