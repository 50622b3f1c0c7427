"""Exit codes and exceptions shared by the build script and the runner."""

from __future__ import annotations

EXIT_OK = 0
EXIT_USAGE = 2
EXIT_WORKDIR = 2
EXIT_UNKNOWN_MODE = 3
EXIT_RECIPE = 4
EXIT_NOT_FOUND = 127


class OsaftDockerError(Exception):
    """Base error; exit_code is what the CLI returns when it catches one."""

    exit_code = 1


class WorkdirExistsError(OsaftDockerError):
    exit_code = EXIT_WORKDIR


class WorkdirCreateError(OsaftDockerError):
    exit_code = EXIT_WORKDIR


class RecipeError(OsaftDockerError):
    """Enabled component has no usable source (neither local archive nor URL)."""

    exit_code = EXIT_RECIPE


class SourcesFileError(OsaftDockerError):
    exit_code = EXIT_USAGE
