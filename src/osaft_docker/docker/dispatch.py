"""Run or print a chain of engine commands, stopping at the first failure."""

from __future__ import annotations

import subprocess
import sys
from dataclasses import dataclass, field
from pathlib import Path

from osaft_docker.errors import EXIT_NOT_FOUND
from osaft_docker.helpers import shell_join

DRY_RUN_PREFIX = "[dry-run] would:"


@dataclass(frozen=True)
class Command:
    program: str
    args: tuple[str, ...] = field(default_factory=tuple)

    @property
    def argv(self) -> list[str]:
        return [self.program, *self.args]

    def text(self) -> str:
        return shell_join(self.argv)


def docker(*args: str) -> Command:
    return Command("docker", tuple(args))


def dispatch(
    commands: list[Command],
    *,
    dry_run: bool = False,
    verbose: bool = False,
    cwd: Path | None = None,
) -> int:
    """Execute commands in order. Returns 0, or the return code of the first failing command.

    With dry_run nothing is executed; each command is printed instead.
    With verbose each command is printed before it runs.
    """
    if dry_run:
        for cmd in commands:
            print(f"{DRY_RUN_PREFIX} {cmd.text()}")
        return 0
    for cmd in commands:
        if verbose:
            print(f"+ {cmd.text()}", file=sys.stderr)
        try:
            r = subprocess.run(cmd.argv, cwd=str(cwd) if cwd is not None else None)
        except FileNotFoundError:
            print(f"❌ {cmd.program} not found in PATH", file=sys.stderr)
            return EXIT_NOT_FOUND
        if r.returncode != 0:
            print(f"❌ Command failed ({r.returncode}): {cmd.text()}", file=sys.stderr)
            return r.returncode
    return 0
