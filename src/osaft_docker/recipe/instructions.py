"""Typed Dockerfile instruction records and the formatter that renders them."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Union

RUN_JOIN = " \\\n\t&& "


@dataclass(frozen=True)
class Comment:
    text: str

    def render(self) -> str:
        return "\n".join(f"# {line}".rstrip() for line in self.text.splitlines() or [""])


@dataclass(frozen=True)
class From:
    image: str

    def render(self) -> str:
        return f"FROM {self.image}"


@dataclass(frozen=True)
class Label:
    labels: tuple[tuple[str, str], ...]

    def render(self) -> str:
        pairs = [f"{k}={json.dumps(v)}" for k, v in self.labels]
        return "LABEL " + " \\\n\t".join(pairs)


@dataclass(frozen=True)
class Env:
    values: tuple[tuple[str, str], ...]

    def render(self) -> str:
        pairs = [f"{k}={v}" for k, v in self.values]
        return "ENV " + " \\\n\t".join(pairs)


@dataclass(frozen=True)
class Workdir:
    path: str

    def render(self) -> str:
        return f"WORKDIR {self.path}"


@dataclass(frozen=True)
class Copy:
    src: str
    dest: str

    def render(self) -> str:
        return f"COPY {self.src} {self.dest}"


@dataclass(frozen=True)
class Run:
    """One layer: shell commands chained with && so any failure fails the whole block."""

    commands: tuple[str, ...] = field(default_factory=tuple)

    def render(self) -> str:
        return "RUN " + RUN_JOIN.join(self.commands)


@dataclass(frozen=True)
class Entrypoint:
    argv: tuple[str, ...]

    def render(self) -> str:
        return f"ENTRYPOINT {json.dumps(list(self.argv))}"


@dataclass(frozen=True)
class Cmd:
    argv: tuple[str, ...]

    def render(self) -> str:
        return f"CMD {json.dumps(list(self.argv))}"


Instruction = Union[Comment, From, Label, Env, Workdir, Copy, Run, Entrypoint, Cmd]


def render(instructions: list[Instruction]) -> str:
    """Dockerfile text, one instruction per line; a Comment starts a new paragraph."""
    out: list[str] = []
    for ins in instructions:
        if isinstance(ins, Comment) and out:
            out.append("")
        out.append(ins.render())
    return "\n".join(out) + "\n"
