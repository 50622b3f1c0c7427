"""Docker engine helpers: command dispatch, working directory, terminal action sequences."""

from .dispatch import Command, dispatch, docker
from .workdir import create_workdir, default_workdir, remove_workdir

__all__ = [
    "Command",
    "create_workdir",
    "default_workdir",
    "dispatch",
    "docker",
    "remove_workdir",
]
