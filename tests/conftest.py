"""Pytest fixtures for osaft_docker tests."""

import logging
from datetime import datetime
from pathlib import Path

import pytest

from osaft_docker.config import BuildConfig, default_config

FIXED_NOW = datetime(2026, 10, 18, 12, 30, 45)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Environment without OSAFT_DOCKER_* so defaults apply."""
    monkeypatch.delenv("OSAFT_DOCKER_REGISTRY", raising=False)
    monkeypatch.delenv("OSAFT_DOCKER_TAG", raising=False)
    return {}


@pytest.fixture
def build_config(clean_env: dict[str, str]) -> BuildConfig:
    """Build-script default config (tag 261018)."""
    return default_config(build=True, environ=clean_env, now=FIXED_NOW)


@pytest.fixture
def in_tmp(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test with cwd set to tmp_path."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture(autouse=True)
def reset_package_logger():
    """CLI runs set the osaft_docker logger level; restore it after each test."""
    yield
    logging.getLogger("osaft_docker").setLevel(logging.NOTSET)
