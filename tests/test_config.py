"""Tests for osaft_docker.config and osaft_docker.helpers."""

from datetime import datetime
from pathlib import Path

import pytest

from osaft_docker.config import BuildConfig, default_config
from osaft_docker.errors import SourcesFileError
from osaft_docker.helpers import date_tag, is_absent, load_sources_file, shell_join
from osaft_docker.platforms import PLATFORMS, default_features, get_platform


class TestDefaultConfig:
    def test_build_defaults(self) -> None:
        cfg = default_config(build=True, environ={}, now=datetime(2026, 1, 2))
        assert cfg.image == "owasp/o-saft:260102"
        assert cfg.platform == "alpine"

    def test_runner_defaults(self) -> None:
        assert default_config(build=False, environ={}).image == "owasp/o-saft:latest"

    def test_environment_overrides(self) -> None:
        env = {"OSAFT_DOCKER_REGISTRY": "me/osaft", "OSAFT_DOCKER_TAG": "23.01"}
        assert default_config(build=True, environ=env).image == "me/osaft:23.01"

    def test_reads_os_environ(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OSAFT_DOCKER_TAG", "x1")
        assert default_config(build=False).image_tag == "x1"

    def test_sources_are_per_instance(self) -> None:
        a, b = BuildConfig(), BuildConfig()
        a.sources["osaft"].set_url("https://example.org/a.tgz")
        assert b.sources["osaft"].url != "https://example.org/a.tgz"


class TestPlatforms:
    def test_feature_defaults_are_copies(self) -> None:
        f = default_features("alpine")
        f["ssleay"] = False
        assert PLATFORMS["alpine"]["features"]["ssleay"] is True

    def test_unknown_platform(self) -> None:
        with pytest.raises(ValueError, match="Unknown platform variant"):
            get_platform("gentoo")


class TestSourcesFile:
    def test_apply(self, tmp_path: Path) -> None:
        p = tmp_path / "sources.yaml"
        p.write_text(
            "osaft:\n  tar: /src/o-saft.tgz\n  sha256: abc\n"
            "openssl:\n  url: https://example.org/openssl.tgz\n  sha256: none\n"
        )
        cfg = BuildConfig()
        cfg.apply_sources(load_sources_file(p))
        assert cfg.sources["osaft"].local_path == Path("/src/o-saft.tgz")
        assert cfg.sources["osaft"].checksum == "abc"
        assert cfg.sources["openssl"].url == "https://example.org/openssl.tgz"
        assert cfg.sources["openssl"].checksum is None

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SourcesFileError, match="not found"):
            load_sources_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        p = tmp_path / "bad.yaml"
        p.write_text("osaft: [unclosed\n")
        with pytest.raises(SourcesFileError, match="Invalid YAML"):
            load_sources_file(p)

    def test_unknown_key(self, tmp_path: Path) -> None:
        p = tmp_path / "s.yaml"
        p.write_text("osaft:\n  md5: abc\n")
        with pytest.raises(SourcesFileError, match="md5"):
            load_sources_file(p)

    def test_unknown_component(self) -> None:
        with pytest.raises(SourcesFileError, match="Unknown source component"):
            BuildConfig().apply_sources({"libressl": {"url": "x"}})


class TestHelpers:
    def test_date_tag(self) -> None:
        assert date_tag(datetime(2026, 10, 18)) == "261018"

    @pytest.mark.parametrize("value", [None, "", "none", "NONE", "-", "  "])
    def test_absent(self, value: str | None) -> None:
        assert is_absent(value)

    def test_not_absent(self) -> None:
        assert not is_absent("abc")

    def test_shell_join(self) -> None:
        assert shell_join(["docker", "run", "a b"]) == "docker run 'a b'"
