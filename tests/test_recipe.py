"""Tests for osaft_docker.recipe (generator and formatter)."""

from pathlib import Path

import pytest

from osaft_docker.config import BuildConfig
from osaft_docker.errors import RecipeError
from osaft_docker.options import parse_build_argv
from osaft_docker.recipe import generate, generate_text, recipe_context_files
from osaft_docker.recipe.instructions import (
    Cmd,
    Comment,
    Copy,
    Entrypoint,
    Env,
    From,
    Label,
    Run,
    render,
)


def _runs(config: BuildConfig) -> list[Run]:
    return [i for i in generate(config) if isinstance(i, Run)]


class TestFormatter:
    def test_run_joins_commands(self) -> None:
        assert Run(("a", "b")).render() == "RUN a \\\n\t&& b"

    def test_exec_form(self) -> None:
        assert Entrypoint(("/O-Saft/o-saft.pl",)).render() == 'ENTRYPOINT ["/O-Saft/o-saft.pl"]'
        assert Cmd(("--norc",)).render() == 'CMD ["--norc"]'

    def test_label_values_quoted(self) -> None:
        assert Label((("a", 'x "y"'),)).render() == 'LABEL a="x \\"y\\""'

    def test_env_continuation(self) -> None:
        assert Env((("A", "1"), ("B", "2"))).render() == "ENV A=1 \\\n\tB=2"

    def test_comment_starts_paragraph(self) -> None:
        text = render([Comment("x"), From("alpine"), Comment("y"), Copy("a", "/b")])
        assert text == "# x\nFROM alpine\n\n# y\nCOPY a /b\n"


class TestAlpineDefaults:
    """build + -alpine + defaults: apk update, O-Saft block, Net::SSLeay block."""

    def test_scenario(self, build_config: BuildConfig) -> None:
        parse_build_argv(["build", "-alpine"], build_config)
        text = generate_text(build_config)
        assert "FROM alpine:3.18" in text
        assert "RUN apk update" in text
        assert "# O-Saft\n" in text
        assert "# Net::SSLeay\n" in text
        assert "# OpenSSL\n" not in text
        assert build_config.image == "owasp/o-saft:261018"

    def test_block_order(self, build_config: BuildConfig) -> None:
        build_config.features["openssl"] = True
        titles = [i.text for i in generate(build_config) if isinstance(i, Comment)]
        assert titles[1:] == ["base system", "O-Saft", "Net::SSLeay", "OpenSSL", "runtime"]

    def test_entrypoint_last(self, build_config: BuildConfig) -> None:
        ins = generate(build_config)
        assert isinstance(ins[-2], Entrypoint)
        assert isinstance(ins[-1], Cmd)

    def test_component_is_one_run_with_cleanup(self, build_config: BuildConfig) -> None:
        ssleay = _runs(build_config)[2]
        cmds = ssleay.commands
        assert cmds[0] == "apk update"
        assert cmds[1].startswith("apk add --no-cache --virtual .build-ssleay")
        assert "make install" in cmds
        assert cmds[-2] == "apk del --purge .build-ssleay"
        assert cmds[-1] == "rm -rf /var/cache/apk/*"

    def test_distribution_ssleay_only_when_not_built(self, build_config: BuildConfig) -> None:
        assert "perl-net-ssleay" not in _runs(build_config)[0].commands[1]
        build_config.features["ssleay"] = False
        assert "perl-net-ssleay" in _runs(build_config)[0].commands[1]


class TestDebian:
    def test_apt_syntax(self, build_config: BuildConfig) -> None:
        parse_build_argv(["build", "-debian"], build_config)
        text = generate_text(build_config)
        assert "FROM debian:stable-slim" in text
        assert "apt-get update" in text
        assert "libnet-ssleay-perl" in text
        assert "gnutls-bin" in text
        assert "# Net::SSLeay\n" not in text

    def test_custom_base_image(self, build_config: BuildConfig) -> None:
        parse_build_argv(["-custom", "-from=registry.local/base:1"], build_config)
        assert "FROM registry.local/base:1" in generate_text(build_config)

    def test_openssl_purge_keeps_runtime_packages(self, build_config: BuildConfig) -> None:
        parse_build_argv(["build", "-debian", "-openssl"], build_config)
        purges = [
            c for r in _runs(build_config) for c in r.commands if c.startswith("apt-get purge")
        ]
        assert purges == ["apt-get purge -y --auto-remove gcc make libc6-dev zlib1g-dev"]


class TestChecksum:
    def test_absent_checksum_emits_no_verification(self, build_config: BuildConfig) -> None:
        assert "sha256sum" not in generate_text(build_config)

    def test_checksum_emits_one_verification(self, build_config: BuildConfig) -> None:
        build_config.sources["osaft"].set_checksum("deadbeef")
        core = _runs(build_config)[1]
        verify = [c for c in core.commands if "sha256sum" in c]
        assert verify == ["echo 'deadbeef  /tmp/o-saft.tgz' | sha256sum -c -"]

    def test_no_sha_disables_verification(self, build_config: BuildConfig) -> None:
        build_config.sources["osaft"].set_checksum("deadbeef")
        parse_build_argv(["-no-sha"], build_config)
        assert "sha256sum" not in generate_text(build_config)


class TestFetch:
    def test_url_uses_wget(self, build_config: BuildConfig) -> None:
        core = _runs(build_config)[1].commands
        fetch = [c for c in core if c.startswith(("wget", "curl"))]
        assert fetch == [
            "wget -q https://github.com/OWASP/O-Saft/raw/master/o-saft.tgz -O /tmp/o-saft.tgz"
        ]

    def test_no_wget_uses_curl(self, build_config: BuildConfig) -> None:
        build_config.features["wget"] = False
        text = generate_text(build_config)
        assert "curl -fsSL https://github.com/OWASP/O-Saft/raw/master/o-saft.tgz" in text
        assert "wget" not in text

    def test_local_archive_copies_instead_of_fetching(self, build_config: BuildConfig) -> None:
        build_config.sources["osaft"].set_local("/src/o-saft-23.tgz")
        ins = generate(build_config)
        copies = [i for i in ins if isinstance(i, Copy)]
        assert copies == [Copy("osaft-o-saft-23.tgz", "/tmp/o-saft.tgz")]
        assert "raw/master/o-saft.tgz" not in render(ins)
        assert recipe_context_files(build_config) == {
            "osaft-o-saft-23.tgz": Path("/src/o-saft-23.tgz")
        }

    def test_same_archive_name_for_two_components(self, build_config: BuildConfig) -> None:
        build_config.sources["osaft"].set_local("/a/src.tgz")
        build_config.sources["ssleay"].set_local("/b/src.tgz")
        copies = [i for i in generate(build_config) if isinstance(i, Copy)]
        assert copies == [
            Copy("osaft-src.tgz", "/tmp/o-saft.tgz"),
            Copy("ssleay-src.tgz", "/tmp/Net-SSLeay.tgz"),
        ]
        assert recipe_context_files(build_config) == {
            "osaft-src.tgz": Path("/a/src.tgz"),
            "ssleay-src.tgz": Path("/b/src.tgz"),
        }

    def test_enabled_component_without_source_fails(self, build_config: BuildConfig) -> None:
        build_config.sources["ssleay"].url = None
        with pytest.raises(RecipeError, match="Net::SSLeay"):
            generate(build_config)

    def test_disabled_component_without_source_is_fine(self, build_config: BuildConfig) -> None:
        build_config.sources["openssl"].url = None
        generate(build_config)

    def test_disabled_component_local_file_not_staged(self, build_config: BuildConfig) -> None:
        build_config.sources["openssl"].set_local("/src/openssl.tgz")
        assert recipe_context_files(build_config) == {}


class TestDeterminism:
    def test_same_config_same_text(self, build_config: BuildConfig) -> None:
        parse_build_argv(["-openssl", "-tcl", "-ssl-alt", "-osaft-sha=abc"], build_config)
        assert generate_text(build_config) == generate_text(build_config)

    def test_openssl_on_path_and_rc(self, build_config: BuildConfig) -> None:
        build_config.features["openssl"] = True
        text = generate_text(build_config)
        assert "PATH=/O-Saft:/openssl/bin:$PATH" in text
        assert '--openssl=$OPENSSL_DIR/bin/openssl" >> $OSAFT_DIR/.o-saft.pl' in text
