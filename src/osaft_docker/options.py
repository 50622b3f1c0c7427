"""Ordered-rule option parser for both scripts.

Each Rule maps one token (or `-token=VALUE` for value rules) to an effect on
BuildConfig. Parsing walks argv left to right, picks the first mode keyword,
and stops at the first token no rule matches (or at `--`); everything from
there on is kept verbatim as pass-through arguments. Platform selectors are
applied before all other flags so explicit flags always beat platform defaults.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

from osaft_docker.config import COMPONENTS, BuildConfig

log = logging.getLogger(__name__)

PHASE_PLATFORM = "platform"
PHASE_FLAG = "flag"

Effect = Callable[[BuildConfig, "str | None"], None]


@dataclass(frozen=True)
class Rule:
    token: str
    effect: Effect
    takes_value: bool = False
    phase: str = PHASE_FLAG

    def match(self, arg: str) -> tuple[bool, str | None]:
        """(matched, value). Value rules match `token=VALUE` (empty value allowed)."""
        if self.takes_value:
            prefix = f"{self.token}="
            if arg.startswith(prefix):
                return True, arg[len(prefix) :]
            return False, None
        return arg == self.token, None


@dataclass
class ParseResult:
    mode: str | None = None
    passthrough: list[str] = field(default_factory=list)


def find_rule(rules: Iterable[Rule], arg: str) -> tuple[Rule, str | None] | None:
    for rule in rules:
        matched, value = rule.match(arg)
        if matched:
            return rule, value
    return None


def parse(
    argv: list[str],
    rules: list[Rule],
    modes: Mapping[str, str],
    config: BuildConfig,
) -> ParseResult:
    """Apply rules to config and return the selected mode and pass-through args.

    modes maps accepted keywords to the canonical mode name (aliases allowed).
    Only the first mode keyword is a mode; a second one ends parsing.
    """
    result = ParseResult()
    matched: list[tuple[Rule, str | None]] = []
    for i, arg in enumerate(argv):
        if arg == "--":
            result.passthrough = list(argv[i + 1 :])
            break
        if result.mode is None and arg in modes:
            result.mode = modes[arg]
            continue
        found = find_rule(rules, arg)
        if found is None:
            result.passthrough = list(argv[i:])
            break
        matched.append(found)

    for phase in (PHASE_PLATFORM, PHASE_FLAG):
        for rule, value in matched:
            if rule.phase == phase:
                rule.effect(config, value)
    log.debug("mode=%s passthrough=%s", result.mode, result.passthrough)
    return result


# --- Effects ---


def _set(attr: str, value: object) -> Effect:
    def effect(cfg: BuildConfig, _v: str | None) -> None:
        setattr(cfg, attr, value)

    return effect


def _set_value(attr: str, conv: Callable[[str], object] = str) -> Effect:
    def effect(cfg: BuildConfig, v: str | None) -> None:
        setattr(cfg, attr, conv(v) if v else None)

    return effect


def _platform(name: str) -> Effect:
    def effect(cfg: BuildConfig, _v: str | None) -> None:
        cfg.apply_platform(name)

    return effect


def _feature(name: str, value: bool) -> Effect:
    def effect(cfg: BuildConfig, _v: str | None) -> None:
        cfg.features[name] = value

    return effect


def _option(name: str, value: bool) -> Effect:
    def effect(cfg: BuildConfig, _v: str | None) -> None:
        setattr(cfg.options, name, value)

    return effect


def _clean(value: bool) -> Effect:
    def effect(cfg: BuildConfig, _v: str | None) -> None:
        cfg.options.set_clean(value)

    return effect


def _source_url(component: str) -> Effect:
    def effect(cfg: BuildConfig, v: str | None) -> None:
        cfg.sources[component].set_url(v or "")

    return effect


def _source_checksum(component: str) -> Effect:
    def effect(cfg: BuildConfig, v: str | None) -> None:
        cfg.sources[component].set_checksum(v)

    return effect


def _source_local(component: str) -> Effect:
    def effect(cfg: BuildConfig, v: str | None) -> None:
        cfg.sources[component].set_local(v or "")

    return effect


def _required(attr: str) -> Effect:
    """Value rule that keeps the previous value when given an empty one."""

    def effect(cfg: BuildConfig, v: str | None) -> None:
        if v:
            setattr(cfg, attr, v)
        else:
            log.warning("ignoring empty value for %s", attr)

    return effect


def _toggle_pair(token: str, setter: Callable[[bool], Effect]) -> list[Rule]:
    return [Rule(f"-{token}", setter(True)), Rule(f"-no-{token}", setter(False))]


# --- Tables ---

CONTROL_RULES: list[Rule] = [
    Rule("-n", _set("dry_run", True)),
    Rule("-v", _set("verbose", True)),
]

HELP_TOKENS = ("-help", "--help", "-h")

BUILD_MODES: dict[str, str] = {
    "build": "build",
    "load": "load",
    "pull": "pull",
    "config": "config",
    "dockerfile": "config",
    "help": "help",
    **{t: "help" for t in HELP_TOKENS},
}

# token -> feature name
FEATURE_TOKENS = {
    "openssl": "openssl",
    "ssleay": "ssleay",
    "ssl-alt": "ssl_alt",
    "tcl": "tcl_gui",
    "wget": "wget",
    "sha": "checksum",
}

# token -> BuildOptions attribute
OPTION_TOKENS = {
    "force-rm": "force_rm",
    "rm": "rm",
    "rm-tar": "rm_tar",
    "alias": "alias",
    "rm-dir": "rm_workdir",
}


def _build_rules() -> list[Rule]:
    rules: list[Rule] = list(CONTROL_RULES)
    rules += [
        Rule("-alpine", _platform("alpine"), phase=PHASE_PLATFORM),
        Rule("-debian", _platform("debian"), phase=PHASE_PLATFORM),
        Rule("-custom", _platform("custom"), phase=PHASE_PLATFORM),
        Rule("-from", _set_value("base_image"), takes_value=True),
        Rule("-registry", _required("image_registry"), takes_value=True),
        Rule("-tag", _required("image_tag"), takes_value=True),
        Rule("-workdir", _set_value("workdir", Path), takes_value=True),
        Rule("-archive", _set_value("archive", Path), takes_value=True),
        Rule("-sources", _set_value("sources_file", Path), takes_value=True),
        Rule("-clean", _clean(True)),
        Rule("-no-clean", _clean(False)),
    ]
    for component in COMPONENTS:
        rules += [
            Rule(f"-{component}", _source_url(component), takes_value=True),
            Rule(f"-{component}-sha", _source_checksum(component), takes_value=True),
            Rule(f"-{component}-tar", _source_local(component), takes_value=True),
        ]
    for token, feature in FEATURE_TOKENS.items():
        rules += _toggle_pair(token, lambda v, f=feature: _feature(f, v))
    for token, attr in OPTION_TOKENS.items():
        rules += _toggle_pair(token, lambda v, a=attr: _option(a, v))
    return rules


BUILD_RULES: list[Rule] = _build_rules()

RUN_MODES: dict[str, str] = {
    **{m: m for m in ("build", "usage", "shell", "root", "call", "status", "rmi", "gui", "hacker")},
    "help": "help",
    **{t: "help" for t in HELP_TOKENS},
}

RUN_RULES: list[Rule] = [
    *CONTROL_RULES,
    Rule("-id", _set_value("image_id"), takes_value=True),
    Rule("-tag", _required("image_tag"), takes_value=True),
    Rule("-registry", _required("image_registry"), takes_value=True),
]


def parse_build_argv(argv: list[str], config: BuildConfig) -> ParseResult:
    return parse(argv, BUILD_RULES, BUILD_MODES, config)


def parse_run_argv(argv: list[str], config: BuildConfig) -> ParseResult:
    return parse(argv, RUN_RULES, RUN_MODES, config)
