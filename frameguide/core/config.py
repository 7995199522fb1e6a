"""Runtime settings — environment variables with per-user defaults."""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path

from frameguide.exceptions import ConfigError

PROMPT_MODES = ("stdin", "arg", "file")


@dataclass(frozen=True)
class ProviderDefaults:
    prompt_mode: str
    prompt_flag: str = ""
    default_args: tuple[str, ...] = ()


# Known reasoning-provider CLIs and how they accept a prompt.
KNOWN_PROVIDERS: dict[str, ProviderDefaults] = {
    "amp": ProviderDefaults("stdin", default_args=("--dangerously-allow-all",)),
    "claude": ProviderDefaults(
        "stdin", default_args=("--print", "--dangerously-skip-permissions")
    ),
    "opencode": ProviderDefaults("arg", default_args=("run",)),
    "aider": ProviderDefaults("arg", prompt_flag="--message", default_args=("--yes-always",)),
    "codex": ProviderDefaults("arg", default_args=("exec", "--full-auto")),
}

_FALLBACK_PROVIDER = ProviderDefaults("stdin")


@dataclass
class ProviderConfig:
    """How to invoke the external reasoning subprocess."""

    command: str = "claude"
    args: list[str] | None = None
    prompt_mode: str = ""
    prompt_flag: str = ""

    def __post_init__(self) -> None:
        defaults = KNOWN_PROVIDERS.get(Path(self.command).name, _FALLBACK_PROVIDER)
        if not self.prompt_mode:
            self.prompt_mode = defaults.prompt_mode
        if not self.prompt_flag:
            self.prompt_flag = defaults.prompt_flag
        # None means "not configured"; an explicit empty list is kept as-is.
        if self.args is None:
            self.args = list(defaults.default_args)
        if self.prompt_mode not in PROMPT_MODES:
            self.prompt_mode = "stdin"


def default_cache_dir() -> Path:
    try:
        return Path.home() / ".frameguide" / "resources"
    except RuntimeError:
        return Path(".frameguide") / "resources"


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(key, raw, "integer") from None


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(key, raw, "number") from None


def _env_bool(key: str, default: bool) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off", "")


@dataclass
class Settings:
    cache_dir: Path = field(default_factory=default_cache_dir)
    resources_enabled: bool = True
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    consult_timeout: float = 120.0
    max_frameworks: int = 3
    min_relevance_score: int = 2
    guidance_min_words: int = 200
    guidance_max_words: int = 400
    resolve_workers: int = 5
    http_timeout: float = 10.0

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from ``FRAMEGUIDE_*`` environment variables."""
        cache_dir_raw = os.environ.get("FRAMEGUIDE_CACHE_DIR")
        cache_dir = (
            Path(cache_dir_raw).expanduser() if cache_dir_raw else default_cache_dir()
        )

        args_raw = os.environ.get("FRAMEGUIDE_PROVIDER_ARGS")
        args: list[str] | None = None
        if args_raw is not None:
            try:
                args = shlex.split(args_raw)
            except ValueError:
                raise ConfigError("FRAMEGUIDE_PROVIDER_ARGS", args_raw, "argument list") from None
        provider = ProviderConfig(
            command=os.environ.get("FRAMEGUIDE_PROVIDER_COMMAND", "claude"),
            args=args,
            prompt_mode=os.environ.get("FRAMEGUIDE_PROMPT_MODE", ""),
            prompt_flag=os.environ.get("FRAMEGUIDE_PROMPT_FLAG", ""),
        )

        return cls(
            cache_dir=cache_dir,
            resources_enabled=_env_bool("FRAMEGUIDE_RESOURCES_ENABLED", True),
            provider=provider,
            consult_timeout=_env_float("FRAMEGUIDE_CONSULT_TIMEOUT", 120.0),
            max_frameworks=_env_int("FRAMEGUIDE_MAX_FRAMEWORKS", 3),
            min_relevance_score=_env_int("FRAMEGUIDE_MIN_RELEVANCE_SCORE", 2),
            guidance_min_words=_env_int("FRAMEGUIDE_GUIDANCE_MIN_WORDS", 200),
            guidance_max_words=_env_int("FRAMEGUIDE_GUIDANCE_MAX_WORDS", 400),
            resolve_workers=_env_int("FRAMEGUIDE_RESOLVE_WORKERS", 5),
            http_timeout=_env_float("FRAMEGUIDE_HTTP_TIMEOUT", 10.0),
        )
