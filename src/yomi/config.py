from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Mapping

from .encoding import URL_PLACEHOLDER
from .markup import JISHO_LAYOUT, PageLayout

__all__ = [
    "ConfigError",
    "DEFAULT_TIMEOUT",
    "DEFAULT_URL_TEMPLATE",
    "LookupConfig",
    "load_config",
    "resolve_config_path",
]

DEFAULT_URL_TEMPLATE = "https://jisho.org/word/{}"
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "yomi/0.1 (+https://jisho.org)"

_CONFIG_ENV = "YOMI_CONFIG"
_URL_TEMPLATE_ENV = "YOMI_URL_TEMPLATE"
_TIMEOUT_ENV = "YOMI_TIMEOUT"
_LAYOUT_KEYS = tuple(f.name for f in fields(PageLayout))


class ConfigError(ValueError):
    """Raised when a lookup configuration value is unusable."""


def validate_url_template(template: str) -> str:
    count = template.count(URL_PLACEHOLDER)
    if count != 1:
        raise ConfigError(
            f"URL template must contain exactly one '{URL_PLACEHOLDER}' placeholder "
            f"(found {count}): {template!r}"
        )
    return template


def _coerce_timeout(value: object, source: str) -> float:
    if isinstance(value, bool):
        raise ConfigError(f"{source}: timeout must be a number.")
    try:
        timeout = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{source}: timeout must be a number, got {value!r}") from exc
    if timeout <= 0:
        raise ConfigError(f"{source}: timeout must be positive, got {timeout}")
    return timeout


@dataclass(frozen=True, slots=True)
class LookupConfig:
    url_template: str = DEFAULT_URL_TEMPLATE
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = DEFAULT_USER_AGENT
    layout: PageLayout = JISHO_LAYOUT

    def __post_init__(self) -> None:
        validate_url_template(self.url_template)
        _coerce_timeout(self.timeout, "timeout")


def _default_config_path() -> Path:
    return Path.home() / ".config" / "yomi" / "config.toml"


def resolve_config_path(path: Path | str | None = None, env: Mapping[str, str] | None = None) -> Path | None:
    """
    Pick the config file to read: explicit path, then $YOMI_CONFIG, then the
    per-user default when it exists.
    """
    environ = os.environ if env is None else env
    if path is not None:
        candidate = Path(path).expanduser()
        if not candidate.is_file():
            raise ConfigError(f"Config file not found: {candidate}")
        return candidate
    env_path = environ.get(_CONFIG_ENV)
    if env_path:
        candidate = Path(env_path).expanduser()
        if not candidate.is_file():
            raise ConfigError(f"{_CONFIG_ENV} points to a missing file: {candidate}")
        return candidate
    default = _default_config_path()
    if default.is_file():
        return default
    return None


def _read_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse config file: {path}") from exc


def _apply_file(config: LookupConfig, path: Path) -> LookupConfig:
    raw = _read_toml(path)
    changes: dict[str, object] = {}

    lookup = raw.get("lookup", {})
    if not isinstance(lookup, dict):
        raise ConfigError(f"{path.name}: [lookup] must be a table.")
    template = lookup.get("url_template")
    if template is not None:
        if not isinstance(template, str):
            raise ConfigError(f"{path.name}: url_template must be a string.")
        changes["url_template"] = template
    if "timeout" in lookup:
        changes["timeout"] = _coerce_timeout(lookup["timeout"], path.name)
    user_agent = lookup.get("user_agent")
    if user_agent is not None:
        if not isinstance(user_agent, str):
            raise ConfigError(f"{path.name}: user_agent must be a string.")
        changes["user_agent"] = user_agent

    layout = raw.get("layout", {})
    if not isinstance(layout, dict):
        raise ConfigError(f"{path.name}: [layout] must be a table.")
    layout_changes: dict[str, str] = {}
    for key, value in layout.items():
        if key not in _LAYOUT_KEYS:
            raise ConfigError(f"{path.name}: unknown layout key {key!r}")
        if not isinstance(value, str) or not value:
            raise ConfigError(f"{path.name}: layout.{key} must be a non-empty string.")
        layout_changes[key] = value
    if layout_changes:
        changes["layout"] = replace(config.layout, **layout_changes)

    return replace(config, **changes)


def load_config(
    path: Path | str | None = None,
    *,
    env: Mapping[str, str] | None = None,
    url_template: str | None = None,
    timeout: float | None = None,
) -> LookupConfig:
    """
    Build a LookupConfig from defaults, a TOML file, the environment and
    explicit overrides, each layer replacing the previous one.
    """
    environ = os.environ if env is None else env
    config = LookupConfig()

    config_path = resolve_config_path(path, environ)
    if config_path is not None:
        config = _apply_file(config, config_path)

    env_template = environ.get(_URL_TEMPLATE_ENV)
    if env_template:
        config = replace(config, url_template=env_template)
    env_timeout = environ.get(_TIMEOUT_ENV)
    if env_timeout:
        config = replace(config, timeout=_coerce_timeout(env_timeout, _TIMEOUT_ENV))

    if url_template is not None:
        config = replace(config, url_template=url_template)
    if timeout is not None:
        config = replace(config, timeout=_coerce_timeout(timeout, "--timeout"))
    return config
