from __future__ import annotations

from pathlib import Path

import pytest

from yomi.config import (
    DEFAULT_URL_TEMPLATE,
    ConfigError,
    LookupConfig,
    load_config,
    resolve_config_path,
)
from yomi.markup import JISHO_LAYOUT


def test_defaults_point_at_jisho(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    config = load_config(env={})
    assert config.url_template == DEFAULT_URL_TEMPLATE == "https://jisho.org/word/{}"
    assert config.layout == JISHO_LAYOUT


@pytest.mark.parametrize("template", ["https://jisho.org/word/", "https://x/{}/{}"])
def test_template_needs_exactly_one_placeholder(template: str) -> None:
    with pytest.raises(ConfigError):
        LookupConfig(url_template=template)


def test_timeout_must_be_positive() -> None:
    with pytest.raises(ConfigError):
        LookupConfig(timeout=0)


def test_file_then_env_then_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "yomi.toml"
    config_path.write_text(
        '[lookup]\nurl_template = "https://file.test/{}"\ntimeout = 4\nuser_agent = "custom"\n',
        encoding="utf-8",
    )
    from_file = load_config(config_path, env={})
    assert from_file.url_template == "https://file.test/{}"
    assert from_file.timeout == 4.0
    assert from_file.user_agent == "custom"

    env = {"YOMI_URL_TEMPLATE": "https://env.test/{}", "YOMI_TIMEOUT": "7.5"}
    from_env = load_config(config_path, env=env)
    assert from_env.url_template == "https://env.test/{}"
    assert from_env.timeout == 7.5

    explicit = load_config(config_path, env=env, url_template="https://cli.test/{}", timeout=1.0)
    assert explicit.url_template == "https://cli.test/{}"
    assert explicit.timeout == 1.0
    assert explicit.user_agent == "custom"


def test_layout_table_overrides_markers(tmp_path: Path) -> None:
    config_path = tmp_path / "yomi.toml"
    config_path.write_text('[layout]\nreading_class = "ruby"\n', encoding="utf-8")
    config = load_config(config_path, env={})
    assert config.layout.reading_class == "ruby"
    assert config.layout.container_class == JISHO_LAYOUT.container_class


def test_unknown_layout_key_is_rejected(tmp_path: Path) -> None:
    config_path = tmp_path / "yomi.toml"
    config_path.write_text('[layout]\ncolour = "red"\n', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(config_path, env={})


def test_broken_toml_is_reported(tmp_path: Path) -> None:
    config_path = tmp_path / "yomi.toml"
    config_path.write_text("[lookup\n", encoding="utf-8")
    with pytest.raises(ConfigError) as excinfo:
        load_config(config_path, env={})
    assert str(config_path) in str(excinfo.value)


def test_bad_placeholder_in_env_is_rejected() -> None:
    with pytest.raises(ConfigError):
        load_config(env={"YOMI_URL_TEMPLATE": "https://env.test/"})


def test_config_path_from_env(tmp_path: Path) -> None:
    config_path = tmp_path / "env.toml"
    config_path.write_text("", encoding="utf-8")
    assert resolve_config_path(env={"YOMI_CONFIG": str(config_path)}) == config_path
    with pytest.raises(ConfigError):
        resolve_config_path(env={"YOMI_CONFIG": str(tmp_path / "missing.toml")})


def test_missing_explicit_config_path(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.toml", env={})
