from __future__ import annotations

import pytest

from lifxcli import config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    path = tmp_path / "lifx-cli" / "config.toml"
    monkeypatch.setattr(config, "CONFIG_PATH", str(path))
    monkeypatch.delenv(config.TOKEN_ENV, raising=False)
    monkeypatch.delenv(config.TIMEOUT_ENV, raising=False)
    return path


def test_flag_wins_over_env(monkeypatch) -> None:
    monkeypatch.setenv(config.TOKEN_ENV, "from-env")
    assert config.resolve_token("from-flag") == ("from-flag", "arg")


def test_env_wins_over_config(monkeypatch) -> None:
    config.save_config({"auth": {"token": "from-config"}})
    monkeypatch.setenv(config.TOKEN_ENV, "from-env")
    assert config.resolve_token(None) == ("from-env", "env")


def test_config_token() -> None:
    config.save_config({"auth": {"token": "from-config"}})
    assert config.resolve_token(None) == ("from-config", "config")


def test_missing_token_exits() -> None:
    with pytest.raises(SystemExit) as exc:
        config.resolve_token(None)
    assert exc.value.code == 2


def test_save_and_load_roundtrip(isolated_config) -> None:
    config.save_config({"auth": {"token": "abc"}, "api": {"url": "http://localhost:1234"}})
    assert isolated_config.exists()
    assert config.load_config() == {"auth": {"token": "abc"}, "api": {"url": "http://localhost:1234"}}


def test_unreadable_config_is_ignored(isolated_config) -> None:
    isolated_config.parent.mkdir(parents=True)
    isolated_config.write_text("[auth\ntoken = ", encoding="utf-8")
    assert config.load_config() == {}


def test_resolve_settings_defaults() -> None:
    s = config.resolve_settings(token="t")
    assert s == config.Settings(token="t", base_url="https://api.lifx.com", timeout=5.0, toggle_duration=2.0)


def test_resolve_settings_env_timeout_and_config_url(monkeypatch) -> None:
    monkeypatch.setenv(config.TIMEOUT_ENV, "12.5")
    config.save_config({"api": {"url": "http://proxy.local"}})
    s = config.resolve_settings(token="t", toggle_duration=1.0)
    assert s.timeout == 12.5
    assert s.base_url == "http://proxy.local"
    assert s.toggle_duration == 1.0


def test_bad_timeout_env_falls_back(monkeypatch) -> None:
    monkeypatch.setenv(config.TIMEOUT_ENV, "soon")
    assert config.default_timeout() == 5.0


def test_masked_token() -> None:
    assert config.Settings(token="c87c73a896b554367fac61f71dd3656af8d93a525a4e87df5952c6078a89d192").masked_token() == "c87c...d192"
    assert config.Settings(token="short").masked_token() == "*****"


@pytest.mark.parametrize("token", ['ab"cd', "ab\\cd", 'x\\"y', "tab\there"])
def test_save_escapes_special_characters(token) -> None:
    config.save_config({"auth": {"token": token}, "api": {"url": 'http://h/"q"'}})
    assert config.load_config() == {"auth": {"token": token}, "api": {"url": 'http://h/"q"'}}
    assert config.resolve_token(None) == (token, "config")
