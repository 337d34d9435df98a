from __future__ import annotations

import dataclasses
import json
import logging
import os
import tomllib
from typing import Any, Optional

from rich.console import Console

from .api import DEFAULT_BASE_URL

logger = logging.getLogger(__name__)

TOKEN_ENV = "LIFXTOKEN"
TIMEOUT_ENV = "LIFX_TIMEOUT"

CONFIG_DIR = os.path.join(os.path.expanduser("~"), ".config", "lifx-cli")
CONFIG_PATH = os.path.join(CONFIG_DIR, "config.toml")


@dataclasses.dataclass(frozen=True)
class Settings:
    """Process-wide values, resolved once at startup and passed down explicitly."""

    token: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 5.0
    toggle_duration: float = 2.0

    def masked_token(self) -> str:
        if len(self.token) <= 8:
            return "*" * len(self.token)
        return f"{self.token[:4]}...{self.token[-4:]}"


def _env_default(name: str, default: str) -> str:
    return os.environ.get(name, default)


def default_timeout() -> float:
    raw = _env_default(TIMEOUT_ENV, "5")
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r, not a number", TIMEOUT_ENV, raw)
        return 5.0


def load_config(path: Optional[str] = None) -> dict:
    path = path or CONFIG_PATH
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}


def _toml_str(value: Any) -> str:
    # a JSON string literal is a valid TOML basic string
    return json.dumps(str(value), ensure_ascii=False)


def save_config(cfg: dict, path: Optional[str] = None) -> None:
    path = path or CONFIG_PATH
    os.makedirs(os.path.dirname(path), exist_ok=True)
    # Minimal writer for our known keys
    lines: list[str] = []
    auth = cfg.get("auth") or {}
    if auth:
        lines.append("[auth]")
        token = auth.get("token")
        if token is not None:
            lines.append(f"token = {_toml_str(token)}")
        lines.append("")
    api = cfg.get("api") or {}
    if api:
        lines.append("[api]")
        url = api.get("url")
        if url is not None:
            lines.append(f"url = {_toml_str(url)}")
        lines.append("")
    with open(path, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def _section(cfg: dict, name: str) -> dict[str, Any]:
    sec = cfg.get(name)
    return sec if isinstance(sec, dict) else {}


def resolve_token(arg_token: Optional[str], cfg: Optional[dict] = None) -> tuple[str, str]:
    # returns (token, source). If missing, exits with a helpful message.
    if arg_token:
        return arg_token, "arg"
    env_token = os.environ.get(TOKEN_ENV)
    if env_token:
        return env_token, "env"
    if cfg is None:
        cfg = load_config()
    cfg_token = _section(cfg, "auth").get("token")
    if isinstance(cfg_token, str) and cfg_token:
        return cfg_token, "config"
    msg = (
        "No LIFX OAuth access token. Provide --token, set the "
        f"{TOKEN_ENV} environment variable, or store one with\n"
        "    lifx config set-token <token>\n"
        f"Config file: {CONFIG_PATH}"
    )
    Console(stderr=True).print(f"[red]{msg}[/red]")
    raise SystemExit(2)


def resolve_settings(
    token: Optional[str] = None,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
    toggle_duration: Optional[float] = None,
) -> Settings:
    """Build Settings from arguments > environment > config file > defaults."""
    cfg = load_config()
    resolved_token, source = resolve_token(token, cfg)
    logger.debug("token source: %s", source)
    cfg_url = _section(cfg, "api").get("url")
    base_url = url or (cfg_url if isinstance(cfg_url, str) and cfg_url else DEFAULT_BASE_URL)
    return Settings(
        token=resolved_token,
        base_url=base_url,
        timeout=timeout if timeout is not None else default_timeout(),
        toggle_duration=toggle_duration if toggle_duration is not None else 2.0,
    )
