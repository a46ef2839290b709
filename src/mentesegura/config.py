"""
Settings for the whole app, read from ``config/app.yaml``.

String values may reference the environment as ``${VAR}`` or ``${VAR:default}``;
a ``.env`` file in the working directory is loaded first. Set
``MENTESEGURA_CONFIG`` to point at a different YAML file.
"""
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import load_dotenv

load_dotenv()

_ENV_REF = re.compile(r"\$\{(?P<name>[^}:]+)(?::(?P<default>[^}]*))?\}")


def _coerce(text: str) -> Any:
    """Turn an interpolated string back into the scalar YAML would have produced."""
    lowered = text.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if text.isdigit():
        return int(text)
    if text.count(".") == 1 and text.replace(".", "").isdigit():
        return float(text)
    return text


def _interpolate(node: Any) -> Any:
    if isinstance(node, dict):
        return {key: _interpolate(val) for key, val in node.items()}
    if isinstance(node, list):
        return [_interpolate(item) for item in node]
    if not isinstance(node, str) or "${" not in node:
        return node
    expanded = _ENV_REF.sub(
        lambda m: os.environ.get(m.group("name"), m.group("default") or ""), node
    )
    return _coerce(expanded)


@dataclass
class AppConfig:
    name: str = "Mente Segura"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8080
    secret_key: str = ""
    env: str = "production"
    log_level: str = "INFO"


@dataclass
class GatewayConfig:
    api_key: str = ""
    base_url: str = "https://ai.gateway.lovable.dev/v1"
    model: str = "google/gemini-2.5-flash"
    timeout_seconds: int = 120


@dataclass
class DatabaseConfig:
    sqlite_path: str = "./data/mentesegura.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 10000


@dataclass
class AuthConfig:
    jwt_algorithm: str = "HS256"
    jwt_access_expiry_minutes: int = 60
    bcrypt_rounds: int = 12
    min_password_length: int = 6


@dataclass
class RateLimitConfig:
    enabled: bool = True
    storage: str = "memory"
    redis_url: str = ""
    default_limit: str = "100/minute"
    chat_limit: str = "20/minute"
    auth_limit: str = "10/minute"


@dataclass
class ChatConfig:
    relay_url: str = "http://127.0.0.1:8080/api/chat-simone"
    critical_marker: str = "⚠️ ATENÇÃO:"
    assistant_name: str = "Simone"
    relay_timeout_seconds: int = 120


@dataclass
class NotificationConfig:
    webhook_url: str = ""
    timeout_seconds: int = 10
    retry_attempts: int = 3
    excerpt_chars: int = 280


@dataclass
class UIConfig:
    title: str = "Apoio emocional"
    primary: str = "#8b5cf6"
    secondary: str = "#ec4899"
    font_family: str = "Inter, system-ui, -apple-system, sans-serif"


@dataclass
class Config:
    app: AppConfig = field(default_factory=AppConfig)
    gateway: GatewayConfig = field(default_factory=GatewayConfig)
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
    auth: AuthConfig = field(default_factory=AuthConfig)
    rate_limits: RateLimitConfig = field(default_factory=RateLimitConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    notifications: NotificationConfig = field(default_factory=NotificationConfig)
    ui: UIConfig = field(default_factory=UIConfig)


_SECTIONS = {
    "app": AppConfig,
    "gateway": GatewayConfig,
    "database": DatabaseConfig,
    "auth": AuthConfig,
    "rate_limits": RateLimitConfig,
    "chat": ChatConfig,
    "notifications": NotificationConfig,
    "ui": UIConfig,
}


def build_config(raw: Dict[str, Any]) -> Config:
    """Build a Config from an already-resolved dict, ignoring unknown keys."""
    cfg = Config()
    for section, cls in _SECTIONS.items():
        values = raw.get(section)
        if not isinstance(values, dict):
            continue
        current = getattr(cfg, section)
        setattr(cfg, section, cls(**{k: v for k, v in values.items() if hasattr(current, k)}))
    return cfg


_CONFIG: Optional[Config] = None


def _config_candidates() -> List[Path]:
    override = os.environ.get("MENTESEGURA_CONFIG")
    if override:
        return [Path(override)]
    return [
        Path.cwd() / "config" / "app.yaml",
        Path(__file__).resolve().parents[2] / "config" / "app.yaml",
        Path.home() / ".mentesegura" / "app.yaml",
    ]


def load_config(config_path: Optional[str] = None) -> Config:
    """Read the YAML file once and cache the resulting Config."""
    global _CONFIG
    if _CONFIG is not None:
        return _CONFIG

    paths = [Path(config_path)] if config_path else _config_candidates()
    found = next((p for p in paths if p.is_file()), None)

    raw: Dict[str, Any] = {}
    if found is not None:
        raw = yaml.safe_load(found.read_text(encoding="utf-8")) or {}

    _CONFIG = build_config(_interpolate(raw))
    return _CONFIG


def get_config() -> Config:
    return _CONFIG if _CONFIG is not None else load_config()


def reset_config() -> None:
    """Drop the cached config so the next access reloads it."""
    global _CONFIG
    _CONFIG = None
