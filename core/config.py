"""Configuration models and loading."""

import json
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "api-tester-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 5001
    debug: bool = False


class ForwardSettings(BaseModel):
    user_agent: str = "API-Tester-Proxy/1.0"
    default_timeout_ms: int = 30000
    max_timeout_ms: int = 300000
    follow_redirects: bool = True


class CorsSettings(BaseModel):
    allow_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:5500",
            "http://localhost:3000",
            "http://127.0.0.1:5500",
            "https://dfsddf.vercel.app",
        ]
    )
    allow_origin_regex: str | None = r"https://.*\.vercel\.app"
    allow_methods: list[str] = Field(
        default_factory=lambda: ["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]
    )
    allow_headers: list[str] = Field(default_factory=lambda: ["Content-Type", "Authorization"])
    allow_credentials: bool = True


class RateLimitSettings(BaseModel):
    enabled: bool = True
    window_seconds: int = 15 * 60
    max_requests: int = 100
    message: str = "Too many requests from this IP, please try again later."


class LimitSettings(BaseModel):
    max_body_size: int = 10 * 1024 * 1024  # 10MB
    max_connections: int = 100
    max_keepalive_connections: int = 20
    keep_alive_timeout: int = 5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    forward: ForwardSettings = Field(default_factory=ForwardSettings)
    cors: CorsSettings = Field(default_factory=CorsSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed.

    The ``PORT`` environment variable, when set, overrides ``proxy.port``.
    """
    config = _read_config(config_file)
    port = os.environ.get("PORT")
    if port and port.isdigit():
        config.proxy.port = int(port)
    return config


def _read_config(config_file: Path) -> Config:
    if not config_file.exists():
        config_file.parent.mkdir(parents=True, exist_ok=True)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default

    try:
        data = json.loads(config_file.read_text())
        return Config.model_validate(data)
    except (json.JSONDecodeError, ValidationError):
        # Backup corrupted config and recreate default
        backup = config_file.with_suffix(".json.bak")
        config_file.rename(backup)
        default = Config()
        config_file.write_text(default.model_dump_json(indent=2))
        return default
