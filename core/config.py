"""Configuration models and loading."""

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError

CONFIG_DIR = Path.home() / ".config" / "dynamic-proxy"
CONFIG_FILE = CONFIG_DIR / "config.json"
STORE_FILE = CONFIG_DIR / "store.json"


class ProxySettings(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8000
    prefix: str = "/proxy"
    control_key: str = "setUrl"
    reserved_query_key: str = "key"
    aliases: dict[str, str] = Field(default_factory=lambda: {"/proxy/goog": "/proxy/v1"})


class TargetSettings(BaseModel):
    default_url: str | None = None


class StoreSettings(BaseModel):
    backend: Literal["file", "memory"] = "file"
    path: str = str(STORE_FILE)


class UpstreamSettings(BaseModel):
    timeout: float | None = None
    follow_redirects: bool = True
    max_connections: int = 100
    max_keepalive_connections: int = 20


class TransformSettings(BaseModel):
    enabled: bool = True
    default_model: str = "gemini-1.5-pro-002"
    default_max_tokens: int = 100


class LimitSettings(BaseModel):
    keep_alive_timeout: int = 5


class Config(BaseModel):
    proxy: ProxySettings = Field(default_factory=ProxySettings)
    target: TargetSettings = Field(default_factory=TargetSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    upstream: UpstreamSettings = Field(default_factory=UpstreamSettings)
    transform: TransformSettings = Field(default_factory=TransformSettings)
    limits: LimitSettings = Field(default_factory=LimitSettings)


def load_config(config_file: Path = CONFIG_FILE) -> Config:
    """Load configuration from JSON file, creating default if needed."""
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
