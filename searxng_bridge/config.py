import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

CONFIG_PATH = Path("bridge_config.json")
ENV_PREFIX = "MCP_SX"
DEFAULT_SEARXNG_URL = "http://172.17.0.1:18080"
LOG_LEVELS = {"critical", "error", "warning", "info", "debug"}


class AppSettings(BaseModel):
    searxng_url: str = DEFAULT_SEARXNG_URL
    log_level: str = "info"
    host: str = "0.0.0.0"
    port: int = 3000
    request_timeout_s: float = 10.0
    user_agent: str = "MCP-SearXNG-Bridge/1.0"

    # Delivery channel
    channel_capacity: int = 100
    delivery_attempts: int = 3
    delivery_retry_delay_ms: int = 100
    keepalive_s: float = 15.0

    @field_validator("searxng_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        cleaned = str(value).strip().lower()
        if cleaned == "warn":
            cleaned = "warning"
        return cleaned if cleaned in LOG_LEVELS else "info"

    @field_validator("channel_capacity", "delivery_attempts")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @property
    def delivery_retry_delay_s(self) -> float:
        return self.delivery_retry_delay_ms / 1000.0


def _load_from_env() -> Dict[str, Any]:
    load_dotenv()
    env_map = {
        "searxng_url": os.getenv(f"{ENV_PREFIX}_URL"),
        "log_level": os.getenv(f"{ENV_PREFIX}_LOG"),
        "host": os.getenv(f"{ENV_PREFIX}_HOST"),
        "port": os.getenv(f"{ENV_PREFIX}_PORT"),
        "request_timeout_s": os.getenv(f"{ENV_PREFIX}_TIMEOUT"),
        "user_agent": os.getenv(f"{ENV_PREFIX}_USER_AGENT"),
        "channel_capacity": os.getenv(f"{ENV_PREFIX}_CHANNEL_CAPACITY"),
        "delivery_attempts": os.getenv(f"{ENV_PREFIX}_DELIVERY_ATTEMPTS"),
        "delivery_retry_delay_ms": os.getenv(f"{ENV_PREFIX}_DELIVERY_RETRY_MS"),
        "keepalive_s": os.getenv(f"{ENV_PREFIX}_KEEPALIVE"),
    }
    cleaned = {k: v for k, v in env_map.items() if v not in (None, "")}
    for key in ("port", "channel_capacity", "delivery_attempts", "delivery_retry_delay_ms"):
        if key in cleaned:
            cleaned[key] = int(cleaned[key])
    for key in ("request_timeout_s", "keepalive_s"):
        if key in cleaned:
            cleaned[key] = float(cleaned[key])
    return cleaned


def _config_path_from_env() -> Path:
    raw = os.getenv(f"{ENV_PREFIX}_CONFIG")
    return Path(raw) if raw else CONFIG_PATH


def load_settings(config_path: Optional[Path] = None) -> AppSettings:
    env_data = _load_from_env()
    path = config_path or _config_path_from_env()
    file_data: Dict[str, Any] = {}
    if path.exists():
        try:
            file_data = json.loads(path.read_text())
        except json.JSONDecodeError:
            file_data = {}
        if not isinstance(file_data, dict):
            file_data = {}
    # The environment is the primary source; the file only fills gaps.
    merged = {**file_data, **env_data}
    return AppSettings(**merged)
