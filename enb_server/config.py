"""Runtime settings, read from the environment (and an optional .env file)."""

import os
from dataclasses import dataclass, field
from typing import List

from dotenv import load_dotenv

DEFAULT_DB_PATH = "data/enb.db"
DEFAULT_MAX_INVITATION_USES = 5
DEFAULT_SEED_MAX_USES = 105


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _list_env(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Settings:
    db_path: str = DEFAULT_DB_PATH
    host: str = "0.0.0.0"
    port: int = 8080
    admin_key: str = ""
    default_max_uses: int = DEFAULT_MAX_INVITATION_USES
    seed_max_uses: int = DEFAULT_SEED_MAX_USES
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, dotenv_path: str = None) -> "Settings":
        load_dotenv(dotenv_path=dotenv_path)
        return cls(
            db_path=os.getenv("ENB_DB_PATH", DEFAULT_DB_PATH),
            host=os.getenv("ENB_API_HOST", "0.0.0.0"),
            port=_int_env("ENB_API_PORT", 8080),
            admin_key=os.getenv("ENB_ADMIN_KEY", ""),
            default_max_uses=_int_env("ENB_DEFAULT_MAX_USES", DEFAULT_MAX_INVITATION_USES),
            seed_max_uses=_int_env("ENB_SEED_MAX_USES", DEFAULT_SEED_MAX_USES),
            cors_origins=_list_env("ENB_CORS_ORIGINS", "*"),
            log_level=os.getenv("ENB_LOG_LEVEL", "INFO").upper(),
        )
