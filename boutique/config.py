# boutique/config.py
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _env(name: str, default: str) -> str:
    return os.getenv(name, default)


@dataclass(frozen=True)
class Settings:
    storage_dir: str = field(default_factory=lambda: _env("BOUTIQUE_STORAGE_DIR", ".boutique"))
    # Placeholder credential, not a security boundary.
    admin_password: str = field(default_factory=lambda: _env("BOUTIQUE_ADMIN_PASSWORD", "admin123"))
    environment: str = field(default_factory=lambda: _env("ENVIRONMENT", "development").lower())
    log_level: Optional[str] = field(default_factory=lambda: os.getenv("LOG_LEVEL"))
    host: str = field(default_factory=lambda: _env("BOUTIQUE_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(_env("BOUTIQUE_PORT", "8085")))


def get_settings() -> Settings:
    return Settings()
