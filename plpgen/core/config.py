# plpgen/core/config.py
"""
Application configuration - single source of truth for all settings.

Everything is read from the environment once, at import time. Callers that
need a different configuration (tests, the CLI) build their own instance
and pass it explicitly.
"""
import os
from dataclasses import dataclass, field
from typing import List, Optional
from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


@dataclass
class GeneratorSettings:
    """Batch generation configuration."""
    template_url: str = field(default_factory=lambda: os.getenv("TEMPLATE_URL", "").strip())
    # Never above 200, the hard cap on GenerationOptions.count
    max_count: int = field(default_factory=lambda: min(int(os.getenv("MAX_UNIT_COUNT", "200")), 200))
    descriptor_entry: str = "data.plab"
    output_extension: str = ".plp"
    archive_name: str = "outputs.zip"
    compression_level: int = 6
    fetch_timeout: float = field(default_factory=lambda: float(os.getenv("TEMPLATE_FETCH_TIMEOUT", "60")))
    default_text2: str = "15/11/2025"


@dataclass
class TelegramSettings:
    """Telegram Bot API configuration."""
    bot_token: str = field(default_factory=lambda: os.getenv("TELEGRAM_BOT_TOKEN", "").strip())
    webhook_secret: str = field(default_factory=lambda: os.getenv("WEBHOOK_SECRET", "").strip())
    api_base: str = field(default_factory=lambda: os.getenv("TELEGRAM_API_BASE", "https://api.telegram.org"))
    timeout: float = 30.0


@dataclass
class StoreSettings:
    """Key-value store configuration (sessions, auth flags, VIP list)."""
    mongodb_url: Optional[str] = field(default_factory=lambda: os.getenv("MONGODB_URL") or None)
    database: str = field(default_factory=lambda: os.getenv("MONGODB_DB", "plpgen"))
    collection: str = "kv"
    session_ttl_seconds: int = 1800


@dataclass
class Settings:
    """Main application settings."""
    generator: GeneratorSettings = field(default_factory=GeneratorSettings)
    telegram: TelegramSettings = field(default_factory=TelegramSettings)
    store: StoreSettings = field(default_factory=StoreSettings)
    admin_code: str = field(default_factory=lambda: os.getenv("ADMIN_CODE", "").strip())
    port: int = field(default_factory=lambda: int(os.getenv("PORT", 8000)))
    debug: bool = field(default_factory=lambda: _env_flag("DEBUG"))
    cors_origins: List[str] = field(default_factory=lambda: [
        o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()
    ])
    rate_limit: str = field(default_factory=lambda: os.getenv("RATE_LIMIT", "100/minute"))
    rate_limit_enabled: bool = field(default_factory=lambda: _env_flag("RATE_LIMIT_ENABLED", "true"))


# Singleton instance
settings = Settings()
