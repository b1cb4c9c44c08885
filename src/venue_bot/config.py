"""
Configuration for venue-bot.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class TelegramConfig:
    """Telegram Bot API configuration."""

    token: str | None = None
    token_env: str = "TELEGRAM_TOKEN"
    api_base: str = "https://api.telegram.org"
    timeout_seconds: float = 10.0
    long_poll_seconds: int = 30

    def get_token(self) -> str | None:
        """Get bot token from config or environment."""
        if self.token:
            return self.token
        if self.token_env:
            return os.environ.get(self.token_env) or None
        return None


@dataclass
class FoursquareConfig:
    """Foursquare venue API configuration."""

    api_base: str = "https://api.foursquare.com/v2"
    client_id: str | None = None
    client_secret: str | None = None
    client_id_env: str = "FOURSQUARE_CLIENT_ID"
    client_secret_env: str = "FOURSQUARE_SECRET"
    version: str = "20160820"  # pinned API version token
    section: str = "food"
    limit: int = 3
    timeout_seconds: float = 10.0

    def get_credentials(self) -> dict[str, str]:
        """Get client credentials, falling back to the environment."""
        client_id = self.client_id or os.environ.get(self.client_id_env, "")
        client_secret = self.client_secret or os.environ.get(self.client_secret_env, "")
        return {"client_id": client_id, "client_secret": client_secret}


@dataclass
class BotConfig:
    """Complete venue-bot configuration."""

    db_path: Path = field(default_factory=lambda: Path("venue_bot.db"))
    worker: bool = False
    poll_interval_seconds: float = 0.2
    retry_interval_seconds: float = 5.0

    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    foursquare: FoursquareConfig = field(default_factory=FoursquareConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BotConfig":
        """Create config from a dictionary (e.g., from YAML)."""
        config = cls()

        if "db_path" in data:
            config.db_path = Path(data["db_path"])
        if "worker" in data:
            config.worker = bool(data["worker"])
        if "poll_interval_seconds" in data:
            config.poll_interval_seconds = float(data["poll_interval_seconds"])
        if "retry_interval_seconds" in data:
            config.retry_interval_seconds = float(data["retry_interval_seconds"])

        if "telegram" in data:
            tg = data["telegram"] or {}
            config.telegram = TelegramConfig(
                token=tg.get("token"),
                token_env=tg.get("token_env", "TELEGRAM_TOKEN"),
                api_base=tg.get("api_base", config.telegram.api_base),
                timeout_seconds=tg.get("timeout_seconds", 10.0),
                long_poll_seconds=tg.get("long_poll_seconds", 30),
            )

        if "foursquare" in data:
            fsq = data["foursquare"] or {}
            config.foursquare = FoursquareConfig(
                api_base=fsq.get("api_base", config.foursquare.api_base),
                client_id=fsq.get("client_id"),
                client_secret=fsq.get("client_secret"),
                client_id_env=fsq.get("client_id_env", "FOURSQUARE_CLIENT_ID"),
                client_secret_env=fsq.get("client_secret_env", "FOURSQUARE_SECRET"),
                version=str(fsq.get("version", "20160820")),
                section=fsq.get("section", "food"),
                limit=fsq.get("limit", 3),
                timeout_seconds=fsq.get("timeout_seconds", 10.0),
            )

        return config

    @classmethod
    def from_yaml(cls, path: Path) -> "BotConfig":
        """
        Load config from a YAML file.

        Settings may live at the top level or under a ``venue_bot`` key.
        Environment overrides are applied afterwards, so a missing file
        yields defaults plus whatever the environment provides.
        """
        data: dict[str, Any] = {}
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

        config = cls.from_dict(data.get("venue_bot", data))
        config.apply_env()
        return config

    def apply_env(self) -> None:
        """Apply VENUE_BOT_DB and WORKER environment overrides."""
        db_path = os.environ.get("VENUE_BOT_DB")
        if db_path:
            self.db_path = Path(db_path)
        if os.environ.get("WORKER"):
            self.worker = True

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary for logging. Secrets are omitted."""
        return {
            "db_path": str(self.db_path),
            "worker": self.worker,
            "poll_interval_seconds": self.poll_interval_seconds,
            "retry_interval_seconds": self.retry_interval_seconds,
            "telegram": {
                "api_base": self.telegram.api_base,
                "timeout_seconds": self.telegram.timeout_seconds,
                "long_poll_seconds": self.telegram.long_poll_seconds,
            },
            "foursquare": {
                "api_base": self.foursquare.api_base,
                "version": self.foursquare.version,
                "section": self.foursquare.section,
                "limit": self.foursquare.limit,
                "timeout_seconds": self.foursquare.timeout_seconds,
            },
        }
