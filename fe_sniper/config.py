"""Configuration loader from environment variables."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from dotenv import load_dotenv

# Fallbacks used when .env is missing; never valid against the real site
PLACEHOLDER_USERNAME = "test-username"
PLACEHOLDER_PASSWORD = "test-password"
PLACEHOLDER_REALNAME = "test-realname"

_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def _as_bool(value: Optional[str]) -> Optional[bool]:
    if value is None or not value.strip():
        return None
    return value.strip().lower() not in _FALSE_VALUES


@dataclass
class Config:
    """Sniper configuration from .env file."""

    username: str
    password: str
    realname: str
    listing_interval: float
    inventory_interval: float
    sku_data_path: Path
    locale: str
    headless: Optional[bool]
    discord_webhook: str

    @classmethod
    def load(cls, env_path: Optional[Path] = None) -> Config:
        """Load config from .env file."""
        load_dotenv(env_path or ".env")

        return cls(
            username=os.getenv("PROSHOP_USERNAME") or PLACEHOLDER_USERNAME,
            password=os.getenv("PROSHOP_PASSWORD") or PLACEHOLDER_PASSWORD,
            realname=os.getenv("PROSHOP_REALNAME") or PLACEHOLDER_REALNAME,
            listing_interval=float(os.getenv("LISTING_INTERVAL", "20")),
            inventory_interval=float(os.getenv("INVENTORY_INTERVAL", "5")),
            sku_data_path=Path(os.getenv("SKU_DATA_PATH", "data/sku_data.json")),
            locale=os.getenv("NVIDIA_LOCALE", "fi-fi"),
            headless=_as_bool(os.getenv("HEADLESS")),
            discord_webhook=os.getenv("DISCORD_WEBHOOK_URL", ""),
        )

    @property
    def uses_placeholder_credentials(self) -> bool:
        """True if any credential fell back to its placeholder value."""
        return (
            self.username == PLACEHOLDER_USERNAME
            or self.password == PLACEHOLDER_PASSWORD
            or self.realname == PLACEHOLDER_REALNAME
        )
