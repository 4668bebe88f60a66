from pathlib import Path

import pytest

from fe_sniper.config import Config

ENV_KEYS = [
    "PROSHOP_USERNAME",
    "PROSHOP_PASSWORD",
    "PROSHOP_REALNAME",
    "LISTING_INTERVAL",
    "INVENTORY_INTERVAL",
    "SKU_DATA_PATH",
    "NVIDIA_LOCALE",
    "HEADLESS",
    "DISCORD_WEBHOOK_URL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_use_placeholders(tmp_path) -> None:
    config = Config.load(tmp_path / "missing.env")

    assert config.username == "test-username"
    assert config.uses_placeholder_credentials is True
    assert config.listing_interval == 20
    assert config.inventory_interval == 5
    assert config.sku_data_path == Path("data/sku_data.json")
    assert config.locale == "fi-fi"
    assert config.headless is None


def test_loads_env_file(tmp_path) -> None:
    env = tmp_path / ".env"
    env.write_text(
        "PROSHOP_USERNAME=matti@example.com\n"
        "PROSHOP_PASSWORD=hunter2\n"
        "PROSHOP_REALNAME=Matti\n"
        "INVENTORY_INTERVAL=2.5\n"
        "HEADLESS=n\n"
    )

    config = Config.load(env)

    assert config.username == "matti@example.com"
    assert config.realname == "Matti"
    assert config.uses_placeholder_credentials is False
    assert config.inventory_interval == 2.5
    assert config.headless is False


def test_empty_credentials_fall_back(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("PROSHOP_USERNAME", "")
    config = Config.load(tmp_path / "missing.env")
    assert config.username == "test-username"
