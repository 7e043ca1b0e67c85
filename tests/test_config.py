"""Tests for config loading."""

import pytest

from shelfscan.config import (
    AnalysisConfig,
    InventoryConfig,
    ShelfScanConfig,
    SupabaseConfig,
    load_config,
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for name in (
        "SUPABASE_URL",
        "SUPABASE_ANON_KEY",
        "EXPO_PUBLIC_SUPABASE_URL",
        "EXPO_PUBLIC_SUPABASE_ANON_KEY",
    ):
        monkeypatch.delenv(name, raising=False)


def test_load_config_defaults():
    """Loading with no path returns all defaults."""
    config = load_config()
    assert isinstance(config, ShelfScanConfig)
    assert config.supabase.url == ""
    assert config.supabase.anon_key == ""
    assert config.supabase.function_name == "analyze-product"
    assert config.supabase.timeout == 30.0
    assert config.supabase.is_set is False
    assert config.analysis.default_shelf_life_days == 7
    assert config.inventory.db_path == "~/.config/shelfscan/inventory.db"
    assert config.inventory.expiring_days == 3


def test_load_config_nonexistent_file():
    """Loading a nonexistent file returns defaults."""
    config = load_config("/nonexistent/path.toml")
    assert config.supabase.function_name == "analyze-product"


def test_load_config_from_toml(tmp_path):
    """Loading a valid TOML file populates config."""
    path = tmp_path / "shelfscan.toml"
    path.write_text(
        """\
[supabase]
url = "https://abc.supabase.co"
anon_key = "eyJhbGciOi"
function_name = "identify"
timeout = 10

[analysis]
default_shelf_life_days = 14

[inventory]
db_path = "/var/lib/shelfscan.db"
expiring_days = 5
""",
        encoding="utf-8",
    )
    config = load_config(path)

    assert config.supabase.url == "https://abc.supabase.co"
    assert config.supabase.anon_key == "eyJhbGciOi"
    assert config.supabase.function_name == "identify"
    assert config.supabase.timeout == 10.0
    assert config.supabase.is_set is True
    assert config.analysis.default_shelf_life_days == 14
    assert config.inventory.db_path == "/var/lib/shelfscan.db"
    assert config.inventory.expiring_days == 5


def test_load_config_env_override(monkeypatch):
    """Environment variables fill in empty credentials."""
    monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
    monkeypatch.setenv("SUPABASE_ANON_KEY", "eyJenv")

    config = load_config()
    assert config.supabase.url == "https://env.supabase.co"
    assert config.supabase.anon_key == "eyJenv"


def test_load_config_expo_env_names(monkeypatch):
    """The app's EXPO_PUBLIC_* variables are honoured too."""
    monkeypatch.setenv("EXPO_PUBLIC_SUPABASE_URL", "https://expo.supabase.co")
    monkeypatch.setenv("EXPO_PUBLIC_SUPABASE_ANON_KEY", "eyJexpo")

    config = load_config()
    assert config.supabase.url == "https://expo.supabase.co"
    assert config.supabase.anon_key == "eyJexpo"


def test_load_config_file_key_takes_precedence(monkeypatch, tmp_path):
    """Config file credentials take precedence over env vars."""
    monkeypatch.setenv("SUPABASE_ANON_KEY", "eyJenv")
    path = tmp_path / "shelfscan.toml"
    path.write_text('[supabase]\nanon_key = "eyJfile"\n', encoding="utf-8")

    config = load_config(path)
    assert config.supabase.anon_key == "eyJfile"


def test_load_config_partial_toml(tmp_path):
    """Partial TOML uses defaults for missing sections."""
    path = tmp_path / "shelfscan.toml"
    path.write_text("[analysis]\ndefault_shelf_life_days = 3\n", encoding="utf-8")

    config = load_config(path)
    assert config.analysis.default_shelf_life_days == 3
    assert config.supabase.function_name == "analyze-product"
    assert config.inventory.expiring_days == 3


def test_dataclass_defaults():
    assert SupabaseConfig().is_set is False
    assert SupabaseConfig(url="https://x.supabase.co").is_set is True
    assert AnalysisConfig().default_shelf_life_days == 7
    assert InventoryConfig().expiring_days == 3
