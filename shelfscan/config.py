"""TOML configuration loader for shelfscan."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

from .shelf_life import DEFAULT_SHELF_LIFE_DAYS

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]

# Checked in order; the first non-empty variable wins.
_URL_ENV_VARS = ("SUPABASE_URL", "EXPO_PUBLIC_SUPABASE_URL")
_KEY_ENV_VARS = ("SUPABASE_ANON_KEY", "EXPO_PUBLIC_SUPABASE_ANON_KEY")


@dataclass
class SupabaseConfig:
    url: str = ""
    anon_key: str = ""
    function_name: str = "analyze-product"
    timeout: float = 30.0

    @property
    def is_set(self) -> bool:
        """True if any credential has been supplied at all."""
        return bool(self.url or self.anon_key)


@dataclass
class AnalysisConfig:
    default_shelf_life_days: int = DEFAULT_SHELF_LIFE_DAYS


@dataclass
class InventoryConfig:
    db_path: str = "~/.config/shelfscan/inventory.db"
    expiring_days: int = 3


@dataclass
class ShelfScanConfig:
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    inventory: InventoryConfig = field(default_factory=InventoryConfig)


def _first_env(names: tuple[str, ...]) -> str:
    for name in names:
        value = os.environ.get(name, "")
        if value:
            return value
    return ""


def load_config(path: str | Path | None = None) -> ShelfScanConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    Supabase credentials can be supplied via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli is required on Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    sup = raw.get("supabase", {})
    ana = raw.get("analysis", {})
    inv = raw.get("inventory", {})

    # Resolve credentials: config file → environment variable
    url = sup.get("url", "") or _first_env(_URL_ENV_VARS)
    anon_key = sup.get("anon_key", "") or _first_env(_KEY_ENV_VARS)

    return ShelfScanConfig(
        supabase=SupabaseConfig(
            url=url,
            anon_key=anon_key,
            function_name=sup.get("function_name", "analyze-product"),
            timeout=float(sup.get("timeout", 30.0)),
        ),
        analysis=AnalysisConfig(
            default_shelf_life_days=int(
                ana.get("default_shelf_life_days", DEFAULT_SHELF_LIFE_DAYS)
            ),
        ),
        inventory=InventoryConfig(
            db_path=inv.get("db_path", "~/.config/shelfscan/inventory.db"),
            expiring_days=int(inv.get("expiring_days", 3)),
        ),
    )
