"""Barcode-based product identification and expiry tracking."""

from .analysis import (
    AnalysisError,
    AnalysisRequest,
    AnalysisResult,
    ErrorCode,
    ProductAnalyzer,
    analyze_product,
)
from .config import (
    AnalysisConfig,
    InventoryConfig,
    ShelfScanConfig,
    SupabaseConfig,
    load_config,
)
from .db import InventoryDB, InventoryStore
from .manual_entry import ManualEntryFlow, ManualEntryForm, ManualEntryRecord
from .shelf_life import DateParseError, days_until, status_label

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisError",
    "ErrorCode",
    "ProductAnalyzer",
    "analyze_product",
    "ShelfScanConfig",
    "SupabaseConfig",
    "AnalysisConfig",
    "InventoryConfig",
    "load_config",
    "InventoryDB",
    "InventoryStore",
    "ManualEntryFlow",
    "ManualEntryForm",
    "ManualEntryRecord",
    "DateParseError",
    "days_until",
    "status_label",
]
