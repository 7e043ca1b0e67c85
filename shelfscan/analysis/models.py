"""Request and result types for product analysis."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

DEFAULT_PRODUCT_NAME = "Unknown Product"
DEFAULT_CATEGORY = "General"


@dataclass(frozen=True)
class AnalysisRequest:
    barcode: str | None = None
    code: str | None = None  # generic code (batch codes, etc.)
    image_uri: str | None = None  # base64 data or URI; not analysed yet

    @property
    def code_to_analyze(self) -> str:
        """The code sent to the endpoint: barcode first, then code."""
        return self.barcode or self.code or ""

    @property
    def is_empty(self) -> bool:
        return not self.code_to_analyze and not self.image_uri


@dataclass
class AnalysisResult:
    name: str = DEFAULT_PRODUCT_NAME
    category: str = DEFAULT_CATEGORY
    shelf_life_days: int = 0  # negative once expired
    confidence_score: float = 0.0  # 0.0〜1.0
    expiry_date: date | None = None
    manual_entry_required: bool = False
