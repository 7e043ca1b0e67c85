"""Product identification pipeline with manual-entry fallback."""

from .classifier import ManualEntryRequired, classify
from .credentials import ConfigStatus, is_analysis_configured, validate_config
from .endpoint import AnalysisEndpoint, EndpointError, SupabaseFunctionEndpoint
from .errors import AnalysisError, ErrorCode
from .models import AnalysisRequest, AnalysisResult
from .orchestrator import (
    ProductAnalyzer,
    analyze_product,
    analyze_product_from_barcode,
    analyze_product_from_image,
)

__all__ = [
    "AnalysisRequest",
    "AnalysisResult",
    "AnalysisError",
    "ErrorCode",
    "ConfigStatus",
    "validate_config",
    "is_analysis_configured",
    "ManualEntryRequired",
    "classify",
    "AnalysisEndpoint",
    "EndpointError",
    "SupabaseFunctionEndpoint",
    "ProductAnalyzer",
    "analyze_product",
    "analyze_product_from_barcode",
    "analyze_product_from_image",
]
