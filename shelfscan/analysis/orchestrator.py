"""Product analysis orchestrator.

Runs input checks, then credential checks, then the remote call, then
response interpretation. A "manual entry required" answer always comes back
as a flagged ``AnalysisResult``. Every other failure is raised as an
``AnalysisError``.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from ..shelf_life import DEFAULT_SHELF_LIFE_DAYS, DateParseError, days_until, parse_expiry_date
from .classifier import ManualEntryRequired, classify_endpoint_error
from .credentials import ConfigStatus, config_error, not_configured_error, validate_config
from .endpoint import AnalysisEndpoint, EndpointError, SupabaseFunctionEndpoint
from .errors import AnalysisError, ErrorCode
from .models import DEFAULT_CATEGORY, DEFAULT_PRODUCT_NAME, AnalysisRequest, AnalysisResult

if TYPE_CHECKING:
    from ..config import SupabaseConfig

logger = logging.getLogger(__name__)


class ProductAnalyzer:
    """Identify products through the remote analysis endpoint.

    The configuration is passed in explicitly. If no endpoint is given, a
    ``SupabaseFunctionEndpoint`` is built from it on first use.
    """

    def __init__(
        self,
        config: SupabaseConfig,
        endpoint: AnalysisEndpoint | None = None,
        *,
        default_shelf_life_days: int = DEFAULT_SHELF_LIFE_DAYS,
    ) -> None:
        self._config = config
        self._endpoint = endpoint
        self._default_shelf_life_days = default_shelf_life_days

    def _get_endpoint(self) -> AnalysisEndpoint:
        if self._endpoint is None:
            self._endpoint = SupabaseFunctionEndpoint(
                url=self._config.url,
                anon_key=self._config.anon_key,
                function_name=self._config.function_name,
                timeout=self._config.timeout,
            )
        return self._endpoint

    def check_config(self) -> None:
        """Raise the classified configuration error, if any. No network I/O."""
        if not self._config.is_set:
            raise not_configured_error()
        status = validate_config(self._config.url, self._config.anon_key)
        if status is not ConfigStatus.OK:
            raise config_error(status)

    async def analyze_product(self, request: AnalysisRequest) -> AnalysisResult:
        """Identify a product from its barcode or code.

        Raises:
            AnalysisError: For every failure except "manual entry required",
                which is returned as a result with ``manual_entry_required``.
        """
        if request.is_empty:
            raise AnalysisError(
                "Either barcode/code or image_uri must be provided for analysis",
                ErrorCode.MISSING_INPUT,
            )

        if request.image_uri:
            logger.warning(
                "Image analysis is not implemented yet; using code-based analysis."
            )

        self.check_config()

        try:
            return await self._invoke(request)
        except AnalysisError:
            raise
        except Exception as exc:
            logger.exception("Unexpected error during product analysis")
            raise AnalysisError(
                str(exc) or "Unknown error occurred during analysis",
                ErrorCode.UNKNOWN_ERROR,
                exc,
            ) from exc

    async def _invoke(self, request: AnalysisRequest) -> AnalysisResult:
        logger.info(
            "Starting analysis: barcode=%s code=%s has_image=%s",
            request.barcode,
            request.code,
            bool(request.image_uri),
        )

        try:
            data = await self._get_endpoint().invoke(
                request.code_to_analyze, request.image_uri
            )
        except EndpointError as exc:
            logger.error("Analysis endpoint failed (status=%s): %s", exc.status, exc)
            outcome = classify_endpoint_error(exc)
            if isinstance(outcome, ManualEntryRequired):
                logger.info("Error response asks for manual entry; returning a flagged result")
                return self._to_result(outcome.payload, manual_entry_required=True)
            raise outcome from exc

        if data is None:
            raise AnalysisError(
                "No data returned from AI analysis", ErrorCode.NO_RESPONSE
            )

        if data.get("error"):
            logger.error("AI service returned error: %s", data["error"])
            raise AnalysisError(
                str(data["error"]), ErrorCode.AI_SERVICE_ERROR, data
            )

        result = self._to_result(
            data, manual_entry_required=bool(data.get("manualEntryRequired"))
        )
        if result.manual_entry_required:
            logger.info("Service asks for manual entry; returning a flagged result")
            return result

        logger.info(
            "Analysis succeeded: name=%s category=%s shelf_life_days=%d confidence=%.2f",
            result.name,
            result.category,
            result.shelf_life_days,
            result.confidence_score,
        )
        return result

    def _to_result(
        self, payload: Mapping[str, Any], *, manual_entry_required: bool
    ) -> AnalysisResult:
        """Build a result from the service's ``productName``/``expiryDate`` payload."""
        raw_expiry = payload.get("expiryDate")
        expiry: date | None = None
        shelf_life = self._default_shelf_life_days
        if raw_expiry:
            try:
                parsed = parse_expiry_date(raw_expiry)
                shelf_life = days_until(parsed)
                expiry = parsed.date() if isinstance(parsed, datetime) else parsed
            except DateParseError:
                logger.warning(
                    "Ignoring unparsable expiryDate %r; assuming %d days",
                    raw_expiry,
                    self._default_shelf_life_days,
                )

        return AnalysisResult(
            name=payload.get("productName") or payload.get("name") or DEFAULT_PRODUCT_NAME,
            category=payload.get("category") or DEFAULT_CATEGORY,
            shelf_life_days=shelf_life,
            confidence_score=_confidence(payload.get("confidenceScore")),
            expiry_date=expiry,
            manual_entry_required=manual_entry_required,
        )


def _confidence(value: Any) -> float:
    try:
        score = float(value or 0)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(score):
        return 0.0
    return min(max(score, 0.0), 1.0)


async def analyze_product(
    request: AnalysisRequest,
    config: SupabaseConfig,
    endpoint: AnalysisEndpoint | None = None,
) -> AnalysisResult:
    """Shortcut for ``ProductAnalyzer(config, endpoint).analyze_product(request)``."""
    return await ProductAnalyzer(config, endpoint).analyze_product(request)


async def analyze_product_from_barcode(
    barcode: str,
    config: SupabaseConfig,
    endpoint: AnalysisEndpoint | None = None,
) -> AnalysisResult:
    return await analyze_product(AnalysisRequest(barcode=barcode), config, endpoint)


async def analyze_product_from_image(
    image_uri: str,
    config: SupabaseConfig,
    endpoint: AnalysisEndpoint | None = None,
) -> AnalysisResult:
    """Image recognition is not implemented; this degrades to an empty code."""
    return await analyze_product(AnalysisRequest(image_uri=image_uri), config, endpoint)
