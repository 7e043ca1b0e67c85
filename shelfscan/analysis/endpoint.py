"""Remote analysis endpoint: a Supabase Edge Function that identifies products."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# Message carried by every non-2xx failure; says nothing about the cause.
NON_2XX_MESSAGE = "Edge Function returned a non-2xx status code"


class EndpointError(Exception):
    """Transport-level failure of the analysis endpoint.

    Any of the attributes may be missing depending on how the call failed:
    a timeout has only a message, an HTTP error usually has a status and
    the raw response ``content``. ``context`` holds whatever structured
    response details the endpoint implementation could capture.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        content: bytes | None = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status = status
        self.content = content
        self.context = context


class AnalysisEndpoint(ABC):
    """Abstract base for the service that identifies a product from its code."""

    @abstractmethod
    async def invoke(
        self, code: str, image_uri: str | None = None
    ) -> dict[str, Any] | None:
        """Send ``{code, imageUri}`` and return the decoded JSON payload.

        Returns None for an empty response body.

        Raises:
            EndpointError: On non-2xx responses and transport failures.
        """
        ...


class SupabaseFunctionEndpoint(AnalysisEndpoint):
    """Call a Supabase Edge Function over HTTPS."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        function_name: str = "analyze-product",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._function_url = f"{url.rstrip('/')}/functions/v1/{function_name}"
        self._anon_key = anon_key
        self._timeout = timeout
        self._transport = transport

    @property
    def function_url(self) -> str:
        return self._function_url

    async def invoke(
        self, code: str, image_uri: str | None = None
    ) -> dict[str, Any] | None:
        body: dict[str, Any] = {"code": code}
        if image_uri is not None:
            body["imageUri"] = image_uri
        headers = {
            "Authorization": f"Bearer {self._anon_key}",
            "apikey": self._anon_key,
        }

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, transport=self._transport
            ) as client:
                resp = await client.post(self._function_url, json=body, headers=headers)
        except httpx.HTTPError as exc:
            logger.warning("Analysis request to %s failed: %s", self._function_url, exc)
            raise EndpointError(str(exc) or type(exc).__name__) from exc

        if not resp.is_success:
            logger.debug(
                "Analysis endpoint returned HTTP %s: %s",
                resp.status_code,
                resp.text[:500],
            )
            raise EndpointError(
                NON_2XX_MESSAGE,
                status=resp.status_code,
                content=resp.content,
                context={
                    "status": resp.status_code,
                    "url": str(resp.request.url),
                    "content_type": resp.headers.get("content-type", ""),
                },
            )

        if not resp.content.strip():
            return None

        try:
            payload = resp.json()
        except json.JSONDecodeError as exc:
            raise EndpointError(
                "The analysis service returned a malformed response.",
                status=resp.status_code,
            ) from exc

        if not isinstance(payload, dict):
            raise EndpointError(
                "The analysis service returned a malformed response.",
                status=resp.status_code,
            )
        return payload
