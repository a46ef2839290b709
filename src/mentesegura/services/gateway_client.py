"""
Model gateway client — opens streamed chat completions against the hosted,
OpenAI-compatible endpoint and translates upstream failures into the error
taxonomy.
"""
from typing import Dict, List, Optional

import httpx
import structlog

from mentesegura.config import get_config
from mentesegura.errors import (
    GatewayNotConfiguredError,
    UpstreamError,
    UpstreamRateLimitedError,
    UpstreamUnavailableError,
)

log = structlog.get_logger()


class GatewayClient:
    """Async client for the model gateway."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.cfg = get_config().gateway
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.cfg.base_url,
                headers={"Content-Type": "application/json"},
                timeout=httpx.Timeout(self.cfg.timeout_seconds, connect=10.0),
                transport=self._transport,
            )
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    def build_payload(self, system_prompt: str, messages: List[Dict]) -> Dict:
        return {
            "model": self.cfg.model,
            "messages": [{"role": "system", "content": system_prompt}, *messages],
            "stream": True,
        }

    async def open_stream(self, system_prompt: str, messages: List[Dict]) -> httpx.Response:
        """
        Start a streamed chat completion.

        The returned response has not been read; the caller owns it and must
        close it (``await response.aclose()``) once the body has been relayed.

        Raises:
            GatewayNotConfiguredError: no API key configured
            UpstreamRateLimitedError: upstream answered 429
            UpstreamUnavailableError: upstream answered 402
            UpstreamError: any other upstream status or a transport failure
        """
        if not self.cfg.api_key:
            raise GatewayNotConfiguredError()

        request = self.client.build_request(
            "POST",
            "/chat/completions",
            json=self.build_payload(system_prompt, messages),
            headers={"Authorization": f"Bearer {self.cfg.api_key}"},
        )

        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            log.error("gateway_transport_error", error=str(e))
            raise UpstreamError(detail=str(e)) from e

        if response.is_success:
            log.debug("gateway_stream_opened", status=response.status_code, model=self.cfg.model)
            return response

        try:
            body = (await response.aread()).decode("utf-8", errors="replace")
        finally:
            await response.aclose()

        if response.status_code == 429:
            log.warning("gateway_rate_limited")
            raise UpstreamRateLimitedError(detail=body)
        if response.status_code == 402:
            log.warning("gateway_payment_required")
            raise UpstreamUnavailableError(detail=body)

        log.error("gateway_error", status=response.status_code, body=body[:500])
        raise UpstreamError(detail=f"{response.status_code}: {body[:500]}")


_client: Optional[GatewayClient] = None


def get_gateway_client() -> GatewayClient:
    global _client
    if _client is None:
        _client = GatewayClient()
    return _client
