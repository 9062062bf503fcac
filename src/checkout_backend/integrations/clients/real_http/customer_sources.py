"""
Real customer source HTTP client.

Used when both a merchant backend URL and a customer id are configured.

Endpoints (relative to base_url):
- GET  /customers/{customer_id}                 -> {selected_card, cards}
- POST /customers/{customer_id}/select_source   {customer, source}
- POST /customers/{customer_id}/sources         {customer, source}
- POST /charge                                  {source, amount, customer}

Implementation notes:
- POST bodies are form-encoded
- Non-2xx responses become NetworkingError; httpx transport errors are
  returned untouched
- Only fetch_sources reads the response body
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import httpx

from checkout_backend.integrations.contracts.interfaces import CustomerSourceBackend
from checkout_backend.integrations.contracts.sources import (
    ClientState,
    OperationResult,
    Source,
    SourcesResult,
)
from checkout_backend.integrations.errors import DecodeError
from checkout_backend.integrations.response_wrappers import (
    Err,
    decode_customer,
    decode_response_body,
    map_response_error,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT_SECONDS = 5.0


class RemoteCustomerSourceClient(CustomerSourceBackend):
    def __init__(
        self,
        base_url: str,
        customer_id: str,
        timeout_seconds: float = REQUEST_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.customer_id = customer_id
        self.timeout_seconds = timeout_seconds
        self._transport = transport

    @property
    def mode(self) -> str:
        return "remote"

    @property
    def customer_path(self) -> str:
        return f"/customers/{quote(self.customer_id, safe='')}"

    async def charge_source(self, source: Source, amount: int, state: ClientState) -> OperationResult:
        form = {
            "source": source.id,
            "amount": str(amount),
            "customer": self.customer_id,
        }
        return await self._post("/charge", form)

    async def fetch_sources(self, state: ClientState) -> SourcesResult:
        try:
            response = await self._request("GET", self.customer_path)
        except httpx.RequestError as e:
            logger.error("Request error fetching customer sources: %s", e)
            return SourcesResult(error=e)

        error = map_response_error(response)
        if error is not None:
            logger.warning("Fetching customer sources failed: status=%s", response.status_code)
            return SourcesResult(error=error)

        body = decode_response_body(response.content)
        if isinstance(body, Err):
            return SourcesResult(error=DecodeError(body.reason))
        record = decode_customer(body.value)
        if isinstance(record, Err):
            logger.warning("Undecodable customer payload: %s", record.reason)
            payload = record.payload if isinstance(record.payload, dict) else {}
            return SourcesResult(error=DecodeError(record.reason, payload=payload))

        customer = record.value
        state.default_source = customer.selected_card
        state.sources = list(customer.cards)
        logger.info("Fetched %d sources for customer %s", len(customer.cards), self.customer_id)
        return SourcesResult(default_source_id=state.default_source_id, sources=list(customer.cards))

    async def select_default_source(self, source: Source, state: ClientState) -> OperationResult:
        form = {
            "customer": self.customer_id,
            "source": source.id,
        }
        return await self._post(f"{self.customer_path}/select_source", form)

    async def attach_source(self, source: Source, state: ClientState) -> OperationResult:
        form = {
            "customer": self.customer_id,
            "source": source.id,
        }
        return await self._post(f"{self.customer_path}/sources", form)

    async def _post(self, path: str, form: Dict[str, Any]) -> OperationResult:
        try:
            response = await self._request("POST", path, form)
        except httpx.RequestError as e:
            logger.error("Request error calling %s: %s", path, e)
            return OperationResult(error=e)

        error = map_response_error(response)
        if error is not None:
            logger.warning("Backend rejected %s: status=%s", path, response.status_code)
        return OperationResult(error=error)

    async def _request(self, method: str, path: str, form: Optional[Dict[str, Any]] = None) -> httpx.Response:
        url = f"{self.base_url}{path}"
        logger.info("%s %s", method, url)
        async with httpx.AsyncClient(timeout=self.timeout_seconds, transport=self._transport) as client:
            return await client.request(method, url, data=form)
