from typing import Any, Dict, NoReturn, Optional

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from checkout_backend.integrations.contracts.sources import (
    CardBrand,
    CardFunding,
    CardSource,
    OtherSource,
    PaymentSource,
    Source,
)
from checkout_backend.integrations.customer_source_client import CustomerSourceClient
from checkout_backend.integrations.errors import ConfigurationError, DecodeError, NetworkingError

api = APIRouter()
customer_sources_api = api


class CardPayload(BaseModel):
    id: str
    brand: str = "unknown"
    last4: str = Field(..., min_length=4, max_length=4)
    exp_month: int = Field(..., ge=1, le=12)
    exp_year: int = Field(..., ge=0)
    funding: str = "unknown"


class SourcePayload(BaseModel):
    id: str = Field(..., description="Source/token id issued by the payment SDK")
    card: Optional[CardPayload] = Field(default=None, description="Card details when the source is a card")

    def to_source(self) -> Source:
        if self.card is None:
            return OtherSource(id=self.id)
        return CardSource(
            id=self.id,
            card=PaymentSource(
                id=self.card.id,
                brand=CardBrand.from_string(self.card.brand),
                last4=self.card.last4,
                exp_month=self.card.exp_month,
                exp_year=self.card.exp_year,
                funding=CardFunding.from_string(self.card.funding),
            ),
        )


class ChargeRequest(BaseModel):
    source_id: str
    amount: int = Field(..., gt=0, description="Amount in the smallest currency unit")


def get_customer_source_client(request: Request) -> CustomerSourceClient:
    cfg = request.app.state.backend_config
    return request.app.state.client_registry.get_or_create(cfg.base_url, cfg.customer_id)


@api.get("/sources")
async def fetch_sources(client: CustomerSourceClient = Depends(get_customer_source_client)):
    result = await client.fetch_sources()
    if result.error is not None:
        _raise_for_error(result.error)
    return {
        "mode": client.mode,
        "default_source_id": result.default_source_id,
        "sources": [_card_to_dict(card) for card in result.sources],
    }


@api.post("/sources")
async def attach_source(
    payload: SourcePayload,
    client: CustomerSourceClient = Depends(get_customer_source_client),
):
    result = await client.attach_source(payload.to_source())
    if result.error is not None:
        _raise_for_error(result.error)
    return {"mode": client.mode, "source_id": payload.id, "status": "attached"}


@api.post("/sources/default")
async def select_default_source(
    payload: SourcePayload,
    client: CustomerSourceClient = Depends(get_customer_source_client),
):
    result = await client.select_default_source(payload.to_source())
    if result.error is not None:
        _raise_for_error(result.error)
    return {"mode": client.mode, "source_id": payload.id, "status": "selected"}


@api.post("/charge")
async def charge_source(
    request: ChargeRequest,
    client: CustomerSourceClient = Depends(get_customer_source_client),
):
    result = await client.charge_source(OtherSource(id=request.source_id), request.amount)
    if result.error is not None:
        _raise_for_error(result.error)
    return {"mode": client.mode, "source_id": request.source_id, "amount": request.amount, "status": "charged"}


def _card_to_dict(card: PaymentSource) -> Dict[str, Any]:
    return {
        "id": card.id,
        "brand": card.brand.value,
        "last4": card.last4,
        "exp_month": card.exp_month,
        "exp_year": card.exp_year,
        "funding": card.funding.value,
    }


def _raise_for_error(error: Exception) -> NoReturn:
    if isinstance(error, ConfigurationError):
        raise HTTPException(status_code=500, detail={"message": str(error), "code": error.code}) from error
    if isinstance(error, NetworkingError):
        raise HTTPException(
            status_code=502,
            detail={"message": str(error), "upstream_status": error.status_code},
        ) from error
    if isinstance(error, DecodeError):
        raise HTTPException(status_code=502, detail={"message": str(error), "stage": "backend_response_decoding"}) from error
    if isinstance(error, httpx.TimeoutException):
        raise HTTPException(status_code=504, detail={"message": "Merchant backend timed out."}) from error
    raise HTTPException(status_code=503, detail={"message": f"Merchant backend unreachable: {error}"}) from error
