from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Generic, List, Optional, TypeVar, Union

import httpx
from pydantic import BaseModel, Field, StrictInt, StrictStr, ValidationError

from checkout_backend.integrations.contracts.sources import (
    CardBrand,
    CardFunding,
    CustomerRecord,
    PaymentSource,
)
from checkout_backend.integrations.errors import NetworkingError

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    reason: str
    payload: Optional[Any] = None


DecodeResult = Union[Ok[T], Err]


class CardResponseModel(BaseModel):
    id: StrictStr
    brand: StrictStr
    last4: StrictStr
    exp_month: StrictInt = Field(ge=0)
    exp_year: StrictInt = Field(ge=0)
    funding: StrictStr


def decode_response_body(content: bytes) -> DecodeResult[Any]:
    if not content:
        return Err("Response body is empty.")
    try:
        return Ok(json.loads(content))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        return Err(f"Response body is not valid JSON: {exc}")
    except RecursionError:
        return Err("Response body is nested too deeply to decode.")


def decode_card(raw: Any) -> DecodeResult[PaymentSource]:
    if not isinstance(raw, dict):
        return Err(f"Card entry must be an object; got {type(raw).__name__}.", payload=raw)
    try:
        model = CardResponseModel(**raw)
    except ValidationError as exc:
        return Err(f"Card validation failed: {exc}", payload=raw)

    return Ok(
        PaymentSource(
            id=model.id,
            brand=CardBrand.from_string(model.brand),
            last4=model.last4,
            exp_month=model.exp_month,
            exp_year=model.exp_year,
            funding=CardFunding.from_string(model.funding),
        )
    )


def decode_customer(raw: Any) -> DecodeResult[CustomerRecord]:
    """
    Validate a ``{selected_card, cards}`` customer payload.

    Only a missing or mistyped top-level ``cards`` list fails the payload.
    Individual cards that do not validate are dropped, and an invalid
    ``selected_card`` simply means there is no default.
    """
    if not isinstance(raw, dict):
        return Err("Customer payload must be a JSON object.", payload=raw)

    cards_raw = raw.get("cards")
    if not isinstance(cards_raw, list):
        return Err("Customer payload is missing the 'cards' list.", payload=raw)

    cards: List[PaymentSource] = []
    for entry in cards_raw:
        result = decode_card(entry)
        if isinstance(result, Ok):
            cards.append(result.value)
        else:
            logger.debug("Dropping undecodable card: %s", result.reason)

    selected: Optional[PaymentSource] = None
    selected_raw = raw.get("selected_card")
    if selected_raw is not None:
        result = decode_card(selected_raw)
        if isinstance(result, Ok):
            selected = result.value
        else:
            logger.debug("Ignoring undecodable selected_card: %s", result.reason)

    return Ok(CustomerRecord(selected_card=selected, cards=cards))


def map_response_error(response: httpx.Response) -> Optional[NetworkingError]:
    if response.is_success:
        return None
    payload: Dict[str, Any] = {}
    try:
        payload["url"] = str(response.request.url)
    except RuntimeError:
        # Response built without a request (tests, synthetic responses).
        pass
    return NetworkingError(response.status_code, payload=payload)
