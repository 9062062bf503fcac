"""Pytest fixtures for customer source client tests."""

import json
from typing import Callable, List

import httpx
import pytest

from checkout_backend.integrations.contracts.sources import (
    CardBrand,
    CardFunding,
    CardSource,
    PaymentSource,
)

BASE_URL = "https://backend.example.com"
CUSTOMER_ID = "cus_123"


@pytest.fixture
def publishable_key():
    return lambda: "pk_test_123"


@pytest.fixture
def visa_card():
    return PaymentSource(
        id="card_visa",
        brand=CardBrand.VISA,
        last4="4242",
        exp_month=12,
        exp_year=2030,
        funding=CardFunding.CREDIT,
    )


@pytest.fixture
def visa_source(visa_card):
    return CardSource(id="tok_visa", card=visa_card)


@pytest.fixture
def card_json():
    return {
        "id": "c1",
        "brand": "visa",
        "last4": "4242",
        "exp_month": 12,
        "exp_year": 2030,
        "funding": "credit",
    }


class RecordingBackend:
    """Stand-in merchant backend: records requests and replies with a fixed response."""

    def __init__(self, status_code: int = 200, body=None, exc: Exception = None):
        self.status_code = status_code
        self.body = body
        self.exc = exc
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        if self.body is None:
            return httpx.Response(self.status_code)
        if isinstance(self.body, (bytes, str)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, content=json.dumps(self.body).encode("utf-8"))

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def backend_factory() -> Callable[..., RecordingBackend]:
    return RecordingBackend
