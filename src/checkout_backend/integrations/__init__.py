"""
Integrations layer.

This package contains all code used to communicate with the merchant backend
that stores a customer's saved payment sources.

Key rule:
- Callers MUST NOT call the merchant backend directly.
- They go through CustomerSourceClient, which selects the local (in-memory)
  client or the real HTTP client depending on configuration.

Switching implementations:
- The client instance is owned by a ClientRegistry created at the application
  root (checkout_backend/api/main.py).
"""

from .contracts.sources import (
    CardBrand,
    CardFunding,
    CardSource,
    ClientConfig,
    ClientState,
    CustomerRecord,
    OperationResult,
    OtherSource,
    PaymentSource,
    Source,
    SourcesResult,
    card_from_source,
)
from .customer_source_client import ClientRegistry, CustomerSourceClient
from .errors import BackendAdapterError, ConfigurationError, DecodeError, NetworkingError

__all__ = [
    # contracts
    "CardBrand", "CardFunding", "CardSource", "ClientConfig", "ClientState",
    "CustomerRecord", "OperationResult", "OtherSource", "PaymentSource",
    "Source", "SourcesResult", "card_from_source",
    # client
    "ClientRegistry", "CustomerSourceClient",
    # errors
    "BackendAdapterError", "ConfigurationError", "DecodeError", "NetworkingError",
]
