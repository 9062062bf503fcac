"""
Customer source client.

The one object the checkout flow talks to. It owns the client configuration
and the in-memory ClientState, and delegates every operation to either the
local (in-memory) client or the real HTTP client:

- base URL and customer id both configured -> clients/real_http/customer_sources.py
- anything missing                          -> clients/mocks/customer_sources.py

Every operation is a coroutine resolving exactly once to a result record;
errors travel in the result's ``error`` slot and are never raised.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Optional

import httpx

from checkout_backend.integrations.clients.mocks.customer_sources import LocalCustomerSourceClient
from checkout_backend.integrations.clients.real_http.customer_sources import (
    REQUEST_TIMEOUT_SECONDS,
    RemoteCustomerSourceClient,
)
from checkout_backend.integrations.contracts.interfaces import CustomerSourceBackend
from checkout_backend.integrations.contracts.sources import (
    ClientConfig,
    ClientState,
    OperationResult,
    Source,
    SourcesResult,
)
from checkout_backend.integrations.errors import ConfigurationError

logger = logging.getLogger(__name__)

PUBLISHABLE_KEY_ENV = "STRIPE_PUBLISHABLE_KEY"

PublishableKeyProvider = Callable[[], Optional[str]]


def env_publishable_key(name: str = PUBLISHABLE_KEY_ENV) -> PublishableKeyProvider:
    def _read() -> Optional[str]:
        return os.getenv(name)

    return _read


def check_publishable_key(key: Optional[str], env_name: str = PUBLISHABLE_KEY_ENV) -> Optional[ConfigurationError]:
    """Return a ConfigurationError when the key is missing or still a placeholder."""
    if key and key.strip() and "#" not in key:
        return None
    return ConfigurationError(
        f"Please set {env_name} to your account's test publishable key before fetching customer sources."
    )


def _usable_base_url(base_url: str) -> bool:
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL:
        return False
    return url.scheme in ("http", "https") and bool(url.host)


class CustomerSourceClient:
    """Checkout-facing client for a customer's saved payment sources.

    If no base URL or customer id is given, sources are kept in memory.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        customer_id: Optional[str] = None,
        publishable_key: Optional[PublishableKeyProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        publishable_key_env: str = PUBLISHABLE_KEY_ENV,
    ) -> None:
        self.config = ClientConfig(base_url=base_url, customer_id=customer_id)
        self.state = ClientState()
        self.publishable_key_env = publishable_key_env
        self._publishable_key = publishable_key or env_publishable_key(publishable_key_env)
        self._backend = self._select_backend(transport)
        logger.info("Customer source client initialised in %s mode", self._backend.mode)

    def _select_backend(self, transport: Optional[httpx.AsyncBaseTransport]) -> CustomerSourceBackend:
        if self.config.is_remote and _usable_base_url(self.config.base_url):
            return RemoteCustomerSourceClient(
                base_url=self.config.base_url,
                customer_id=self.config.customer_id,
                timeout_seconds=REQUEST_TIMEOUT_SECONDS,
                transport=transport,
            )
        if self.config.is_remote:
            logger.warning("Base URL %r is not usable; keeping sources in memory", self.config.base_url)
        return LocalCustomerSourceClient()

    @property
    def mode(self) -> str:
        return self._backend.mode

    @property
    def default_source(self):
        return self.state.default_source

    @property
    def sources(self):
        return list(self.state.sources)

    async def charge_source(self, source: Source, amount: int) -> OperationResult:
        return await self._backend.charge_source(source, amount, self.state)

    async def fetch_sources(self) -> SourcesResult:
        error = check_publishable_key(self._publishable_key(), self.publishable_key_env)
        if error is not None:
            logger.error("Refusing to fetch customer sources: %s", error)
            return SourcesResult(error=error)
        return await self._backend.fetch_sources(self.state)

    async def select_default_source(self, source: Source) -> OperationResult:
        return await self._backend.select_default_source(source, self.state)

    async def attach_source(self, source: Source) -> OperationResult:
        return await self._backend.attach_source(source, self.state)


class ClientRegistry:
    """Holds the single active CustomerSourceClient for an application root.

    The cached client is reused while the requested (base_url, customer_id)
    pair matches exactly; any other pair replaces it. Not thread-safe: use it
    from one event loop.
    """

    def __init__(
        self,
        publishable_key: Optional[PublishableKeyProvider] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        publishable_key_env: str = PUBLISHABLE_KEY_ENV,
    ) -> None:
        self._publishable_key = publishable_key
        self._publishable_key_env = publishable_key_env
        self._transport = transport
        self._client: Optional[CustomerSourceClient] = None

    @property
    def current(self) -> Optional[CustomerSourceClient]:
        return self._client

    def get_or_create(self, base_url: Optional[str] = None, customer_id: Optional[str] = None) -> CustomerSourceClient:
        client = self._client
        if client is not None and client.config.matches(base_url, customer_id):
            return client

        client = CustomerSourceClient(
            base_url=base_url,
            customer_id=customer_id,
            publishable_key=self._publishable_key,
            transport=self._transport,
            publishable_key_env=self._publishable_key_env,
        )
        self._client = client
        return client
