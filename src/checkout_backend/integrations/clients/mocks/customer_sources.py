"""
Local (in-memory) customer source client.

Purpose:
- Used when no merchant backend URL / customer id is configured
- Does NOT make any network calls
- Keeps the default source and the list of saved cards in the owning client's
  ClientState (reset on restart)

Behavior:
- charge_source(...) always succeeds; there is nothing to charge without a backend
- attach_source(...) appends the card and makes it the default
- select_default_source(...) only changes the default for card-bearing sources

Swap:
CustomerSourceClient picks the real HTTP client in clients/real_http/customer_sources.py
as soon as both a base URL and a customer id are configured.
"""

import logging

from checkout_backend.integrations.contracts.interfaces import CustomerSourceBackend
from checkout_backend.integrations.contracts.sources import (
    ClientState,
    OperationResult,
    Source,
    SourcesResult,
    card_from_source,
)

logger = logging.getLogger(__name__)


class LocalCustomerSourceClient(CustomerSourceBackend):
    @property
    def mode(self) -> str:
        return "local"

    async def charge_source(self, source: Source, amount: int, state: ClientState) -> OperationResult:
        logger.info("[LOCAL] Skipping charge of %d for source %s (no backend configured)", amount, source.id)
        return OperationResult()

    async def fetch_sources(self, state: ClientState) -> SourcesResult:
        return SourcesResult(default_source_id=state.default_source_id, sources=list(state.sources))

    async def select_default_source(self, source: Source, state: ClientState) -> OperationResult:
        card = card_from_source(source)
        if card is None:
            logger.info("[LOCAL] Source %s carries no card; default unchanged", source.id)
        else:
            state.default_source = card
            logger.info("[LOCAL] Default source set to %s", card.id)
        return OperationResult()

    async def attach_source(self, source: Source, state: ClientState) -> OperationResult:
        card = card_from_source(source)
        if card is None:
            logger.info("[LOCAL] Source %s carries no card; nothing attached", source.id)
        else:
            state.sources.append(card)
            state.default_source = card
            logger.info("[LOCAL] Attached %s (%d saved)", card.id, len(state.sources))
        return OperationResult()
