from abc import ABC, abstractmethod

from .sources import ClientState, OperationResult, Source, SourcesResult


# ---------------------------------------------------------------------------
# Abstract customer source interface
# ---------------------------------------------------------------------------

class CustomerSourceBackend(ABC):
    """Every customer source implementation (local or remote) must implement this interface.

    Implementations work against the ``ClientState`` owned by the calling
    ``CustomerSourceClient`` and report failures through the returned result,
    never by raising.
    """

    @property
    @abstractmethod
    def mode(self) -> str:
        """Return ``"local"`` or ``"remote"``."""

    @abstractmethod
    async def charge_source(self, source: Source, amount: int, state: ClientState) -> OperationResult:
        """Charge ``amount`` (smallest currency unit) against ``source``."""

    @abstractmethod
    async def fetch_sources(self, state: ClientState) -> SourcesResult:
        """Return the default source id and the list of saved sources."""

    @abstractmethod
    async def select_default_source(self, source: Source, state: ClientState) -> OperationResult:
        """Make ``source`` the customer's default."""

    @abstractmethod
    async def attach_source(self, source: Source, state: ClientState) -> OperationResult:
        """Save ``source`` on the customer."""
