"""Error taxonomy for the customer source client.

Transport failures (timeouts, DNS, refused connections) are not wrapped: the
``httpx.TransportError`` raised by the HTTP layer is handed back to the caller
unchanged.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

CONFIGURATION_ERROR_CODE = 50


class BackendAdapterError(Exception):
    def __init__(self, message: str, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.payload = payload or {}


class ConfigurationError(BackendAdapterError):
    """Publishable key missing or still set to the placeholder value."""

    def __init__(self, message: str, *, code: int = CONFIGURATION_ERROR_CODE) -> None:
        super().__init__(message, payload={"code": code})
        self.code = code


class NetworkingError(BackendAdapterError):
    """Backend answered with a non-2xx status."""

    def __init__(self, status_code: int, *, payload: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(f"Backend request failed with HTTP status {status_code}.", payload=payload)
        self.status_code = status_code


class DecodeError(BackendAdapterError):
    """Response body could not be decoded into a customer record."""
