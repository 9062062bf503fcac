"""Backend adapter for a mobile checkout flow."""

__version__ = "1.0.0"
