"""
Configuration loader for the checkout backend adapter
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

BASE_URL_ENV = "CHECKOUT_BACKEND_URL"
CUSTOMER_ID_ENV = "CHECKOUT_CUSTOMER_ID"
CONFIG_PATH_ENV = "CHECKOUT_CONFIG_PATH"


class BackendConfig(BaseModel):
    """Merchant backend configuration. Leave base_url/customer_id unset for local mode."""

    base_url: Optional[str] = None
    customer_id: Optional[str] = None
    publishable_key_env: str = Field(default="STRIPE_PUBLISHABLE_KEY", min_length=1)

    @field_validator("base_url", "customer_id", mode="before")
    @classmethod
    def _blank_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


def default_config_path() -> Path:
    """CHECKOUT_CONFIG_PATH when set, else config/backend_config.yml under the working directory."""
    explicit = os.getenv(CONFIG_PATH_ENV)
    if explicit:
        return Path(explicit)
    return Path.cwd() / "config" / "backend_config.yml"


def load_backend_config(config_path: Optional[Path] = None) -> BackendConfig:
    """
    Load and validate backend configuration

    Values come from the YAML file (when present) and are overridden by
    CHECKOUT_BACKEND_URL / CHECKOUT_CUSTOMER_ID from the environment or .env.

    Args:
        config_path: Path to config file. Defaults to CHECKOUT_CONFIG_PATH, then
            config/backend_config.yml under the working directory

    Returns:
        Validated BackendConfig object

    Raises:
        FileNotFoundError: If an explicitly requested config file doesn't exist
        ValidationError: If config doesn't match schema
    """
    load_dotenv()

    explicit = config_path is not None or bool(os.getenv(CONFIG_PATH_ENV))
    if config_path is None:
        config_path = default_config_path()

    data = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"Backend config file not found: {config_path}")
    else:
        logger.warning("Backend config file not found at %s; using environment only", config_path)

    for key, env_name in (("base_url", BASE_URL_ENV), ("customer_id", CUSTOMER_ID_ENV)):
        value = os.getenv(env_name)
        if value is not None:
            data[key] = value

    try:
        cfg = BackendConfig(**data)
        logger.info("Loaded backend config (remote=%s)", bool(cfg.base_url and cfg.customer_id))
        return cfg
    except ValidationError as e:
        logger.error("Backend config validation failed: %s", e)
        raise
