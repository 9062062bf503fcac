"""
FastAPI application - Main entry point
"""

from dotenv import load_dotenv

load_dotenv()

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from checkout_backend import __version__
from checkout_backend.api.endpoints.customer_sources import customer_sources_api
from checkout_backend.integrations.customer_source_client import ClientRegistry, env_publishable_key
from checkout_backend.utils.config_loader import BackendConfig, load_backend_config

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(
    backend_config: Optional[BackendConfig] = None,
    client_registry: Optional[ClientRegistry] = None,
) -> FastAPI:
    cfg = backend_config or load_backend_config()

    app = FastAPI(
        title="Checkout Backend Adapter",
        description="Saved payment sources and charges for the mobile checkout flow",
        version=__version__,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # The registry lives for the lifetime of the app and is the only owner of
    # the active CustomerSourceClient.
    app.state.backend_config = cfg
    app.state.client_registry = client_registry or ClientRegistry(
        publishable_key=env_publishable_key(cfg.publishable_key_env),
        publishable_key_env=cfg.publishable_key_env,
    )

    app.include_router(customer_sources_api, prefix="/api/v1/customer-sources", tags=["Customer sources"])

    @app.get("/health")
    async def health():
        return {"status": "ok", "remote": bool(cfg.base_url and cfg.customer_id)}

    logger.info("Checkout backend adapter ready (backend=%s)", cfg.base_url or "in-memory")
    return app


app = create_app()
