"""Subscription HTTP application."""

from __future__ import annotations

import logging

import uvicorn
from fastapi import APIRouter, FastAPI
from fastapi.responses import PlainTextResponse

from node_bootstrap.configuration.runtime_settings import RuntimeConfig
from node_bootstrap.tunnel_discovery.tunnel_models import TunnelHandle

from .descriptor_builder import render_subscription

LOGGER = logging.getLogger(__name__)


class SubscriptionService:  # pylint: disable=too-few-public-methods
    """Renders the descriptor from in-memory state without ever waiting on discovery."""

    def __init__(self, config: RuntimeConfig, tunnel: TunnelHandle) -> None:
        self._config = config
        self._tunnel = tunnel

    def current_hostname(self) -> str:
        return self._tunnel.hostname or self._config.tunnel.fallback_hostname

    def current_descriptor(self) -> str:
        return render_subscription(self._config, self.current_hostname())


def create_app(config: RuntimeConfig, tunnel: TunnelHandle) -> FastAPI:
    """Application factory exposing the root liveness text and the subscription route."""
    service = SubscriptionService(config, tunnel)
    router = APIRouter()

    @router.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return "Hello world!"

    @router.get(f"/{config.subscription.path}", response_class=PlainTextResponse)
    def subscription() -> str:
        return service.current_descriptor()

    app = FastAPI(title="node-bootstrap", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.subscription_service = service
    app.include_router(router)
    return app


def serve(app: FastAPI, *, port: int, log_level: str = "info") -> None:
    """Block serving the application on all interfaces."""
    LOGGER.info("Subscription server listening on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port, log_level=log_level.lower())
