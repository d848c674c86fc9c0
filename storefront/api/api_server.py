"""
FastAPI server for the storefront.

Holds each visitor's cart and customer session and talks to the commerce
backend on their behalf. The browser identifies itself with ``X-Session-Id``.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from storefront.api.rate_limit import limiter
from storefront.api.routes import StorefrontContext, router, set_context
from storefront.core.config import Settings, load_settings
from storefront.logging_config import setup_logging

logger = logging.getLogger(__name__)

DEV_ORIGINS = [
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
]


def create_api_app(
    context: StorefrontContext | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    """
    Create the storefront API application.

    Args:
        context: Pre-built storefront context (tests inject one with fakes)
        settings: Process settings; loaded from the environment when omitted
    """
    settings = settings or load_settings()

    if context is not None:
        set_context(context)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        own_context = None
        if context is None:
            own_context = StorefrontContext.from_settings(settings)
            set_context(own_context)
            logger.info(
                "Storefront API connected to %s (store %s)",
                own_context.config.api_url,
                own_context.config.store_id,
            )
        yield
        if own_context is not None:
            await own_context.close()
            set_context(None)
        logger.info("Storefront API shutting down")

    app = FastAPI(
        title="Storefront API",
        description="Cart, checkout and customer account for the store web client",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    allowed_origins = list(settings.api.cors_origins)
    if settings.is_dev:
        allowed_origins.extend(origin for origin in DEV_ORIGINS if origin not in allowed_origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Session-Id"],
    )

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Frame-Options"] = "SAMEORIGIN"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Cache-Control"] = "no-store"
        return response

    app.include_router(router)

    @app.get("/")
    async def root():
        return {"service": "Storefront API", "version": "1.0.0", "docs": "/api/docs"}

    return app


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level)
    app = create_api_app(settings=settings)
    logger.info("Starting storefront API on http://%s:%s", settings.api.host, settings.api.port)
    uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_level="info")


if __name__ == "__main__":
    main()
