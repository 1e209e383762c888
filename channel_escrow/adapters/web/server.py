"""FastAPI application, error handlers, and startup."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from channel_escrow import __version__
from channel_escrow.adapters.web.dependencies import (
    SECRET_HEADER,
    Services,
    build_services,
    secret_matches,
)
from channel_escrow.adapters.web.transfer_routes import transfer_router
from channel_escrow.config import AppConfig
from channel_escrow.errors import AuthError, ValidationError

logger = logging.getLogger(__name__)

SERVICE_NAME = "telegram-transfer-service"


def _log_config_check(config: AppConfig) -> None:
    logger.info("Configuration check:")
    for name, state in config.describe().items():
        logger.info("- %s: %s", name, state)
    if config.uses_insecure_secret:
        logger.warning("API_SECRET is not set; using the insecure default. Set it before production use.")


def _describe_invalid_body(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        if err.get("type") == "json_invalid":
            return "Request body is not valid JSON"
        field = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "Invalid request body: " + "; ".join(parts)


def create_app(config: Optional[AppConfig] = None, services: Optional[Services] = None) -> FastAPI:
    if services is not None:
        config = services.config
    config = config or AppConfig.from_env()
    services = services or build_services(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Telegram Transfer Service %s", __version__)
        _log_config_check(config)
        yield

    app = FastAPI(title="Telegram Transfer Service", version=__version__, lifespan=lifespan)
    app.state.services = services
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AuthError)
    async def _auth_error(request: Request, exc: AuthError):
        logger.warning("Unauthorized request to %s - invalid API secret", request.url.path)
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    @app.exception_handler(ValidationError)
    async def _validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def _request_validation_error(request: Request, exc: RequestValidationError):
        # Body parsing precedes route dependencies; unauthenticated callers still get 401.
        if request.url.path.startswith(transfer_router.prefix) and not secret_matches(
            config, request.headers.get(SECRET_HEADER)
        ):
            return await _auth_error(request, AuthError("Unauthorized"))
        return JSONResponse(status_code=400, content={"error": _describe_invalid_body(exc)})

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception):
        logger.error("Unhandled error on %s: %s", request.url.path, exc)
        return JSONResponse(status_code=500, content={"error": "Internal server error", "message": str(exc)})

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "version": __version__,
        }

    @app.get("/")
    async def root():
        return {
            "service": "Telegram Transfer Service",
            "status": "running",
            "endpoints": {
                "health": "GET /health",
                "joinChannel": "POST /api/join-channel",
                "checkOwnership": "POST /api/check-ownership",
                "transferOwnership": "POST /api/transfer-ownership",
            },
            "note": "All POST endpoints require X-API-Secret header",
        }

    app.include_router(transfer_router)
    return app


def main() -> None:
    """Console entry point. For an ASGI server use ``create_app`` with ``--factory``."""
    config = AppConfig.from_env()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("Health check: http://localhost:%d/health", config.port)
    uvicorn.run(create_app(config), host="0.0.0.0", port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
