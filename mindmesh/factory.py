"""
FastAPI application factory.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import get_settings
from .core.database import init_db, close_db, is_configured
from .core.errors import ConfigError, LLMError
from .api.router import router

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="MindMesh",
        description="Memory-aware career mentor",
        version="1.0.0",
        docs_url="/docs" if settings.env == "development" else None,
        redoc_url="/redoc" if settings.env == "development" else None,
    )

    # ── CORS ─────────────────────────────────────────────────────
    origins = [o.strip() for o in settings.cors_origins.split(",") if o.strip()]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Errors ───────────────────────────────────────────────────
    @app.exception_handler(ConfigError)
    async def on_config_error(request: Request, exc: ConfigError):
        logger.error("Configuration error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=503,
            content={"error": "Service not configured", "details": str(exc)},
        )

    @app.exception_handler(LLMError)
    async def on_llm_error(request: Request, exc: LLMError):
        logger.error("LLM error on %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=502,
            content={"error": "AI provider request failed", "details": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def on_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
        )

    # ── Startup ──────────────────────────────────────────────────
    @app.on_event("startup")
    async def on_startup():
        logging.basicConfig(
            level=getattr(logging, settings.log_level.upper(), logging.INFO),
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        logger.info("Starting MindMesh (env=%s)", settings.env)

        if is_configured():
            await init_db()
        else:
            logger.warning("DATABASE_URL not set; memory endpoints will return 503")

        from .core.flags import get_flags
        flags = get_flags()
        logger.info(
            "Flags: auth=%s llm=%s retry_429=%s persist_resumes=%s",
            flags.use_auth, flags.llm_provider,
            flags.llm_retry_on_rate_limit, flags.persist_resumes,
        )

        logger.info("MindMesh is ready")

    # ── Shutdown ─────────────────────────────────────────────────
    @app.on_event("shutdown")
    async def on_shutdown():
        from .services.llm import close_client
        await close_client()
        await close_db()
        logger.info("MindMesh shut down")

    # ── Routes ───────────────────────────────────────────────────
    app.include_router(router)

    return app
