"""FastAPI application serving the analysis gateway."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

# Phase 1: Singleton logging: MUST be before any bughunter imports
# (they transitively import litellm which reads LITELLM_LOG at import time)
from bughunter.logging_config import setup_logging

setup_logging()

from fastapi import FastAPI  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402

from bughunter import __version__  # noqa: E402
from bughunter.api.middleware.auth import ApiKeyMiddleware  # noqa: E402
from bughunter.api.routes import analyze, health  # noqa: E402
from bughunter.config import Settings  # noqa: E402
from bughunter.constants import CORS_ALLOW_HEADERS  # noqa: E402
from bughunter.logger import GatewayLogger  # noqa: E402
from bughunter.logging_config import (  # noqa: E402
    cleanup_third_party_handlers,
)

# Phase 2: Now that all imports (including litellm) are done,
# clear litellm's duplicate handlers.
cleanup_third_party_handlers()

_logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = _settings

    app.state.settings = settings
    app.state.logger = GatewayLogger(
        log_dir=settings.log_dir, level=settings.log_level
    )

    if not settings.api_key:
        _logger.warning(
            "event=no_api_key action=all_endpoints_public"
        )
    _logger.info(
        "event=gateway_started models=%s",
        ",".join(settings.litellm_model_chain),
    )

    yield


app = FastAPI(
    title="Agentic Bug Hunter",
    description="RDI bug analysis gateway",
    version=__version__,
    openapi_url="/api/openapi.json",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    lifespan=lifespan,
)

# Middleware stack (Starlette LIFO: last added = outermost = runs first)
#
# Inbound request order:
#   CORSMiddleware (outermost) -> ApiKeyMiddleware -> Router
#
# CORS must be outermost so OPTIONS preflight is answered before
# ApiKeyMiddleware rejects for missing X-API-Key.
_settings = Settings()

app.add_middleware(ApiKeyMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origin_list,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=[*CORS_ALLOW_HEADERS, "x-api-key"],
    allow_credentials=False,
)

app.include_router(health.router)
app.include_router(analyze.router)
