# plpgen/main.py
"""
plpgen service - Telegram webhook, VIP API, health and metrics.
"""
import uvicorn
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

# Rate limiting
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from plpgen import __version__
from plpgen.core.config import settings
from plpgen.core.logging import log
from plpgen.lib.rate_limit import limiter


# ---------------------------------------------------------------------------
# LIFESPAN
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    log("STARTUP", "🚀 plpgen starting...")
    log("STARTUP", f"TELEGRAM_BOT_TOKEN loaded: {bool(settings.telegram.bot_token)}")
    log("STARTUP", f"TEMPLATE_URL set: {bool(settings.generator.template_url)}")
    log("STARTUP", f"ADMIN_CODE set: {bool(settings.admin_code)}")

    from plpgen.db import connect_db, disconnect_db
    await connect_db()

    yield

    log("STARTUP", "🔌 Shutting down...")
    from plpgen.api.telegram import close_telegram_client, drain_pending_updates
    await drain_pending_updates()
    await close_telegram_client()
    await disconnect_db()


# ---------------------------------------------------------------------------
# APP INITIALIZATION
# ---------------------------------------------------------------------------

app = FastAPI(
    title="plpgen",
    version=__version__,
    lifespan=lifespan,
)

# Monitoring
from plpgen.lib.monitoring import register_monitoring
register_monitoring(app)

if settings.cors_origins == ["*"] and not settings.debug:
    log("STARTUP", "⚠️ [CORS] Using allow_origins=['*'] - consider setting CORS_ORIGINS in production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)


# ---------------------------------------------------------------------------
# API ROUTES
# ---------------------------------------------------------------------------

from plpgen.api import health, telegram, vip

app.include_router(health.router)
app.include_router(telegram.router)
app.include_router(vip.router)


# ---------------------------------------------------------------------------
# RUN
# ---------------------------------------------------------------------------

def run(reload: bool = False) -> None:
    uvicorn.run(
        "plpgen.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=reload,
    )


if __name__ == "__main__":
    run(reload=settings.debug)
