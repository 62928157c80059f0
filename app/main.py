# app/main.py
from __future__ import annotations

# Load .env early so os.getenv works everywhere
from dotenv import load_dotenv
load_dotenv()

from fastapi import Depends, FastAPI

from app.api.deps import get_database
from app.api.routes.calls import router as calls_router
from app.api.routes.webhooks import router as webhooks_router
from app.core.config import settings
from app.core.errors import register_error_handlers
from app.core.logging import LoggingMiddleware, get_logger, setup_logging
from app.db.session import Database
from app.services.notifications import BookingNotifier

# Set up structured logging
setup_logging(debug=settings.is_development, max_log_length=settings.MAX_LOG_LENGTH,
              level=settings.LOG_LEVEL)
logger = get_logger(__name__)

app = FastAPI(title="Workshop Voice Service",
              description="Call intake and booking backend for the workshop voice assistant")

app.middleware("http")(LoggingMiddleware(
    log_requests=settings.LOG_REQUESTS,
    log_responses=settings.LOG_RESPONSES,
    slow_threshold=settings.SLOW_REQUEST_THRESHOLD,
))
register_error_handlers(app)


# -------- Health / readiness (public) --------
@app.get("/healthz", include_in_schema=False)
async def healthz():
    return {"ok": True}


@app.get("/readyz", include_in_schema=False)
async def readyz(database: Database = Depends(get_database)):
    await database.ping()
    return {"db": "ok"}


# -------- Include routers --------
app.include_router(calls_router)
app.include_router(webhooks_router)


# -------- Application startup/shutdown events --------
@app.on_event("startup")
async def startup_event():
    """Open the connection pool and the notification client."""
    app.state.db = Database.from_settings(settings)
    app.state.notifier = BookingNotifier.from_settings(settings)
    logger.info("application_startup",
                env=settings.APP_ENV,
                verify_signatures=settings.verify_signatures,
                notifications_enabled=app.state.notifier.enabled)


@app.on_event("shutdown")
async def shutdown_event():
    """Flush pending notifications, then release pooled connections."""
    logger.info("application_shutdown")
    notifier = getattr(app.state, "notifier", None)
    if notifier is not None:
        await notifier.aclose()
    database = getattr(app.state, "db", None)
    if database is not None:
        await database.dispose()
