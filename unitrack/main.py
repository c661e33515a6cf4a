"""unitrack API — FastAPI application entry point for the local timer server.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map UnitrackError → structured JSON responses
    - One TimerEngine per process, owned by the TimerService on app.state
    - Startup order: logging → database schema → dispatcher → tick loop;
      shutdown runs in reverse and drains queued completions first

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Settings read once here and passed into constructors
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from unitrack.api.error_handlers import register_error_handlers
from unitrack.api.routes import health, history, timer, timer_stream
from unitrack.config import Settings, get_settings
from unitrack.core.timer_engine import TimerEngine
from unitrack.infrastructure.database import DatabaseSessionManager, init_db
from unitrack.infrastructure.history_store import SqlHistoryStore
from unitrack.infrastructure.linear_client import ResilientLinearClient
from unitrack.infrastructure.notifier import TerminalNotifier
from unitrack.infrastructure.observability import setup_logging
from unitrack.infrastructure.snapshot_store import SqlSnapshotStore
from unitrack.services.completion_dispatcher import CompletionDispatcher
from unitrack.services.timer_service import TimerService

logger = logging.getLogger(__name__)


def build_linear_client(settings: Settings) -> ResilientLinearClient:
    return ResilientLinearClient(
        api_key=settings.api_key,
        api_url=settings.linear_api_url,
        max_retries=settings.linear_max_retries,
        base_delay_ms=settings.linear_base_delay_ms,
        max_delay_ms=settings.linear_max_delay_ms,
        timeout_seconds=settings.linear_timeout_seconds,
    )


def build_timer_service(
    settings: Settings, db: DatabaseSessionManager, dispatcher: CompletionDispatcher,
) -> TimerService:
    return TimerService(
        engine=TimerEngine(save_interval=settings.save_interval),
        snapshots=SqlSnapshotStore(db, retention=settings.retention),
        history=SqlHistoryStore(db),
        sink=dispatcher,
        save_timeout_seconds=settings.save_timeout_seconds,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.resolved_log_file)
    db = init_db(settings.resolved_database_url)
    await db.create_schema()

    linear = build_linear_client(settings)
    if not linear.configured:
        logger.warning("No Linear API key configured; completed timers will only be logged")
    dispatcher = CompletionDispatcher(
        linear, TerminalNotifier(enabled=settings.notifications_enabled),
    )
    service = build_timer_service(settings, db, dispatcher)
    app.state.timer_service = service

    dispatcher.start()
    service.start_ticking(settings.tick_interval_seconds)
    logger.info(f"unitrack API started on {settings.base_url}")
    yield
    logger.info("unitrack API shutting down")
    await service.stop_ticking()
    await dispatcher.stop()
    await linear.aclose()
    await db.dispose()


app = FastAPI(title="unitrack API", version="1.0.0", lifespan=lifespan)

app.include_router(health.router)
app.include_router(timer.router)
app.include_router(timer_stream.router)
app.include_router(history.router)

register_error_handlers(app)
