"""Application factory."""

from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from typing import Optional

import redis
from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from fastapi_pagination import add_pagination

from app.config import get_settings
from app.core.app_state import state
from app.core.hint_bus import RedisHintBus
from app.db import db_manager
from app.exceptions import ChatError, TransientIOError
from app.infra.logging_config import LoggingConfig, get_logger
from app.routers.attachments_router import attachments_router
from app.routers.contacts_router import contacts_router
from app.routers.messages_router import messages_router, reports_router
from app.routers.moods_router import moods_router
from app.routers.presence_router import presence_router
from app.routers.realtime import router as realtime_router
from app.routers.rooms_router import rooms_router
from app.routers.system import router as system_router

logger = get_logger("app")

RETRY_AFTER_SECONDS = "1"


async def _sweep_presence(interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await run_in_threadpool(state.presence.expire_stale)
        except Exception as e:
            logger.warning("Presence sweep failed: %s", e)


async def _start_hint_bus() -> Optional[RedisHintBus]:
    """Start the cross-process hint listener; stay in-process if Redis is unreachable."""
    bus = state.hint_bus
    if bus is None:
        return None
    try:
        await bus.start(state.notifier.deliver)
    except redis.RedisError as e:
        logger.warning("Hint bus unavailable, delivering hints in process only: %s", e)
        return None
    state.notifier.attach_bus(bus)
    return bus


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ChatError)
    async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
        headers = None
        if isinstance(exc, TransientIOError):
            headers = {"Retry-After": RETRY_AFTER_SECONDS}
            logger.warning(
                "%s %s failed transiently: %s",
                request.method,
                request.url.path,
                exc.message,
            )
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.message},
            headers=headers,
        )


def create_app(testing: bool = False) -> FastAPI:
    settings = get_settings()
    LoggingConfig()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = None
        bus = None
        if not testing:
            bus = await _start_hint_bus()
            if not settings.is_production:
                db_manager.create_all()
            sweeper = asyncio.create_task(
                _sweep_presence(settings.presence_sweep_interval_seconds)
            )
        yield
        if sweeper is not None:
            sweeper.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await sweeper
        if bus is not None:
            state.notifier.attach_bus(None)
            await bus.stop()
        state.notifier.close_all()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    _register_exception_handlers(app)

    app.include_router(system_router)
    app.include_router(rooms_router)
    app.include_router(messages_router)
    app.include_router(reports_router)
    app.include_router(presence_router)
    app.include_router(moods_router)
    app.include_router(contacts_router)
    app.include_router(attachments_router)
    app.include_router(realtime_router)
    add_pagination(app)
    return app
