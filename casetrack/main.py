from __future__ import annotations

import asyncio
import contextlib
import logging

from aiogram import Bot, Dispatcher

from casetrack.config import Settings, load_settings
from casetrack.domain.common.time import to_iso
from casetrack.domain.deadlines.engine import DeadlineEngine
from casetrack.infra.clock.system_clock import SystemClock
from casetrack.infra.db.connection import Database
from casetrack.infra.db.repo.deadlines_sqlite import DeadlinesSqliteRepo
from casetrack.infra.db.schema_version import apply_migrations
from casetrack.infra.ids.uuid_gen import UuidGenerator
from casetrack.infra.scheduler.loop import RefreshConfig, RefreshJob
from casetrack.ui.telegram.handlers.deadlines import router as deadlines_router
from casetrack.ui.telegram.middlewares.auth import OwnerOnlyMiddleware
from casetrack.ui.telegram.middlewares.di import DIMiddleware

logger = logging.getLogger(__name__)


async def _run_bot(settings: Settings, engine: DeadlineEngine) -> None:
    bot = Bot(token=settings.bot_token)
    dp = Dispatcher()

    dp.message.middleware(OwnerOnlyMiddleware(settings.owner_telegram_id))
    dp.message.middleware(DIMiddleware(engine, settings.timezone))
    dp.include_router(deadlines_router)

    logger.info("Starting polling")
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()


async def main() -> None:
    settings = load_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db_path = settings.db_path
    db_path.parent.mkdir(parents=True, exist_ok=True)
    logger.info("DB_PATH: %s", db_path)

    db = Database(str(db_path))
    clock = SystemClock(settings.timezone)
    ids = UuidGenerator()

    await apply_migrations(db=db, now_iso=to_iso(clock.now()))

    store = DeadlinesSqliteRepo(db)
    engine = DeadlineEngine(
        store=store,
        clock=clock,
        ids=ids,
        cutoff_year=settings.holiday_cutoff_year,
        alert_horizon_days=settings.alert_horizon_days,
    )

    refresh = RefreshJob(engine, store, RefreshConfig(interval_seconds=settings.refresh_interval_seconds))
    refresh_task = asyncio.create_task(refresh.run_forever())

    try:
        if settings.bot_enabled:
            await _run_bot(settings, engine)
        else:
            logger.info("BOT_TOKEN/OWNER_TELEGRAM_ID not set, running refresh job only")
            await refresh_task
    finally:
        refresh.stop()
        refresh_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await refresh_task
        logger.info("Shutdown complete")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
