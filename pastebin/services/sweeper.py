import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from pastebin.database import Database, utcnow
from pastebin.models.paste import Paste
from pastebin.storage.local import LocalStorage

log = logging.getLogger(__name__)


class ExpirationSweeper:
    """
        Reclaims expired pastes: backing file first, then the row.

        A failure on one paste is logged and the pass moves on. Rows whose
        file delete failed are still removed; rows whose delete failed stay
        and are picked up by the next pass.
    """

    def __init__(
        self,
        db: Database,
        storage: LocalStorage,
        *,
        interval: float = 3600,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.storage = storage
        self.interval = interval
        self.clock = clock
        self._scheduler: AsyncIOScheduler | None = None
        self._pass: asyncio.Task | None = None

    async def _remove_file(self, paste_id: str, key: str) -> None:
        try:
            await run_in_threadpool(self.storage.delete, key=key)
        except FileNotFoundError:
            log.warning(f"[sweeper] file {key} of paste {paste_id} already missing")
        except OSError:
            log.exception(f"[sweeper] failed to delete file {key} of paste {paste_id}")

    async def run_once(self) -> int:
        now = self.clock()
        deleted = 0
        async with self.db.session_maker() as session:
            result = await session.execute(
                select(Paste.id, Paste.storage_key)
                .where(Paste.expires_at.is_not(None))
                .where(Paste.expires_at < now)
            )
            expired = result.all()

            for paste_id, storage_key in expired:
                if storage_key:
                    await self._remove_file(paste_id, storage_key)
                try:
                    outcome = await session.execute(delete(Paste).where(Paste.id == paste_id))
                    await session.commit()
                except SQLAlchemyError:
                    await session.rollback()
                    log.exception(f"[sweeper] failed to delete paste {paste_id}")
                    continue
                # a concurrent delete may already have taken the row
                deleted += outcome.rowcount

        if deleted:
            log.info(f"[sweeper] deleted {deleted} expired paste(s)")
        return deleted

    async def _scheduled_pass(self) -> None:
        self._pass = asyncio.current_task()
        try:
            await self.run_once()
        except Exception:
            log.exception("[sweeper] pass failed")
        finally:
            self._pass = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def start(self) -> None:
        """First pass runs right away, then every `interval` seconds."""
        if self.running:
            return
        self._scheduler = AsyncIOScheduler(timezone=timezone.utc)
        self._scheduler.add_job(
            func=self._scheduled_pass,
            trigger="interval",
            seconds=self.interval,
            id="sweep_expired_pastes",
            name="Sweep expired pastes",
            next_run_time=datetime.now(timezone.utc),
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()

    async def stop(self) -> None:
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None

        # shutdown does not touch a pass already in flight
        in_flight, self._pass = self._pass, None
        if in_flight is not None:
            in_flight.cancel()
            try:
                await in_flight
            except asyncio.CancelledError:
                pass
