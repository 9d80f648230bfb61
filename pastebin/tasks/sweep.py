import asyncio
import logging

from celery import shared_task

from pastebin.config import Settings, settings as default_settings
from pastebin.database import Database
from pastebin.services.sweeper import ExpirationSweeper
from pastebin.storage.local import LocalStorage

log = logging.getLogger(__name__)


async def run_sweep(settings: Settings) -> int:
    """One sweeper pass with its own engine, for use outside the web process."""
    db = Database(settings.database_url)
    try:
        sweeper = ExpirationSweeper(db, LocalStorage(settings.UPLOAD_DIR))
        return await sweeper.run_once()
    finally:
        await db.dispose()


@shared_task(name="pastebin.tasks.sweep.sweep_expired_pastes")
def sweep_expired_pastes():
    deleted = asyncio.run(run_sweep(default_settings))
    return {"ok": True, "deleted": deleted}
