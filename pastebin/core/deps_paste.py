from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pastebin.config import Settings
from pastebin.core.deps import get_settings, get_storage
from pastebin.database import get_async_session
from pastebin.services.disclosure import ContentDisclosure
from pastebin.services.paste_store import PasteStore
from pastebin.services.site_settings import Limits, resolve_limits
from pastebin.storage.local import LocalStorage


def get_paste_store(
        session: AsyncSession = Depends(get_async_session),
        storage: LocalStorage = Depends(get_storage),
        settings: Settings = Depends(get_settings),
) -> PasteStore:
    return PasteStore(session, storage, blocked_extensions=settings.BLOCKED_EXTENSIONS)


def get_disclosure(
        store: PasteStore = Depends(get_paste_store),
        settings: Settings = Depends(get_settings),
) -> ContentDisclosure:
    return ContentDisclosure(store, settings)


async def get_limits(session: AsyncSession = Depends(get_async_session)) -> Limits:
    return await resolve_limits(session)
