from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pastebin.models.site_setting import SiteSetting

DEFAULT_MAX_FILE_SIZE_MB = 10
DEFAULT_MAX_EXPIRATION_DAYS = 30

DEFAULT_SETTINGS = {
    "homepage_type": "user_list",
    "homepage_user": "",
    "max_expiration_days": str(DEFAULT_MAX_EXPIRATION_DAYS),
    "max_file_size_mb": str(DEFAULT_MAX_FILE_SIZE_MB),
}


@dataclass(frozen=True)
class Limits:
    max_file_size_bytes: int
    max_expiration_days: int


def _positive_int(value: str | None, fallback: int) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return fallback
    return parsed if parsed > 0 else fallback


async def read_all(session: AsyncSession) -> dict[str, str]:
    result = await session.execute(select(SiteSetting))
    return {row.key: row.value or "" for row in result.scalars()}


async def resolve_limits(session: AsyncSession) -> Limits:
    """Current creation limits. Never cached: admins may change them at any time."""
    values = await read_all(session)
    max_mb = _positive_int(values.get("max_file_size_mb"), DEFAULT_MAX_FILE_SIZE_MB)
    return Limits(
        max_file_size_bytes=max_mb * 1024 * 1024,
        max_expiration_days=_positive_int(values.get("max_expiration_days"), DEFAULT_MAX_EXPIRATION_DAYS),
    )


async def put(session: AsyncSession, key: str, value: str) -> None:
    row = await session.get(SiteSetting, key)
    if row is None:
        session.add(SiteSetting(key=key, value=value))
    else:
        row.value = value


async def seed_defaults(session: AsyncSession) -> None:
    existing = await read_all(session)
    for key, value in DEFAULT_SETTINGS.items():
        if key not in existing:
            session.add(SiteSetting(key=key, value=value))
    await session.commit()
