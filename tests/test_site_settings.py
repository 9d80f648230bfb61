import pytest

from pastebin.services import site_settings
from pastebin.services.site_settings import Limits, resolve_limits


async def test_defaults_when_unset(session):
    assert await resolve_limits(session) == Limits(max_file_size_bytes=10 * 1024 * 1024, max_expiration_days=30)


async def test_seeded_values(session):
    await site_settings.seed_defaults(session)
    values = await site_settings.read_all(session)

    assert values == {
        "homepage_type": "user_list",
        "homepage_user": "",
        "max_expiration_days": "30",
        "max_file_size_mb": "10",
    }


async def test_seed_keeps_existing_values(session):
    await site_settings.put(session, "max_file_size_mb", "50")
    await session.commit()
    await site_settings.seed_defaults(session)

    assert (await site_settings.read_all(session))["max_file_size_mb"] == "50"


@pytest.mark.parametrize("raw_size, raw_days", [("abc", "soon"), ("0", "-3"), ("", "2.5")])
async def test_unparsable_values_fall_back(session, raw_size, raw_days):
    await site_settings.put(session, "max_file_size_mb", raw_size)
    await site_settings.put(session, "max_expiration_days", raw_days)
    await session.commit()

    limits = await resolve_limits(session)
    assert limits.max_file_size_bytes == 10 * 1024 * 1024
    assert limits.max_expiration_days == 30


async def test_changes_are_seen_on_next_resolve(session):
    await site_settings.seed_defaults(session)
    assert (await resolve_limits(session)).max_expiration_days == 30

    await site_settings.put(session, "max_expiration_days", "7")
    await site_settings.put(session, "max_file_size_mb", "2")
    await session.commit()

    limits = await resolve_limits(session)
    assert limits.max_expiration_days == 7
    assert limits.max_file_size_bytes == 2 * 1024 * 1024
