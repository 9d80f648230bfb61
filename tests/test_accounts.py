import pytest

from pastebin.core.errors import Conflict
from pastebin.services import accounts


async def test_invite_code_collision_is_retried(session, admin, monkeypatch):
    codes = iter(["taken-code", "taken-code", "taken-code", "fresh-code"])
    monkeypatch.setattr(accounts, "new_memorable_password", lambda: next(codes))

    first = await accounts.create_invite(session, admin)
    assert first.code == "taken-code"

    second = await accounts.create_invite(session, admin)
    assert second.code == "fresh-code"


async def test_invite_code_space_exhausted(session, admin, monkeypatch, caplog):
    monkeypatch.setattr(accounts, "new_memorable_password", lambda: "always-same")
    await accounts.create_invite(session, admin)

    with pytest.raises(Conflict):
        await accounts.create_invite(session, admin)
    assert "no free invite code" in caplog.text
