from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from pastebin.config import Settings
from pastebin.core.errors import AuthenticationRequired
from pastebin.core.security import ACCESS_TOKEN, decode_token
from pastebin.database import get_async_session
from pastebin.models.user import User
from pastebin.storage.local import LocalStorage

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> LocalStorage:
    return request.app.state.storage


async def get_current_user(
        token: str | None = Depends(oauth2_scheme),
        session: AsyncSession = Depends(get_async_session),
        settings: Settings = Depends(get_settings),
) -> User:
    if not token:
        raise AuthenticationRequired()

    payload = decode_token(token, settings)
    # download tokens are signed with the same key; never accept them here
    if not payload or payload.get("type") != ACCESS_TOKEN:
        raise AuthenticationRequired("Invalid token")

    user_id = payload.get("sub")
    if not user_id or not user_id.isdigit():
        raise AuthenticationRequired("Invalid token payload")

    user = await session.get(User, int(user_id))
    if not user:
        raise AuthenticationRequired("User not found")

    return user
