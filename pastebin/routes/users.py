from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pastebin.config import Settings
from pastebin.core.deps import get_settings
from pastebin.core.deps_paste import get_paste_store
from pastebin.core.errors import AuthenticationRequired, NotFound, ValidationError
from pastebin.core.security import create_access_token
from pastebin.database import get_async_session
from pastebin.schemas.paste import PasteListItem
from pastebin.schemas.user import PublicUser, UserRead, UserUnlockRequest, UserUnlockResponse
from pastebin.services import accounts
from pastebin.services.paste_store import PasteStore

router = APIRouter(
    prefix="/api/users",
    tags=["Users"]
)


@router.get("/{username}")
async def user_page(
    username: str,
    session: AsyncSession = Depends(get_async_session),
    store: PasteStore = Depends(get_paste_store),
):
    user = await accounts.get_by_username(session, username)
    if user is None:
        raise NotFound("User not found")

    pastes = await store.list_live_for_owner(user.id)
    return {
        "user": PublicUser.model_validate(user),
        "pastes": [PasteListItem.model_validate(p) for p in pastes],
    }


@router.post("/{username}/unlock", response_model=UserUnlockResponse)
async def unlock_user_page(
    username: str,
    payload: UserUnlockRequest | None = None,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    """Owner signs in from their own page; same token as /api/auth/login."""
    if payload is None or not payload.password:
        raise ValidationError("Password required")
    if await accounts.get_by_username(session, username) is None:
        raise NotFound("User not found")

    user = await accounts.authenticate(session, username, payload.password)
    if user is None:
        raise AuthenticationRequired("Invalid password")

    return UserUnlockResponse(
        token=create_access_token(user.id, settings),
        user=UserRead.model_validate(user),
    )
