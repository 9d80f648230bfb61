from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pastebin.config import Settings
from pastebin.core.deps import get_current_user, get_settings
from pastebin.core.errors import AuthenticationRequired
from pastebin.core.security import create_access_token
from pastebin.database import get_async_session
from pastebin.models.user import User
from pastebin.schemas.user import LoginRequest, RegisterRequest, TokenResponse, UserRead
from pastebin.services import accounts

router = APIRouter(
    prefix="/api/auth",
    tags=["Auth"]
)


@router.post("/login", response_model=TokenResponse)
async def login(
    credentials: LoginRequest,
    session: AsyncSession = Depends(get_async_session),
    settings: Settings = Depends(get_settings),
):
    user = await accounts.authenticate(session, credentials.username, credentials.password)
    if not user:
        raise AuthenticationRequired("Invalid credentials")

    return TokenResponse(
        token=create_access_token(user.id, settings),
        user=UserRead.model_validate(user),
    )


@router.post("/register")
async def register(payload: RegisterRequest, session: AsyncSession = Depends(get_async_session)):
    user = await accounts.register(session, payload.username, payload.password, payload.invite_code)
    return {
        "success": True,
        "message": "Registration successful",
        "user": {"id": user.id, "username": user.username},
    }


@router.get("/me", response_model=UserRead)
async def read_me(current_user: User = Depends(get_current_user)):
    return current_user
