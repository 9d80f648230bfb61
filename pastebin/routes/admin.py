from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pastebin.core.deps_paste import get_paste_store
from pastebin.core.errors import NotFound, ValidationError
from pastebin.core.rbac import require_role
from pastebin.database import get_async_session
from pastebin.models.invite_code import InviteCode, InviteCodeUse
from pastebin.schemas.user import AdminUserRead, AdminUserUpdate, InviteCodeRead, InviteCodeUpdate, SettingsUpdate
from pastebin.services import accounts, site_settings
from pastebin.services.paste_store import PasteStore

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
)

require_admin = require_role("admin")


#-----------Users--------------------

@router.get("/users", response_model=list[AdminUserRead])
async def list_users(
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    rows = await accounts.list_users(session)
    return [
        AdminUserRead(
            id=user.id,
            username=user.username,
            is_admin=user.is_admin,
            created_at=user.created_at,
            paste_count=count,
        )
        for user, count in rows
    ]


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    session: AsyncSession = Depends(get_async_session),
    store: PasteStore = Depends(get_paste_store),
    admin = Depends(require_admin),
):
    if user_id == admin.id:
        raise ValidationError("Cannot delete yourself")
    user = await accounts.get_user(session, user_id)

    # rows go by cascade, files have to be removed by hand
    await store.purge_files_of_owner(user.id)
    await accounts.delete_user(session, user.id)
    return {"success": True}


@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    payload: AdminUserUpdate,
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    user = await accounts.get_user(session, user_id)

    new_password = None
    if payload.reset_password:
        new_password = await accounts.reset_password(session, user)

    if payload.is_admin is not None and user.id != admin.id:
        user.role = "admin" if payload.is_admin else "user"
        await session.commit()

    return {"success": True, "newPassword": new_password}


#-----------Settings--------------------

@router.get("/settings")
async def get_settings(
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    return await site_settings.read_all(session)


@router.put("/settings")
async def update_settings(
    payload: SettingsUpdate,
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    if payload.homepage_user:
        if await accounts.get_by_username(session, payload.homepage_user) is None:
            raise ValidationError("User not found")

    for key, value in payload.model_dump(exclude_none=True).items():
        await site_settings.put(session, key, str(value))
    await session.commit()
    return {"success": True}


#-----------Invite codes--------------------

@router.post("/invite-codes")
async def create_invite_code(
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    invite = await accounts.create_invite(session, admin)
    return {"code": invite.code}


@router.get("/invite-codes", response_model=list[InviteCodeRead])
async def list_invite_codes(
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    result = await session.execute(
        select(InviteCode)
        .options(
            selectinload(InviteCode.creator),
            selectinload(InviteCode.uses).selectinload(InviteCodeUse.user),
        )
        .order_by(InviteCode.created_at.desc())
    )
    return [
        InviteCodeRead(
            id=code.id,
            code=code.code,
            created_at=code.created_at,
            disabled=code.disabled,
            created_by=code.creator.username,
            use_count=len(code.uses),
            used_by=[use.user.username for use in code.uses],
        )
        for code in result.scalars()
    ]


async def _invite_or_404(session: AsyncSession, code_id: int) -> InviteCode:
    invite = await session.get(InviteCode, code_id)
    if invite is None:
        raise NotFound("Code not found")
    return invite


@router.put("/invite-codes/{code_id}")
async def toggle_invite_code(
    code_id: int,
    payload: InviteCodeUpdate,
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    invite = await _invite_or_404(session, code_id)
    invite.disabled = payload.disabled
    await session.commit()
    return {"success": True, "disabled": payload.disabled}


@router.delete("/invite-codes/{code_id}")
async def delete_invite_code(
    code_id: int,
    session: AsyncSession = Depends(get_async_session),
    admin = Depends(require_admin),
):
    invite = await _invite_or_404(session, code_id)
    await session.delete(invite)
    await session.commit()
    return {"success": True}
