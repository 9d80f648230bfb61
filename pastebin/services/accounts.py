import logging
import re

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from pastebin.core.errors import Conflict, NotFound, ValidationError
from pastebin.core.identifiers import new_memorable_password
from pastebin.core.security import hash_password, verify_password
from pastebin.models.invite_code import InviteCode, InviteCodeUse
from pastebin.models.paste import Paste
from pastebin.models.user import User

log = logging.getLogger(__name__)

USERNAME_RE = re.compile(r"^[A-Za-z0-9_-]{3,30}$")
RESERVED_USERNAMES = {"admin", "api", "static", "public", "register", "login"}


async def get_by_username(session: AsyncSession, username: str) -> User | None:
    result = await session.execute(select(User).where(User.username == username))
    return result.scalar_one_or_none()


async def authenticate(session: AsyncSession, username: str, password: str) -> User | None:
    user = await get_by_username(session, username)
    if user is None:
        return None
    if not await run_in_threadpool(verify_password, password, user.hashed_password):
        return None
    return user


async def ensure_admin(session: AsyncSession, username: str, password: str | None = None) -> str | None:
    """Create the bootstrap admin if missing. Returns the password when one was generated."""
    if await get_by_username(session, username) is not None:
        return None
    generated = None
    if not password:
        password = generated = new_memorable_password()
    session.add(User(
        username=username,
        hashed_password=await run_in_threadpool(hash_password, password),
        role="admin",
    ))
    await session.commit()

    log.warning("=" * 50)
    log.warning("Admin account created:")
    log.warning(f"  Username: {username}")
    if generated:
        log.warning(f"  Password: {generated}")
    log.warning("=" * 50)
    return generated


def validate_username(username: str) -> None:
    if not USERNAME_RE.match(username):
        raise ValidationError("Username must be 3-30 characters, alphanumeric, dash, or underscore only")
    if username.lower() in RESERVED_USERNAMES:
        raise ValidationError("This username is reserved")


async def register(session: AsyncSession, username: str, password: str, invite_code: str) -> User:
    validate_username(username)

    if await get_by_username(session, username) is not None:
        raise ValidationError("Username already taken")

    result = await session.execute(
        select(InviteCode).where(InviteCode.code == invite_code).where(InviteCode.disabled.is_(False))
    )
    invite = result.scalar_one_or_none()
    if invite is None:
        raise ValidationError("Invalid or disabled invite code")

    hashed = await run_in_threadpool(hash_password, password)
    try:
        # user row and its invite audit row land together or not at all
        user = User(username=username, hashed_password=hashed, role="user")
        session.add(user)
        await session.flush()
        session.add(InviteCodeUse(invite_code_id=invite.id, user_id=user.id))
        await session.commit()
    except IntegrityError:
        await session.rollback()
        raise ValidationError("Username already taken")

    log.info(f"[auth] registered {username} with invite {invite.id}")
    return user


# ------------- admin -------------

async def list_users(session: AsyncSession) -> list[tuple[User, int]]:
    paste_count = (
        select(func.count(Paste.id)).where(Paste.owner_id == User.id).correlate(User).scalar_subquery()
    )
    result = await session.execute(select(User, paste_count).order_by(User.created_at.desc()))
    return [(user, count) for user, count in result.all()]


async def get_user(session: AsyncSession, user_id: int) -> User:
    user = await session.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


async def delete_user(session: AsyncSession, user_id: int) -> None:
    await session.execute(delete(User).where(User.id == user_id))
    await session.commit()
    log.info(f"[admin] deleted user {user_id}")


async def reset_password(session: AsyncSession, user: User) -> str:
    password = new_memorable_password()
    user.hashed_password = await run_in_threadpool(hash_password, password)
    await session.commit()
    return password


INVITE_CODE_ATTEMPTS = 5


async def create_invite(session: AsyncSession, creator: User) -> InviteCode:
    creator_id = creator.id
    # ~7700 possible codes, repeats happen
    for _ in range(INVITE_CODE_ATTEMPTS):
        invite = InviteCode(code=new_memorable_password(), created_by=creator_id)
        session.add(invite)
        try:
            await session.commit()
        except IntegrityError:
            await session.rollback()
            continue
        return invite

    log.error(f"[admin] no free invite code after {INVITE_CODE_ATTEMPTS} attempts (creator={creator_id})")
    raise Conflict("Could not generate a unique invite code")
