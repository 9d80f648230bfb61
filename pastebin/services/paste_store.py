"""
Persistent record of pastes.

Liveness is never stored: every read compares ``expires_at`` against the
store's clock, so a paste disappears the instant it expires even if the
sweeper has not reached it yet.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import PurePath
from typing import BinaryIO, Callable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from starlette.concurrency import run_in_threadpool

from pastebin.core.errors import AuthorizationDenied, Conflict, NotFound, ValidationError
from pastebin.core.identifiers import new_memorable_password, new_paste_id
from pastebin.core.security import hash_password, verify_password
from pastebin.database import utcnow
from pastebin.models.paste import Paste, PasteKind
from pastebin.models.user import User
from pastebin.schemas.paste import PasteCreate
from pastebin.services.site_settings import Limits
from pastebin.storage.local import LocalStorage, UploadTooLarge

log = logging.getLogger(__name__)

MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


@dataclass
class CreatedPaste:
    paste: Paste
    generated_password: str | None = None


def default_name(kind: PasteKind, now: datetime) -> str:
    """'Text Dec 15 18:04' in server local time."""
    local = now.astimezone()
    label = "File" if kind is PasteKind.FILE else "Text"
    return f"{label} {MONTHS[local.month - 1]} {local.day} {local:%H:%M}"


def _format_mb(limit_bytes: int) -> str:
    return f"{limit_bytes / (1024 * 1024):g}MB"


class PasteStore:

    def __init__(
        self,
        session: AsyncSession,
        storage: LocalStorage,
        *,
        blocked_extensions: list[str] | tuple[str, ...] = (),
        clock: Callable[[], datetime] = utcnow,
    ):
        self.session = session
        self.storage = storage
        self.blocked_extensions = {ext.lower() for ext in blocked_extensions}
        self.clock = clock

    # ------------- create -------------

    def _expiry(self, days: float | None, limits: Limits, now: datetime) -> datetime | None:
        if days is None or days <= 0:
            return None
        if days > limits.max_expiration_days:
            raise ValidationError(f"Expiration cannot exceed {limits.max_expiration_days} days")
        return now + timedelta(days=days)

    async def _password(self, draft: PasteCreate) -> tuple[str | None, str | None]:
        """Returns (hash, plaintext to hand back once)."""
        if draft.password_option == "random":
            generated = new_memorable_password()
            return await run_in_threadpool(hash_password, generated), generated
        if draft.password_option == "custom" and draft.custom_password:
            return await run_in_threadpool(hash_password, draft.custom_password), None
        # "default" was retired and behaves like "none"
        return None, None

    def _check_filename(self, filename: str) -> None:
        ext = PurePath(filename).suffix.lower()
        if ext and ext in self.blocked_extensions:
            raise ValidationError(f"File type {ext} is not allowed for security reasons")

    async def create(
        self,
        owner: User,
        draft: PasteCreate,
        limits: Limits,
        *,
        upload: BinaryIO | None = None,
        filename: str | None = None,
    ) -> CreatedPaste:
        now = self.clock()
        owner_id = owner.id
        kind = PasteKind.FILE if upload is not None else PasteKind.TEXT

        if kind is PasteKind.TEXT:
            if not draft.content:
                raise ValidationError("Content required for text paste")
            size = len(draft.content.encode("utf-8"))
            if size > limits.max_file_size_bytes:
                raise ValidationError(f"Content exceeds maximum size of {_format_mb(limits.max_file_size_bytes)}")
        else:
            filename = PurePath(filename or "").name
            if not filename:
                raise ValidationError("Uploaded file has no name")
            self._check_filename(filename)

        expires_at = self._expiry(draft.expires_in, limits, now)

        staged = None
        if kind is PasteKind.FILE:
            try:
                staged = await run_in_threadpool(self.storage.stage, upload, max_bytes=limits.max_file_size_bytes)
            except UploadTooLarge:
                raise ValidationError(f"File exceeds maximum size of {_format_mb(limits.max_file_size_bytes)}")
            size = staged.size

        try:
            password_hash, generated = await self._password(draft)
            paste = Paste(
                id=new_paste_id(),
                owner_id=owner_id,
                name=(draft.name or "").strip() or default_name(kind, now),
                kind=kind.value,
                content=draft.content if kind is PasteKind.TEXT else None,
                storage_key=staged.key if staged else None,
                original_filename=filename if staged else None,
                password_hash=password_hash,
                expires_at=expires_at,
                created_at=now,
                size=size,
            )
            self.session.add(paste)
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            if staged:
                await run_in_threadpool(self.storage.discard, key=staged.key)
            log.error(f"[paste] insert rejected by constraints, possible id collision (owner={owner_id})")
            raise Conflict()
        except BaseException:
            if staged:
                await run_in_threadpool(self.storage.discard, key=staged.key)
            raise

        log.info(f"[paste] created id={paste.id} type={paste.kind} size={paste.size} owner={owner_id}")
        return CreatedPaste(paste=paste, generated_password=generated)

    # ------------- read -------------

    async def _fetch(self, paste_id: str) -> Paste | None:
        result = await self.session.execute(
            select(Paste).options(selectinload(Paste.owner)).where(Paste.id == paste_id)
        )
        return result.scalar_one_or_none()

    async def get(self, paste_id: str) -> Paste:
        paste = await self._fetch(paste_id)
        if paste is None or not paste.is_live(self.clock()):
            raise NotFound()
        return paste

    async def list_live_for_owner(self, owner_id: int) -> list[Paste]:
        now = self.clock()
        result = await self.session.execute(
            select(Paste)
            .where(Paste.owner_id == owner_id)
            .where((Paste.expires_at.is_(None)) | (Paste.expires_at > now))
            .order_by(Paste.created_at.desc())
        )
        return list(result.scalars())

    @staticmethod
    async def matches_password(paste: Paste, candidate: str | None) -> bool:
        if not paste.password_hash or not candidate:
            return False
        return await run_in_threadpool(verify_password, candidate, paste.password_hash)

    async def verify_password(self, paste_id: str, candidate: str | None) -> bool:
        paste = await self.get(paste_id)
        return await self.matches_password(paste, candidate)

    # ------------- delete -------------

    async def remove_backing_file(self, paste: Paste) -> None:
        if not paste.storage_key:
            return
        try:
            await run_in_threadpool(self.storage.delete, key=paste.storage_key)
        except FileNotFoundError:
            log.warning(f"[paste] backing file for {paste.id} already missing")

    async def delete(self, paste_id: str, requester: User) -> None:
        paste = await self._fetch(paste_id)
        if paste is None:
            raise NotFound()
        if paste.owner_id != requester.id and not requester.is_admin:
            if not paste.is_live(self.clock()):
                raise NotFound()
            raise AuthorizationDenied()

        # file first: an interrupted delete leaves a row the sweeper retries
        await self.remove_backing_file(paste)
        result = await self.session.execute(delete(Paste).where(Paste.id == paste_id))
        await self.session.commit()
        if result.rowcount == 0:
            raise NotFound()
        log.info(f"[paste] deleted id={paste_id} by user={requester.id}")

    async def purge_files_of_owner(self, owner_id: int) -> None:
        """Drop backing files before an owner's rows go away by cascade."""
        result = await self.session.execute(
            select(Paste).where(Paste.owner_id == owner_id).where(Paste.storage_key.is_not(None))
        )
        for paste in result.scalars():
            try:
                await self.remove_backing_file(paste)
            except OSError:
                log.exception(f"[paste] could not remove file of {paste.id}")
