"""
What a requester may see of a paste.

    absent / expired      -> NotFound (same answer for both)
    no password, text     -> content inline
    no password, file     -> "download available", no token needed
    password, wrong/empty -> AuthenticationRequired("Invalid password")
    password, text        -> content inline, nothing remembered
    password, file        -> short-lived download token scoped to the paste

The download endpoint re-checks liveness and, for protected files, the
token. Token failures all collapse into one message.
"""
import enum
import logging
from dataclasses import dataclass
from pathlib import Path

from pastebin.config import Settings
from pastebin.core.errors import AuthenticationRequired, NotFound
from pastebin.core.security import create_download_token, verify_download_token
from pastebin.models.paste import Paste, PasteKind
from pastebin.services.paste_store import PasteStore

log = logging.getLogger(__name__)

INVALID_PASSWORD = "Invalid password"
INVALID_TOKEN = "Invalid or expired download token. Please verify password again."


class DisclosureState(str, enum.Enum):
    PUBLIC_TEXT = "public_text"
    PUBLIC_FILE = "public_file"
    GATED_UNVERIFIED = "gated_unverified"
    GATED_VERIFIED = "gated_verified"


@dataclass
class Disclosure:
    state: DisclosureState
    paste: Paste
    download_token: str | None = None

    def as_response(self) -> dict:
        if self.paste.kind == PasteKind.TEXT.value:
            return {"content": self.paste.content}
        return {
            "download": True,
            "filename": self.paste.original_filename,
            "download_token": self.download_token,
        }


@dataclass
class DownloadGrant:
    paste: Paste
    path: Path


class ContentDisclosure:

    def __init__(self, store: PasteStore, settings: Settings):
        self.store = store
        self.settings = settings

    @staticmethod
    def initial_state(paste: Paste) -> DisclosureState:
        if paste.has_password:
            return DisclosureState.GATED_UNVERIFIED
        if paste.kind == PasteKind.FILE.value:
            return DisclosureState.PUBLIC_FILE
        return DisclosureState.PUBLIC_TEXT

    async def unlock(self, paste_id: str, password: str | None = None) -> Disclosure:
        paste = await self.store.get(paste_id)
        state = self.initial_state(paste)
        if state is not DisclosureState.GATED_UNVERIFIED:
            return Disclosure(state=state, paste=paste)

        if not await self.store.matches_password(paste, password):
            raise AuthenticationRequired(INVALID_PASSWORD)

        token = None
        if paste.kind == PasteKind.FILE.value:
            token = create_download_token(paste.id, self.settings)
        return Disclosure(state=DisclosureState.GATED_VERIFIED, paste=paste, download_token=token)

    async def authorize_download(self, paste_id: str, token: str | None = None) -> DownloadGrant:
        paste = await self.store.get(paste_id)
        if paste.kind != PasteKind.FILE.value:
            raise NotFound("File not found")
        if paste.has_password and not verify_download_token(token, paste.id, self.settings):
            raise AuthenticationRequired(INVALID_TOKEN)

        path = self.store.storage.path(key=paste.storage_key)
        if not path.is_file():
            log.error(f"[download] paste {paste.id} has no backing file {paste.storage_key}")
            raise NotFound("File not found")
        return DownloadGrant(paste=paste, path=path)
