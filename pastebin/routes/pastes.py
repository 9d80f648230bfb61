import json
from urllib.parse import quote

import pydantic
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import FileResponse
from starlette.datastructures import UploadFile

from pastebin.core.deps_paste import get_disclosure, get_limits, get_paste_store
from pastebin.core.errors import ValidationError
from pastebin.core.rbac import require_role
from pastebin.schemas.paste import PasteCreate, PasteCreated, PasteMeta, PasteSummary, UnlockResponse, VerifyRequest
from pastebin.services.disclosure import ContentDisclosure
from pastebin.services.paste_store import PasteStore
from pastebin.services.site_settings import Limits


router = APIRouter(
    prefix="/api/pastes",
    tags=["Pastes"]
)


def content_disposition(filename: str) -> str:
    """Plain ASCII `filename` for old clients plus RFC 5987 `filename*`."""
    fallback = "".join(
        ch if 0x20 <= ord(ch) < 0x7F and ch not in '"\\' else "_"
        for ch in filename
    )
    encoded = quote(filename, safe="").replace("'", "%27")
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{encoded}"


def _draft(raw: dict) -> PasteCreate:
    try:
        return PasteCreate.model_validate(raw)
    except pydantic.ValidationError as e:
        field = ".".join(str(part) for part in e.errors()[0]["loc"]) or "body"
        raise ValidationError(f"Invalid value for {field}")


# -------------Create-----------------

@router.post("", response_model=PasteCreated)
async def create_paste(
    request: Request,
    user = Depends(require_role("user")),
    store: PasteStore = Depends(get_paste_store),
    limits: Limits = Depends(get_limits),
):
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            raw = await request.json()
        except json.JSONDecodeError:
            raise ValidationError("Malformed JSON body")
        if not isinstance(raw, dict):
            raise ValidationError("Malformed JSON body")
        created = await store.create(user, _draft(raw), limits)
    else:
        async with request.form(max_part_size=limits.max_file_size_bytes) as form:
            upload = form.get("file")
            fields = {key: value for key, value in form.items() if isinstance(value, str)}
            draft = _draft(fields)
            if isinstance(upload, UploadFile) and upload.filename:
                created = await store.create(user, draft, limits, upload=upload.file, filename=upload.filename)
            else:
                created = await store.create(user, draft, limits)

    return PasteCreated(
        paste=PasteSummary.model_validate(created.paste),
        generated_password=created.generated_password,
    )


#-----------Metadata------------------

@router.get("/{paste_id}", response_model=PasteMeta)
async def paste_metadata(paste_id: str, store: PasteStore = Depends(get_paste_store)):
    paste = await store.get(paste_id)
    return PasteMeta(
        id=paste.id,
        name=paste.name,
        username=paste.owner.username,
        type=paste.kind,
        size=paste.size,
        created_at=paste.created_at,
        expires_at=paste.expires_at,
        has_password=paste.has_password,
        original_filename=paste.original_filename,
    )


#-----------Unlock------------------

@router.post("/{paste_id}/verify", response_model=UnlockResponse, response_model_exclude_none=True)
async def verify_paste(
    paste_id: str,
    payload: VerifyRequest | None = None,
    disclosure: ContentDisclosure = Depends(get_disclosure),
):
    unlocked = await disclosure.unlock(paste_id, payload.password if payload else None)
    return UnlockResponse(**unlocked.as_response())


#-----------Download------------------

@router.get("/{paste_id}/download")
async def download_paste(
    paste_id: str,
    token: str | None = Query(default=None),
    disclosure: ContentDisclosure = Depends(get_disclosure),
):
    grant = await disclosure.authorize_download(paste_id, token)
    return FileResponse(
        grant.path,
        media_type="application/octet-stream",
        headers={"Content-Disposition": content_disposition(grant.paste.original_filename or grant.paste.id)},
    )


#-----------Delete-------------

@router.delete("/{paste_id}")
async def delete_paste(
    paste_id: str,
    user = Depends(require_role("user")),
    store: PasteStore = Depends(get_paste_store),
):
    await store.delete(paste_id, user)
    return {"success": True}
