import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.exceptions import HTTPException as StarletteHTTPException

from pastebin.config import Settings, settings as default_settings
from pastebin.core.errors import Conflict, InternalFailure, PastebinError
from pastebin.database import Database, get_async_session, utcnow
from pastebin.models.invite_code import InviteCode, InviteCodeUse  # noqa: F401  registers tables
from pastebin.models.paste import Paste
from pastebin.models.site_setting import SiteSetting  # noqa: F401
from pastebin.models.user import User
from pastebin.routes.admin import router as admin_router
from pastebin.routes.auth import router as auth_router
from pastebin.routes.pastes import router as paste_router
from pastebin.routes.users import router as user_router
from pastebin.services import accounts, site_settings
from pastebin.services.sweeper import ExpirationSweeper
from pastebin.storage.local import LocalStorage

log = logging.getLogger(__name__)


async def _bootstrap(app: FastAPI) -> None:
    settings: Settings = app.state.settings
    db: Database = app.state.db

    database = db.engine.url.database
    if db.engine.dialect.name == "sqlite" and database and database != ":memory:":
        Path(database).parent.mkdir(parents=True, exist_ok=True)
    app.state.storage.ensure_root()
    await db.create_all()

    async with db.session_maker() as session:
        await site_settings.seed_defaults(session)
        await accounts.ensure_admin(session, settings.ADMIN_USERNAME, settings.ADMIN_PASSWORD)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await _bootstrap(app)
    sweeper: ExpirationSweeper = app.state.sweeper
    if app.state.settings.SWEEP_IN_PROCESS:
        sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()
        await app.state.db.dispose()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(PastebinError)
    async def pastebin_error(request: Request, exc: PastebinError):
        if isinstance(exc, (Conflict, InternalFailure)):
            log.error(f"[api] {request.method} {request.url.path} failed: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        field = ".".join(str(part) for part in errors[0]["loc"][1:]) if errors else ""
        return _error(400, f"Invalid value for {field}" if field else "Invalid request")

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        log.exception(f"[api] unhandled error on {request.method} {request.url.path}")
        return _error(500, InternalFailure.message)


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(
        level=settings.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(title="pastebin", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = Database(settings.database_url)
    app.state.storage = LocalStorage(settings.UPLOAD_DIR)
    app.state.sweeper = ExpirationSweeper(
        app.state.db,
        app.state.storage,
        interval=settings.SWEEP_INTERVAL_SECONDS,
    )

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(paste_router)
    app.include_router(user_router)
    app.include_router(admin_router)
    app.add_api_route("/api/homepage", homepage, methods=["GET"])
    return app


async def homepage(session: AsyncSession = Depends(get_async_session)):
    values = await site_settings.read_all(session)
    homepage_type = values.get("homepage_type")

    if homepage_type == "user_page" and values.get("homepage_user"):
        return {"type": "redirect", "username": values["homepage_user"]}
    if homepage_type != "user_list":
        return {"type": "user_list", "users": []}

    now = utcnow()
    live_count = (
        select(func.count(Paste.id))
        .where(Paste.owner_id == User.id)
        .where((Paste.expires_at.is_(None)) | (Paste.expires_at > now))
        .correlate(User)
        .scalar_subquery()
    )
    result = await session.execute(
        select(User.username, User.created_at, live_count)
        .where(User.role != "admin")
        .order_by(User.created_at.desc())
    )
    return {
        "type": "user_list",
        "users": [
            {"username": username, "created_at": created_at, "paste_count": count}
            for username, created_at, count in result.all()
        ],
    }


app = create_app()
