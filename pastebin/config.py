from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BLOCKED_EXTENSIONS = [
    ".exe", ".bat", ".cmd", ".sh", ".ps1", ".vbs", ".js",
    ".html", ".htm", ".svg", ".php", ".asp", ".aspx", ".jsp",
]


class Settings(BaseSettings):
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    DOWNLOAD_TOKEN_EXPIRE_MINUTES: int = 5

    DATABASE_URL: str | None = None
    DB_HOST: str | None = None
    DB_PORT: int = 5432
    DB_USER: str | None = None
    DB_PASS: str | None = None
    DB_NAME: str | None = None

    DATA_DIR: Path = Path("data")
    UPLOAD_DIR: Path = Path("uploads")
    BLOCKED_EXTENSIONS: list[str] = DEFAULT_BLOCKED_EXTENSIONS

    ADMIN_USERNAME: str = "admin"
    ADMIN_PASSWORD: str | None = None

    SWEEP_INTERVAL_SECONDS: int = 60 * 60
    SWEEP_IN_PROCESS: bool = True
    CELERY_BROKER_URL: str = "memory://"

    LOG_LEVEL: str = "INFO"

    @property
    def database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL
        if self.DB_HOST:
            return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASS}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        return f"sqlite+aiosqlite:///{(self.DATA_DIR / 'pastebin.db').as_posix()}"

    model_config = SettingsConfigDict(env_file=".env")

settings = Settings()
