from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt

from pastebin.config import Settings

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=10)

ACCESS_TOKEN = "access"
DOWNLOAD_TOKEN = "download"

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

def _encode(payload: dict, settings: Settings, expires_delta: timedelta) -> str:
    to_encode = payload.copy()
    to_encode.update({"exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_access_token(user_id: int, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode({"sub": str(user_id), "type": ACCESS_TOKEN}, settings, expires_delta)

def create_download_token(paste_id: str, settings: Settings, expires_delta: Optional[timedelta] = None) -> str:
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.DOWNLOAD_TOKEN_EXPIRE_MINUTES)
    return _encode({"sub": paste_id, "type": DOWNLOAD_TOKEN}, settings, expires_delta)

def decode_token(token: str, settings: Settings) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

def verify_download_token(token: str | None, paste_id: str, settings: Settings) -> bool:
    if not token:
        return False
    payload = decode_token(token, settings)
    if not payload:
        return False
    return payload.get("type") == DOWNLOAD_TOKEN and payload.get("sub") == paste_id
