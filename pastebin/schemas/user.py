from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict


class LoginRequest(BaseModel):
    username: str
    password: str


class RegisterRequest(BaseModel):
    username: str
    password: str = Field(min_length=1)
    invite_code: str = Field(alias="inviteCode")


class UserRead(BaseModel):
    id: int
    username: str
    is_admin: bool

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    token: str
    user: UserRead


class PublicUser(BaseModel):
    username: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminUserRead(UserRead):
    created_at: datetime
    paste_count: int


class AdminUserUpdate(BaseModel):
    reset_password: bool = Field(default=False, alias="resetPassword")
    is_admin: bool | None = Field(default=None, alias="isAdmin")


class SettingsUpdate(BaseModel):
    homepage_type: Literal["user_list", "user_page"] | None = None
    homepage_user: str | None = None
    max_expiration_days: int | None = Field(default=None, ge=1, le=365)
    max_file_size_mb: int | None = Field(default=None, ge=1, le=100)


class InviteCodeRead(BaseModel):
    id: int
    code: str
    created_at: datetime
    disabled: bool
    created_by: str
    use_count: int
    used_by: list[str]


class InviteCodeUpdate(BaseModel):
    disabled: bool


class UserUnlockRequest(BaseModel):
    password: str | None = None


class UserUnlockResponse(TokenResponse):
    success: bool = True
