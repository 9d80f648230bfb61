from datetime import datetime
from typing import Literal

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic.config import ConfigDict


class PasteCreate(BaseModel):
    name: str | None = None
    content: str | None = None
    expires_in: float | None = Field(default=None, alias="expiresIn", allow_inf_nan=False)
    password_option: Literal["none", "default", "random", "custom"] = Field(default="none", alias="passwordOption")
    custom_password: str | None = Field(default=None, alias="customPassword")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("expires_in", "password_option", mode="before")
    @classmethod
    def _blank_is_missing(cls, value, info):
        # html forms send "" for untouched fields
        if isinstance(value, str) and not value.strip():
            return "none" if info.field_name == "password_option" else None
        return value


class PasteSummary(BaseModel):
    id: str
    name: str
    type: str = Field(validation_alias=AliasChoices("type", "kind"))
    size: int
    expires_at: datetime | None = None
    has_password: bool

    model_config = ConfigDict(from_attributes=True)


class PasteListItem(PasteSummary):
    created_at: datetime


class PasteCreated(BaseModel):
    success: bool = True
    paste: PasteSummary
    generated_password: str | None = Field(default=None, alias="generatedPassword")

    model_config = ConfigDict(populate_by_name=True)


class PasteMeta(BaseModel):
    id: str
    name: str
    username: str
    type: str
    size: int
    created_at: datetime
    expires_at: datetime | None = None
    has_password: bool
    original_filename: str | None = None


class VerifyRequest(BaseModel):
    password: str | None = None


class UnlockResponse(BaseModel):
    content: str | None = None
    download: bool | None = None
    filename: str | None = None
    download_token: str | None = Field(default=None, alias="downloadToken")

    model_config = ConfigDict(populate_by_name=True)
