from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pastebin.database import Base, UTCDateTime, utcnow
from pastebin.models.user import User


class InviteCode(Base):
    __tablename__ = "invite_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    code: Mapped[str] = mapped_column(String, unique=True, index=True, nullable=False)
    created_by: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    disabled: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    creator: Mapped[User] = relationship()
    uses: Mapped[list["InviteCodeUse"]] = relationship(
        back_populates="invite_code", passive_deletes=True, order_by="InviteCodeUse.used_at.desc()"
    )


class InviteCodeUse(Base):
    __tablename__ = "invite_code_uses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    invite_code_id: Mapped[int] = mapped_column(ForeignKey("invite_codes.id", ondelete="CASCADE"), index=True, nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    used_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)

    invite_code: Mapped[InviteCode] = relationship(back_populates="uses")
    user: Mapped[User] = relationship()
