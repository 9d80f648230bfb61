import enum
from datetime import datetime

from sqlalchemy import ForeignKey, String, Text, BigInteger, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from pastebin.database import Base, UTCDateTime, utcnow
from pastebin.models.user import User


class PasteKind(str, enum.Enum):
    TEXT = "text"
    FILE = "file"


class Paste(Base):
    __tablename__ = "pastes"
    __table_args__ = (
        CheckConstraint("type IN ('text', 'file')", name="ck_pastes_type"),
        CheckConstraint(
            "(type = 'text' AND content IS NOT NULL AND storage_key IS NULL)"
            " OR (type = 'file' AND storage_key IS NOT NULL AND content IS NULL)",
            name="ck_pastes_payload",
        ),
    )

    id: Mapped[str] = mapped_column(String(12), primary_key=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String, nullable=False)
    kind: Mapped[str] = mapped_column("type", String(8), nullable=False)
    content: Mapped[str | None] = mapped_column(Text, nullable=True)
    storage_key: Mapped[str | None] = mapped_column(String, unique=True, nullable=True)
    original_filename: Mapped[str | None] = mapped_column(String, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(String, nullable=True)
    expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime, index=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, default=utcnow, nullable=False)
    size: Mapped[int] = mapped_column(BigInteger, nullable=False)

    owner: Mapped[User] = relationship(back_populates="pastes")

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    def is_live(self, now: datetime) -> bool:
        # a paste expiring exactly at `now` is already gone
        return self.expires_at is None or now < self.expires_at
