from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from pastebin.database import Base


class SiteSetting(Base):
    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String, primary_key=True)
    value: Mapped[str | None] = mapped_column(String, nullable=True)
