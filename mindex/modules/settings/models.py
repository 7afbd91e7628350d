"""SQLAlchemy model for key/value settings."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ...infrastructure.database.session import Base


class Setting(Base):
    """A persisted user preference stored as text."""

    __tablename__ = "settings"

    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    value: Mapped[str] = mapped_column(Text)
