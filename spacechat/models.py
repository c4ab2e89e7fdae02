from datetime import datetime

from sqlalchemy import JSON, DateTime, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class KeyValueEntry(Base):
    __tablename__ = "kv_entries"
    key: Mapped[str] = mapped_column(String(255), primary_key=True)

    # conversations, registration drafts and space records all live here as JSON
    value: Mapped[dict] = mapped_column(JSON().with_variant(JSONB(), "postgresql"))

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
