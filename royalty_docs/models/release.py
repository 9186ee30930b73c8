"""Release and demo models referenced by contracts."""
import uuid
from datetime import datetime, date

from sqlalchemy import String, DateTime, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from royalty_docs.core.database import Base, utc_now


class Release(Base):
    """Published release (single, EP or album)."""

    __tablename__ = "releases"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(500), nullable=False)
    artist_name: Mapped[str] = mapped_column(String(500), nullable=True)
    genre: Mapped[str] = mapped_column(String(100), nullable=True)
    # single / ep / album
    release_type: Mapped[str] = mapped_column(String(50), nullable=True)
    release_date: Mapped[date] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Release {self.id} name={self.name}>"


class Demo(Base):
    """Unreleased demo submission."""

    __tablename__ = "demos"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    genre: Mapped[str] = mapped_column(String(100), nullable=True)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Demo {self.id} title={self.title}>"
