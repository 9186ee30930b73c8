"""User account model with legal and contact information."""
import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from royalty_docs.core.database import Base, utc_now


class UserRole(str, Enum):
    """Role of a user account."""
    ADMIN = "admin"
    AR = "a&r"
    ARTIST = "artist"


class User(Base):
    """Platform account. Artists fill legal/contact fields before signing."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    role: Mapped[str] = mapped_column(
        String(20),
        default=UserRole.ARTIST.value,
        nullable=False,
    )

    stage_name: Mapped[str] = mapped_column(String(255), nullable=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=True)

    # Legal information used on contracts
    legal_name: Mapped[str] = mapped_column(String(255), nullable=True)
    phone_number: Mapped[str] = mapped_column(String(50), nullable=True)
    address: Mapped[str] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User {self.id} email={self.email} role={self.role}>"
