"""Contract split model: one contributor's share of a contract's artist pool."""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import String, DateTime, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from royalty_docs.core.database import Base, utc_now

if TYPE_CHECKING:
    from royalty_docs.models.artist import Artist
    from royalty_docs.models.contract import Contract
    from royalty_docs.models.user import User


class ContractSplit(Base):
    """
    A contributor's percentage of the artist share of a contract.

    Percentages of a contract's splits should sum to 100. This is checked
    when contracts are written; readers must tolerate rows that don't.

    Example (artist_share = 0.7):
    - Main artist: 60  -> 42% of gross
    - Featured:    25  -> 17.5% of gross
    - Producer:    15  -> 10.5% of gross
    """

    __tablename__ = "contract_splits"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    contract_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("contracts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=True)

    # 0 to 100, percentage of the artist share
    percentage: Mapped[Decimal] = mapped_column(
        Numeric(precision=6, scale=3),
        nullable=False,
    )

    # Optional links to an account or artist profile
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    artist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("artists.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )

    # Relationships
    contract: Mapped["Contract"] = relationship(
        "Contract",
        back_populates="splits",
    )
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    artist: Mapped["Artist"] = relationship("Artist", foreign_keys=[artist_id])

    __table_args__ = (
        CheckConstraint(
            "percentage >= 0 AND percentage <= 100",
            name="check_split_percentage_range",
        ),
    )

    def __repr__(self) -> str:
        return f"<ContractSplit {self.id} name={self.name} percentage={self.percentage}>"
