"""Contract model for royalty splits."""
import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import String, DateTime, Numeric, ForeignKey, CheckConstraint, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from royalty_docs.core.database import Base, utc_now

if TYPE_CHECKING:
    from royalty_docs.models.artist import Artist
    from royalty_docs.models.contract_split import ContractSplit
    from royalty_docs.models.release import Release, Demo
    from royalty_docs.models.user import User


class ContractStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    TERMINATED = "terminated"


class Contract(Base):
    """
    Licensing agreement between the label and the contributors of a
    release (or an unreleased demo).

    Shares:
    - artist_share + label_share = 1 (gross revenue)
    - each split's percentage is a share of artist_share, not of gross

    Notes:
    - `notes` may start with an encoded ContractDetails block, see
      services.contract_meta
    - `featured_artists` is a JSON snapshot of contributors written by the
      drafting form; it carries legal/contact fields the split rows lack
    """

    __tablename__ = "contracts"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # What the contract covers (one of release / demo / free title)
    release_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("releases.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    demo_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("demos.id", ondelete="SET NULL"),
        nullable=True,
        unique=True,
    )
    title: Mapped[str] = mapped_column(String(500), nullable=True)

    # Who the contract belongs to
    artist_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("artists.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    # Fallback text fields when no profile is linked
    primary_artist_name: Mapped[str] = mapped_column(String(255), nullable=True)
    primary_artist_email: Mapped[str] = mapped_column(String(255), nullable=True)

    # Split percentages (must sum to 1.0)
    artist_share: Mapped[Decimal] = mapped_column(
        Numeric(precision=5, scale=4),  # 0.0000 to 1.0000
        nullable=False,
    )
    label_share: Mapped[Decimal] = mapped_column(
        Numeric(precision=5, scale=4),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        default=ContractStatus.ACTIVE.value,
        nullable=False,
    )

    # Relative pointer to the uploaded signed PDF (private/uploads/contracts/...)
    pdf_url: Mapped[str] = mapped_column(Text, nullable=True)
    notes: Mapped[str] = mapped_column(Text, nullable=True)
    featured_artists: Mapped[str] = mapped_column(Text, nullable=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    artist: Mapped["Artist"] = relationship("Artist", foreign_keys=[artist_id])
    release: Mapped["Release"] = relationship("Release")
    demo: Mapped["Demo"] = relationship("Demo")

    splits: Mapped[list["ContractSplit"]] = relationship(
        "ContractSplit",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="ContractSplit.created_at",
    )

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "artist_share >= 0 AND artist_share <= 1",
            name="check_artist_share_range",
        ),
        CheckConstraint(
            "label_share >= 0 AND label_share <= 1",
            name="check_label_share_range",
        ),
        CheckConstraint(
            "artist_share + label_share = 1",
            name="check_shares_sum_to_one",
        ),
    )

    def __repr__(self) -> str:
        return f"<Contract {self.id} release={self.release_id} share={self.artist_share}>"
