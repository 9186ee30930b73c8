"""Label identity printed in the masthead of generated contracts."""

from typing import Optional
from uuid import uuid4

from sqlalchemy import String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from royalty_docs.core.database import Base


class LabelSettings(Base):
    """
    Single-row table maintained by the back office. Only the columns a
    contract masthead needs are mapped here.
    """

    __tablename__ = "label_settings"

    id: Mapped[UUID] = mapped_column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    label_name: Mapped[str] = mapped_column(String(255), nullable=False)

    address_line1: Mapped[Optional[str]] = mapped_column(String(255))
    address_line2: Mapped[Optional[str]] = mapped_column(String(255))
    postal_code: Mapped[Optional[str]] = mapped_column(String(20))
    city: Mapped[Optional[str]] = mapped_column(String(100))
    country: Mapped[Optional[str]] = mapped_column(String(100))

    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(50))

    def address_lines(self) -> list[str]:
        """Non-empty postal address lines, "<postal code> <city>" before the country."""
        city = " ".join(p for p in (self.postal_code, self.city) if p)
        lines = [self.address_line1, self.address_line2, city, self.country]
        return [line for line in lines if line]

    def __repr__(self) -> str:
        return f"<LabelSettings {self.label_name}>"
