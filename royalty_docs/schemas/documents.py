"""Schemas for contract document endpoints."""
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class ContributorResponse(BaseModel):
    """A reconciled contributor, as printed on the document."""
    name: str
    role: str = Field(..., description="primary, featured, producer or writer")
    percentage_of_artist_share: Decimal = Field(..., ge=0, le=100)
    share_of_gross: Decimal = Field(..., ge=0, le=100, description="Percentage of gross revenue")
    legal_name: str
    phone: str
    address: str
    email: str

    class Config:
        from_attributes = True


class LedgerResponse(BaseModel):
    """Reconciled split ledger of a contract."""
    contract_id: UUID
    source: str = Field(..., description="'snapshot' or 'splits'")
    artist_share: Decimal
    label_share: Decimal
    splits_total: Decimal = Field(..., description="Sum of stored split percentages")
    splits_balanced: bool = Field(..., description="Whether stored splits sum to 100")
    primary: Optional[str] = None
    contributors: list[ContributorResponse] = Field(default_factory=list)
