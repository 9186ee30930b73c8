"""
Values printed on a contract document, computed once per request and
shared by the template renderer and the legacy generator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from royalty_docs.core.config import settings
from royalty_docs.services.contract_meta import ContractDetails, decode_notes
from royalty_docs.services.split_ledger import (
    PLACEHOLDER,
    Contributor,
    SplitCheck,
    SplitLedger,
    resolve_field,
)
from royalty_docs.services.text_layout import EMPTY, collapse_whitespace, format_date, parse_year

DOCUMENT_TITLE = "ROYALTY SPLIT AGREEMENT"


@dataclass
class LabelIdentity:
    name: str
    address_lines: List[str] = field(default_factory=list)
    email: Optional[str] = None
    phone: Optional[str] = None

    @classmethod
    def from_settings(cls, label_settings: Any = None) -> "LabelIdentity":
        if label_settings is None:
            return cls(name=settings.LABEL_NAME)
        return cls(
            name=label_settings.label_name or settings.LABEL_NAME,
            address_lines=label_settings.address_lines(),
            email=label_settings.email,
            phone=label_settings.phone,
        )


@dataclass
class DocumentContext:
    contract_id: str
    title: str
    agreement_reference_no: str
    effective_date: str
    delivery_date: str
    song_titles: str
    release_name: str
    artist_names: str
    genre: str
    isrc: str
    artist_share: Decimal
    label_share: Decimal
    contributors: List[Contributor]
    primary: Optional[Contributor]
    party_legal_name: str
    party_phone: str
    party_address: str
    party_email: str
    user_notes: str
    label: LabelIdentity
    split_check: SplitCheck
    generated_at: datetime


def agreement_reference(contract: Any, details: ContractDetails, prefix: Optional[str] = None) -> str:
    """Supplied reference, else <PREFIX>-<YEAR>-<first 8 chars of id>."""
    supplied = collapse_whitespace(details.agreement_reference_no)
    if supplied:
        return supplied

    prefix = prefix or settings.AGREEMENT_PREFIX
    year = (
        parse_year(details.effective_date)
        or parse_year(getattr(contract, "created_at", None))
        or datetime.now(timezone.utc).year
    )
    short_id = str(getattr(contract, "id", "") or "").replace("-", "")[:8].upper() or "DRAFT"
    return f"{prefix}-{year}-{short_id}"


def _decimal(value: Any, default: str) -> Decimal:
    if value is None:
        return Decimal(default)
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return Decimal(default)


def _known(value: Any) -> Any:
    """Treat the ledger placeholder as missing so later fallbacks apply."""
    return None if value == PLACEHOLDER else value


def _genre(release: Any, demo: Any) -> str:
    if release is not None:
        parts = [getattr(release, "genre", None), getattr(release, "release_type", None)]
        text = " / ".join(p.strip() for p in parts if p and p.strip())
        if text:
            return text
    return resolve_field([getattr(demo, "genre", None)], EMPTY)


def build_document_context(
    contract: Any,
    ledger: SplitLedger,
    label_settings: Any = None,
    now: Optional[datetime] = None,
) -> DocumentContext:
    details, user_notes = decode_notes(getattr(contract, "notes", None))
    release = getattr(contract, "release", None)
    demo = getattr(contract, "demo", None)
    artist = getattr(contract, "artist", None)
    primary = ledger.primary()

    release_name = resolve_field([
        getattr(release, "name", None),
        getattr(demo, "title", None),
        getattr(contract, "title", None),
    ])
    song_titles = resolve_field([details.song_titles, _known(release_name)])

    names = [c.name for c in ledger.contributors if c.name != PLACEHOLDER]
    artist_names = ", ".join(names) if names else resolve_field([
        getattr(contract, "primary_artist_name", None),
        getattr(artist, "name", None),
        getattr(release, "artist_name", None),
    ])

    effective_date = format_date(details.effective_date or getattr(contract, "created_at", None))
    delivery_date = format_date(details.delivery_date or getattr(release, "release_date", None))

    return DocumentContext(
        contract_id=str(getattr(contract, "id", "")),
        title=DOCUMENT_TITLE,
        agreement_reference_no=agreement_reference(contract, details),
        effective_date=effective_date,
        delivery_date=delivery_date,
        song_titles=song_titles,
        release_name=release_name,
        artist_names=artist_names,
        genre=_genre(release, demo),
        isrc=resolve_field([details.isrc], EMPTY),
        artist_share=_decimal(getattr(contract, "artist_share", None), "0"),
        label_share=_decimal(getattr(contract, "label_share", None), "0"),
        contributors=ledger.contributors,
        primary=primary,
        party_legal_name=resolve_field([details.artist_legal_name, _known(getattr(primary, "legal_name", None))]),
        party_phone=resolve_field([details.artist_phone, _known(getattr(primary, "phone", None))]),
        party_address=resolve_field([details.artist_address, _known(getattr(primary, "address", None))]),
        party_email=resolve_field([
            _known(getattr(primary, "email", None)),
            getattr(contract, "primary_artist_email", None),
        ]),
        user_notes=user_notes,
        label=LabelIdentity.from_settings(label_settings),
        split_check=ledger.split_check,
        generated_at=now or datetime.now(timezone.utc),
    )
