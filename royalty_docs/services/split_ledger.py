"""
Split ledger: who gets what share of a contract.

A contract describes its contributors twice:
1. relational split rows (name, percentage, optional user/artist link)
2. the featured-artists JSON snapshot written by the drafting form, which
   also carries legal name, phone and address

The snapshot wins when it parses to a non-empty list, otherwise the split
rows are used. Legal/contact fields are then resolved field by field:

    contributor's own value -> linked user -> linked artist's owner -> "-"

Percentages are shares of the artist pool (Contract.artist_share), never of
gross revenue.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import ROUND_DOWN, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

PLACEHOLDER = "-"
HUNDRED = Decimal("100")
SPLIT_TOLERANCE = Decimal("0.01")
PERCENT_QUANTUM = Decimal("0.001")


class Role(str, Enum):
    PRIMARY = "primary"
    FEATURED = "featured"
    PRODUCER = "producer"
    WRITER = "writer"


def resolve_field(candidates: Iterable[Any], placeholder: str = PLACEHOLDER) -> str:
    """Return the first candidate with visible text, else the placeholder."""
    for candidate in candidates:
        if candidate is None:
            continue
        text = candidate if isinstance(candidate, str) else str(candidate)
        text = text.strip()
        if text:
            return text
    return placeholder


def _to_decimal(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    if not number.is_finite():
        return Decimal("0")
    return number


def _same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)


class FeaturedArtistEntry(BaseModel):
    """One validated entry of the featured-artists snapshot."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    role: Optional[str] = None
    id: Optional[str] = None
    user_id: Optional[str] = Field(None, alias="userId")
    artist_id: Optional[str] = Field(None, alias="artistId")
    email: Optional[str] = None
    legal_name: Optional[str] = Field(None, alias="legalName")
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    address: Optional[str] = None
    percentage: Optional[Decimal] = None

    @field_validator(
        "name", "role", "id", "user_id", "artist_id", "email",
        "legal_name", "phone_number", "address",
        mode="before",
    )
    @classmethod
    def coerce_text(cls, v):
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, (int, float)):
            return str(v)
        return None

    @field_validator("percentage", mode="before")
    @classmethod
    def coerce_percentage(cls, v):
        if v is None or v == "" or isinstance(v, bool):
            return None
        try:
            number = Decimal(str(v).strip())
        except (InvalidOperation, ValueError):
            return None
        return number if number.is_finite() else None

    @property
    def linked_artist_id(self) -> Optional[str]:
        return self.artist_id or self.id


def parse_featured_artists(raw: Any) -> List[FeaturedArtistEntry]:
    """
    Parse the snapshot column. Malformed JSON, a non-list value or an empty
    list all give [] so the caller falls back to the split rows.
    """
    if raw is None or raw == "":
        return []

    data = raw
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (ValueError, TypeError):
            logger.warning("Featured artists snapshot is not valid JSON, using split rows")
            return []

    if not isinstance(data, list):
        return []

    entries = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            entries.append(FeaturedArtistEntry.model_validate(item))
        except ValidationError as e:
            logger.debug(f"Skipping invalid featured artist entry: {e}")
    return entries


@dataclass
class ContributorDirectory:
    """Users and artists reachable from a contract, keyed by id string."""
    users: dict[str, Any] = field(default_factory=dict)
    artists: dict[str, Any] = field(default_factory=dict)

    def add_user(self, user: Any) -> None:
        if user is not None and getattr(user, "id", None) is not None:
            self.users[str(user.id)] = user

    def add_artist(self, artist: Any) -> None:
        if artist is None or getattr(artist, "id", None) is None:
            return
        self.artists[str(artist.id)] = artist
        self.add_user(getattr(artist, "owner", None))

    def user(self, user_id: Any) -> Any:
        return self.users.get(str(user_id)) if user_id is not None else None

    def artist(self, artist_id: Any) -> Any:
        return self.artists.get(str(artist_id)) if artist_id is not None else None

    @classmethod
    def from_contract(cls, contract: Any) -> "ContributorDirectory":
        directory = cls()
        directory.add_user(getattr(contract, "user", None))
        directory.add_artist(getattr(contract, "artist", None))
        for split in getattr(contract, "splits", None) or []:
            directory.add_user(getattr(split, "user", None))
            directory.add_artist(getattr(split, "artist", None))
        return directory


@dataclass
class Contributor:
    """A contributor as printed on the contract document."""
    name: str
    role: str
    percentage_of_artist_share: Decimal
    legal_name: str = PLACEHOLDER
    phone: str = PLACEHOLDER
    address: str = PLACEHOLDER
    email: str = PLACEHOLDER

    def share_of_gross(self, artist_share: Any) -> Decimal:
        """Absolute percentage of gross revenue."""
        return (self.percentage_of_artist_share * _to_decimal(artist_share)).quantize(PERCENT_QUANTUM)


@dataclass
class SplitCheck:
    """Whether stored split rows add up to 100%."""
    total: Decimal
    count: int
    is_balanced: bool


@dataclass
class SplitLedger:
    contributors: List[Contributor]
    source: str  # "snapshot" or "splits"
    split_check: SplitCheck

    def primary(self) -> Optional[Contributor]:
        return primary_contributor(self.contributors)


def check_split_total(splits: Optional[Sequence[Any]]) -> SplitCheck:
    """Flag split rows that don't sum to 100. Never raises."""
    splits = splits or []
    total = sum((_to_decimal(getattr(s, "percentage", None)) for s in splits), Decimal("0"))
    return SplitCheck(
        total=total,
        count=len(splits),
        is_balanced=bool(splits) and abs(total - HUNDRED) <= SPLIT_TOLERANCE,
    )


def primary_contributor(contributors: Sequence[Contributor]) -> Optional[Contributor]:
    """The contributor marked primary, or the first one listed."""
    for contributor in contributors:
        if contributor.role == Role.PRIMARY.value:
            return contributor
    return contributors[0] if contributors else None


def _normalize_role(role: Optional[str]) -> str:
    value = (role or "").strip().lower()
    if value in {r.value for r in Role}:
        return value
    return Role.FEATURED.value


def _display_name(user: Any) -> Optional[str]:
    if user is None:
        return None
    return getattr(user, "stage_name", None) or getattr(user, "full_name", None)


def _contact_fields(explicit: dict, user: Any, owner: Any) -> dict:
    return {
        "legal_name": resolve_field([
            explicit.get("legal_name"),
            getattr(user, "legal_name", None),
            getattr(owner, "legal_name", None),
        ]),
        "phone": resolve_field([
            explicit.get("phone"),
            getattr(user, "phone_number", None),
            getattr(owner, "phone_number", None),
        ]),
        "address": resolve_field([
            explicit.get("address"),
            getattr(user, "address", None),
            getattr(owner, "address", None),
        ]),
        "email": resolve_field([
            explicit.get("email"),
            getattr(user, "email", None),
            getattr(owner, "email", None),
        ]),
    }


def _match_split(entry: FeaturedArtistEntry, splits: list, used: set) -> Any:
    """Find the split row describing the same person as a snapshot entry."""
    checks = (
        lambda s: entry.user_id and _same_id(getattr(s, "user_id", None), entry.user_id),
        lambda s: entry.linked_artist_id and _same_id(getattr(s, "artist_id", None), entry.linked_artist_id),
        lambda s: entry.name and (getattr(s, "name", None) or "").strip().casefold() == entry.name.strip().casefold(),
    )
    for check in checks:
        for index, split in enumerate(splits):
            if index not in used and check(split):
                used.add(index)
                return split
    return None


def _from_snapshot(
    entries: List[FeaturedArtistEntry],
    splits: list,
    directory: ContributorDirectory,
) -> List[Contributor]:
    used: set = set()
    contributors = []
    for entry in entries:
        split = _match_split(entry, splits, used)
        user = directory.user(entry.user_id) or getattr(split, "user", None)
        artist = directory.artist(entry.linked_artist_id) or getattr(split, "artist", None)
        owner = getattr(artist, "owner", None)

        percentage = entry.percentage
        if percentage is None:
            percentage = _to_decimal(getattr(split, "percentage", None))

        explicit = {
            "legal_name": entry.legal_name,
            "phone": entry.phone_number,
            "address": entry.address,
            "email": entry.email,
        }
        contributors.append(Contributor(
            name=resolve_field([
                entry.name,
                getattr(split, "name", None),
                _display_name(user),
                getattr(artist, "name", None),
            ]),
            role=_normalize_role(entry.role),
            percentage_of_artist_share=percentage,
            **_contact_fields(explicit, user, owner),
        ))
    return contributors


def _from_splits(contract: Any, splits: list) -> List[Contributor]:
    contributors = []
    for split in splits:
        user = getattr(split, "user", None)
        artist = getattr(split, "artist", None)
        owner = getattr(artist, "owner", None)

        is_primary = (
            _same_id(getattr(split, "artist_id", None), getattr(contract, "artist_id", None))
            or _same_id(getattr(split, "user_id", None), getattr(contract, "user_id", None))
        )
        explicit = {"email": getattr(split, "email", None)}
        contributors.append(Contributor(
            name=resolve_field([
                getattr(split, "name", None),
                _display_name(user),
                getattr(artist, "name", None),
            ]),
            role=Role.PRIMARY.value if is_primary else Role.FEATURED.value,
            percentage_of_artist_share=_to_decimal(getattr(split, "percentage", None)),
            **_contact_fields(explicit, user, owner),
        ))
    return contributors


def _single_primary(contributors: List[Contributor], contract_id: Any) -> None:
    seen_primary = False
    for contributor in contributors:
        if contributor.role != Role.PRIMARY.value:
            continue
        if seen_primary:
            logger.warning(f"Contract {contract_id} lists more than one primary contributor")
            contributor.role = Role.FEATURED.value
        seen_primary = True


def _normalize_percentages(contributors: List[Contributor]) -> None:
    """Clamp to [0, 100] and scale down when the pool is over-allocated."""
    for contributor in contributors:
        contributor.percentage_of_artist_share = min(
            max(contributor.percentage_of_artist_share, Decimal("0")), HUNDRED
        )

    total = sum((c.percentage_of_artist_share for c in contributors), Decimal("0"))
    if len(contributors) == 1 and total == 0:
        contributors[0].percentage_of_artist_share = HUNDRED
    elif total > HUNDRED:
        for contributor in contributors:
            contributor.percentage_of_artist_share = (
                contributor.percentage_of_artist_share * HUNDRED / total
            ).quantize(PERCENT_QUANTUM, rounding=ROUND_DOWN)

    for contributor in contributors:
        contributor.percentage_of_artist_share = contributor.percentage_of_artist_share.quantize(PERCENT_QUANTUM)


def build_ledger(contract: Any, directory: Optional[ContributorDirectory] = None) -> SplitLedger:
    """Reconcile a contract's snapshot and split rows into one contributor list."""
    splits = list(getattr(contract, "splits", None) or [])
    directory = directory or ContributorDirectory.from_contract(contract)
    split_check = check_split_total(splits)
    contract_id = getattr(contract, "id", None)

    if splits and not split_check.is_balanced:
        logger.warning(f"Contract {contract_id} splits sum to {split_check.total}, expected 100")

    entries = parse_featured_artists(getattr(contract, "featured_artists", None))
    if entries:
        contributors = _from_snapshot(entries, splits, directory)
        source = "snapshot"
    else:
        contributors = _from_splits(contract, splits)
        source = "splits"

    _single_primary(contributors, contract_id)
    _normalize_percentages(contributors)

    return SplitLedger(contributors=contributors, source=source, split_check=split_check)


def snapshot_references(contract: Any) -> tuple[set[str], set[str]]:
    """User and artist ids named by the snapshot, for preloading the directory."""
    user_ids: set[str] = set()
    artist_ids: set[str] = set()
    for entry in parse_featured_artists(getattr(contract, "featured_artists", None)):
        if entry.user_id:
            user_ids.add(entry.user_id)
        if entry.linked_artist_id:
            artist_ids.add(entry.linked_artist_id)
    return user_ids, artist_ids
