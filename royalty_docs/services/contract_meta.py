"""
Contract metadata codec.

Legal fields of a contract (reference number, dates, ISRC...) are stored in
the contract's free-text notes column, inside a JSON block that must sit at
the very start of the notes:

    [[CONTRACT_META_JSON]]{"agreementReferenceNo": "..."}[[/CONTRACT_META_JSON]]
    free text written by the A&R...

Every "/" in the JSON payload is written as "\\/" so the end marker can never
appear inside it. Anything after the block is the user's own text and is
never parsed.
"""

import json
import logging
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Tuple, Union

logger = logging.getLogger(__name__)

META_START = "[[CONTRACT_META_JSON]]"
META_END = "[[/CONTRACT_META_JSON]]"

# Wire key -> attribute name
DETAIL_KEYS = {
    "agreementReferenceNo": "agreement_reference_no",
    "effectiveDate": "effective_date",
    "deliveryDate": "delivery_date",
    "isrc": "isrc",
    "songTitles": "song_titles",
    "artistLegalName": "artist_legal_name",
    "artistPhone": "artist_phone",
    "artistAddress": "artist_address",
}


@dataclass
class ContractDetails:
    """Legal fields of a contract. Every field defaults to an empty string."""
    agreement_reference_no: str = ""
    effective_date: str = ""
    delivery_date: str = ""
    isrc: str = ""
    song_titles: str = ""
    artist_legal_name: str = ""
    artist_phone: str = ""
    artist_address: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ContractDetails":
        """Build from wire (camelCase) or attribute (snake_case) keys; unknown keys are ignored."""
        values = {}
        attribute_names = set(DETAIL_KEYS.values())
        for key, value in data.items():
            attr = DETAIL_KEYS.get(key) or (key if key in attribute_names else None)
            if attr is None:
                continue
            values[attr] = "" if value is None else (value if isinstance(value, str) else str(value))
        return cls(**values)

    def to_wire(self) -> dict[str, str]:
        return {wire: getattr(self, attr) for wire, attr in DETAIL_KEYS.items()}

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


def encode_notes(
    details: Union[ContractDetails, Mapping[str, Any], None],
    user_notes: Optional[str] = "",
) -> str:
    """Embed contract details at the start of the notes text."""
    if details is None:
        details = ContractDetails()
    elif not isinstance(details, ContractDetails):
        details = ContractDetails.from_mapping(details)
    user_notes = user_notes or ""

    # Plain notes stay plain unless they would be mistaken for a block
    if details.is_empty() and not user_notes.startswith(META_START):
        return user_notes

    payload = json.dumps(details.to_wire(), ensure_ascii=False).replace("/", "\\/")
    return f"{META_START}{payload}{META_END}\n{user_notes}"


def decode_notes(raw_notes: Optional[str]) -> Tuple[ContractDetails, str]:
    """
    Split stored notes into (details, user notes).

    Never raises: without a well-formed block at position 0, the details are
    all empty and the whole input is returned as user notes.
    """
    if not isinstance(raw_notes, str) or not raw_notes:
        return ContractDetails(), raw_notes if isinstance(raw_notes, str) else ""

    if not raw_notes.startswith(META_START):
        return ContractDetails(), raw_notes

    end = raw_notes.find(META_END, len(META_START))
    if end == -1:
        logger.debug("Contract notes block has no end marker, treating as plain text")
        return ContractDetails(), raw_notes

    payload = raw_notes[len(META_START):end]
    try:
        parsed = json.loads(payload)
    except ValueError:
        logger.warning("Malformed contract metadata block, treating notes as plain text")
        return ContractDetails(), raw_notes

    if not isinstance(parsed, dict):
        logger.warning("Contract metadata block is not an object, treating notes as plain text")
        return ContractDetails(), raw_notes

    user_notes = raw_notes[end + len(META_END):]
    if user_notes.startswith("\n"):
        user_notes = user_notes[1:]

    return ContractDetails.from_mapping(parsed), user_notes
