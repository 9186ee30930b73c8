"""Text fitting and formatting helpers shared by the PDF renderers."""
import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional

ELLIPSIS = "..."
EMPTY = "-"

_WHITESPACE = re.compile(r"\s+")

DATE_FORMATS = (
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%d/%m/%Y",
    "%d.%m.%Y",
    "%Y%m%d",
)


def collapse_whitespace(text: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", text or "").strip()


def truncate_line(text: Optional[str], max_chars: int) -> str:
    """Single line: collapse whitespace, cut to max_chars with an ellipsis."""
    value = collapse_whitespace(text)
    if len(value) <= max_chars:
        return value
    if max_chars <= len(ELLIPSIS):
        return value[:max_chars]
    return value[:max_chars - len(ELLIPSIS)].rstrip() + ELLIPSIS


def wrap_lines(text: Optional[str], max_chars: int, max_lines: int) -> List[str]:
    """
    Greedy word wrap on character budget.
    Words longer than a line are cut. Lines past max_lines are dropped.
    """
    if max_chars <= 0 or max_lines <= 0:
        return []
    words = collapse_whitespace(text).split(" ")
    lines: List[str] = []
    current = ""
    for word in words:
        if not word:
            continue
        while len(word) > max_chars:
            if current:
                lines.append(current)
                current = ""
            lines.append(word[:max_chars])
            word = word[max_chars:]
        trial = f"{current} {word}" if current else word
        if len(trial) <= max_chars:
            current = trial
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines[:max_lines]


def format_date(value: Any) -> str:
    """ISO YYYY-MM-DD, or "-" when missing or unparsable."""
    if value is None or value == "":
        return EMPTY
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()

    text = str(value).strip()
    if not text:
        return EMPTY
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date().isoformat()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    return EMPTY


def parse_year(value: Any) -> Optional[int]:
    iso = format_date(value)
    if iso == EMPTY:
        return None
    return int(iso[:4])


def format_percent(value: Any) -> str:
    """Percentage value (already x100) as a compact string: 70 -> "70%", 17.5 -> "17.5%"."""
    try:
        number = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return EMPTY
    if not number.is_finite():
        return EMPTY
    text = f"{number.quantize(Decimal('0.01')):f}".rstrip("0").rstrip(".")
    return f"{text}%"


def share_to_percent(share: Any) -> str:
    """Fractional share (0-1) as a percentage string: 0.7 -> "70%"."""
    try:
        return format_percent(Decimal(str(share)) * 100)
    except (InvalidOperation, ValueError):
        return EMPTY
