"""
Storage path resolution for uploaded contract PDFs.

Contracts store a relative pointer such as
`private/uploads/contracts/<file>.pdf`. Depending on the environment, the
private storage lives under the working directory, the deployment root, or
a separately mounted root (PRIVATE_STORAGE_ROOT). Candidates are returned in
that order and probed in that order.

A pointer that fails validation yields no candidates at all.
"""

import logging
import os
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from royalty_docs.core.config import settings

logger = logging.getLogger(__name__)

CONTRACTS_PREFIX = "private/uploads/contracts/"
PRIVATE_PREFIX = "private/"


def configured_roots() -> List[Tuple[str, bool]]:
    """(root, strip_private_prefix) for each configured storage root, in probe order."""
    roots = [
        (os.getcwd(), False),
        (settings.DEPLOYMENT_ROOT, False),
    ]
    if settings.PRIVATE_STORAGE_ROOT:
        roots.append((settings.PRIVATE_STORAGE_ROOT, True))
    return roots


def validate_pointer(pointer: Any) -> Optional[str]:
    """Return the cleaned relative pointer, or None if it must not be resolved."""
    if not isinstance(pointer, str) or not pointer.strip():
        return None
    if "\x00" in pointer:
        return None

    cleaned = pointer.strip().replace("\\", "/").lstrip("/")
    segments = cleaned.split("/")
    if any(segment == ".." for segment in segments):
        logger.warning(f"Rejected contract file pointer with traversal: {pointer!r}")
        return None
    if not cleaned.startswith(CONTRACTS_PREFIX) or cleaned == CONTRACTS_PREFIX:
        return None
    return cleaned


def resolve_candidates(
    pointer: Any,
    roots: Optional[Sequence[Tuple[str, bool]]] = None,
) -> List[Path]:
    """
    Absolute candidate paths for a stored pointer, one per root.

    Empty when the pointer is empty, not a string, contains "..", or is
    outside private/uploads/contracts/.
    """
    cleaned = validate_pointer(pointer)
    if cleaned is None:
        return []

    if roots is None:
        roots = configured_roots()

    candidates = []
    for root, strip_private in roots:
        relative = cleaned[len(PRIVATE_PREFIX):] if strip_private else cleaned
        candidates.append(Path(root) / relative)
    return candidates


def find_stored_document(
    pointer: Any,
    roots: Optional[Sequence[Tuple[str, bool]]] = None,
) -> Optional[Path]:
    """First candidate that exists on disk, probing in order."""
    for candidate in resolve_candidates(pointer, roots):
        if candidate.is_file():
            return candidate
        logger.debug(f"Contract file not found at {candidate}")
    return None
