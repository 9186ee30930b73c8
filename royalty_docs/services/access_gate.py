"""Who may open a contract's document."""
import logging
from typing import Any, Optional

from royalty_docs.core.auth import SessionUser
from royalty_docs.core.config import settings
from royalty_docs.services.errors import ForbiddenError, UnauthorizedError

logger = logging.getLogger(__name__)


def _same_id(a: Any, b: Any) -> bool:
    return a is not None and b is not None and str(a) == str(b)


def _same_email(a: Optional[str], b: Optional[str]) -> bool:
    if not a or not b:
        return False
    return a.strip().casefold() == b.strip().casefold()


def require_session(user: Optional[SessionUser]) -> SessionUser:
    if user is None:
        raise UnauthorizedError()
    return user


def can_view_contract(user: SessionUser, contract: Any) -> bool:
    """
    Access is granted to:
    - admin / A&R roles
    - the contract's owner
    - the owner of the linked artist profile
    - any split contributor (by user id)
    - the primary contact email
    """
    if (user.role or "").lower() in settings.privileged_roles:
        return True
    if _same_id(getattr(contract, "user_id", None), user.id):
        return True

    artist = getattr(contract, "artist", None)
    if artist is not None and _same_id(getattr(artist, "user_id", None), user.id):
        return True

    for split in getattr(contract, "splits", None) or []:
        if _same_id(getattr(split, "user_id", None), user.id):
            return True

    return _same_email(getattr(contract, "primary_artist_email", None), user.email)


def check_contract_access(user: Optional[SessionUser], contract: Any) -> None:
    user = require_session(user)
    if not can_view_contract(user, contract):
        logger.info(f"User {user.id} denied access to contract {getattr(contract, 'id', None)}")
        raise ForbiddenError()
