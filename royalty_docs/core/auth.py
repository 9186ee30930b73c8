"""Session lookup for incoming requests."""
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from royalty_docs.core.database import get_db, utc_now
from royalty_docs.models.user_session import UserSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """The identity behind an authenticated request."""
    id: UUID
    email: Optional[str]
    role: str


async def get_session_user(
    authorization: str = Header(None),
    db: AsyncSession = Depends(get_db),
) -> Optional[SessionUser]:
    """Resolve the bearer token to a user, or None when there is no live session.

    Deciding what a missing session means is left to the caller.
    """
    if not authorization or not authorization.startswith("Bearer "):
        return None

    token = authorization.replace("Bearer ", "", 1).strip()
    if not token:
        return None

    result = await db.execute(
        select(UserSession)
        .options(selectinload(UserSession.user))
        .where(UserSession.token == token)
        .where(UserSession.expires_at > utc_now())
    )
    session = result.scalar_one_or_none()
    if not session or not session.user:
        logger.debug("Bearer token did not match a live session")
        return None

    user = session.user
    return SessionUser(id=user.id, email=user.email, role=(user.role or "").lower())
