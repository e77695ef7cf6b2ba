"""
Hoots Backend — Caller Identity
================================

What:  Resolves the authenticated caller for every request and provides the
       single identity comparison used for all ownership checks.
How:   Token verification happens upstream, in the authenticating gateway.
       The gateway forwards the verified subject id and display name in
       request headers (names configured in settings). get_current_user
       reads them and upserts the matching local User row, so author
       references can be resolved later by joins.
Who:   Injected into every /posts route through the CurrentUser alias.
"""

import logging
from typing import Annotated, Any

from fastapi import Depends, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hoots.config import settings
from hoots.database import get_db_session
from hoots.exceptions import AuthenticationError, DatabaseError
from hoots.models.user import User

logger = logging.getLogger(__name__)

USER_ID_MAX_LENGTH = 64
USERNAME_MAX_LENGTH = 150


def canonical_identity(value: Any) -> str:
    """Canonical string form of a user identifier (str, UUID, ObjectId...)."""
    return str(value).strip()


def is_same_identity(left: Any, right: Any) -> bool:
    """
    True when both values name the same user.

    Every "is the caller the author?" check goes through here, so structured
    ids and their string forms can never compare unequal by accident.
    """
    if left is None or right is None:
        return False
    return canonical_identity(left) == canonical_identity(right)


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db_session),
) -> User:
    """
    FastAPI dependency returning the caller's User record.

    Raises:
        AuthenticationError: identity header missing, blank or too long (→ 401)
        DatabaseError: the user row could not be read or written (→ 500)
    """
    user_id = canonical_identity(request.headers.get(settings.auth_user_id_header, ""))
    if not user_id:
        raise AuthenticationError(
            message="Missing caller identity",
            context={"header": settings.auth_user_id_header},
        )
    if len(user_id) > USER_ID_MAX_LENGTH:
        raise AuthenticationError(message="Caller identity is not valid")

    username = request.headers.get(settings.auth_username_header, "").strip()
    username = username[:USERNAME_MAX_LENGTH]

    try:
        user = await db.get(User, user_id)
        if user is None:
            user = User(id=user_id, username=username or user_id)
            db.add(user)
            await db.flush()
            logger.info("Registered new caller identity %s", user_id)
        elif username and username != user.username:
            user.username = username
            await db.flush()
    except SQLAlchemyError as e:
        logger.error("Could not resolve caller %s: %s", user_id, str(e))
        raise DatabaseError(context={"error_type": type(e).__name__})

    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
