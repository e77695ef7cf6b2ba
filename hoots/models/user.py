"""
Hoots Backend — User SQLAlchemy Model
======================================

What:  Local mirror of the identities forwarded by the authenticating gateway.
How:   Rows are upserted by the caller-identity dependency (hoots.auth) the
       first time an identity is seen; posts and comments reference them.
Who:   Joined by relationship loading whenever a post or comment is returned,
       so every `author` field renders as {id, username}.

The primary key is the external subject identifier as a string. Identity
comparisons in the service layer always go through
hoots.auth.is_same_identity, which compares canonical string forms.
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from hoots.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """A caller identity as supplied by the gateway."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="External subject identifier supplied by the auth gateway",
    )

    username: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        comment="Display name, refreshed whenever the gateway reports a new one",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', username='{self.username}')>"
