"""
Hoots Backend — Post and Comment SQLAlchemy Models
===================================================

What:  ORM models for the `posts` table and its owned `comments` table.
How:   Post is the aggregate root. Comments exist only inside a post:
       they are reached through `Post.comments`, cascade-deleted with the
       post, and removed from the database as soon as they leave the list.
Who:   Used by PostService for CRUD operations and by Alembic for schema
       management.

Comment ordering:
    `Post.comments` is an ordering_list keyed on `Comment.position`.
    Appending assigns the next position; removing an element renumbers the
    rest, so the list always reads back in insertion order with contiguous
    positions. Concurrent appends may race for the same position; ties are
    broken by created_at.

Author references:
    Both Post.author and Comment.author load with `selectin`, so a single
    SELECT of posts returns fully resolved authors for the posts and for
    every embedded comment (no lazy IO inside async code).
"""

import enum
import uuid
from datetime import datetime
from typing import List

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text, Uuid
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hoots.database import Base
from hoots.models.user import User, utcnow


class Category(str, enum.Enum):
    """The closed set of post categories."""

    NEWS = "News"
    SPORTS = "Sports"
    GAMES = "Games"
    MOVIES = "Movies"
    MUSIC = "Music"
    TELEVISION = "Television"

    @classmethod
    def values(cls) -> List[str]:
        return [member.value for member in cls]


class Post(Base):
    """
    A hoot: title, text and category written by one author.

    Lifecycle:
        1. Created by an authenticated user (author fixed from then on)
        2. Updated only by its author (title, text, category)
        3. Deleted only by its author, taking every comment with it
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    text: Mapped[str] = mapped_column(Text, nullable=False)

    # Stored as the display value ("News", ...); the CHECK constraint below
    # keeps rows written outside the service inside the closed set too
    category: Mapped[str] = mapped_column(String(20), nullable=False)

    author_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    author: Mapped[User] = relationship(lazy="selectin")

    comments: Mapped[List["Comment"]] = relationship(
        back_populates="post",
        order_by=lambda: [Comment.position, Comment.created_at],
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (
        CheckConstraint(
            "category IN (" + ", ".join(f"'{value}'" for value in Category.values()) + ")",
            name="ck_posts_category",
        ),
        Index("idx_posts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return (
            f"<Post(id={self.id}, title='{self.title}', "
            f"category='{self.category}', author_id='{self.author_id}')>"
        )


class Comment(Base):
    """A reply embedded in a post; only its own author may change it."""

    __tablename__ = "comments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Maintained by the ordering_list on Post.comments
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    text: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("users.id"),
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    # Set explicitly on text edits only; position renumbering leaves it alone
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    post: Mapped[Post] = relationship(back_populates="comments")

    author: Mapped[User] = relationship(lazy="selectin")

    def __repr__(self) -> str:
        return (
            f"<Comment(id={self.id}, post_id={self.post_id}, "
            f"position={self.position}, author_id='{self.author_id}')>"
        )
