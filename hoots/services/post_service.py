"""
Hoots Backend — Post Service (Business Logic)
==============================================

What:  Create/read/update/delete for posts and for the comments embedded
       in them, with author-only mutation rights.
How:   Every operation receives the request's AsyncSession. Mutations load
       the post (the aggregate root), check the rules, change the ORM
       objects and flush; get_db_session commits once the handler returns.
Who:   Constructed once in create_app() and handed to route handlers via
       hoots.routes.posts.get_post_service.

Rule order for every mutation:
    1. Load post                → NotFoundError (404)
    2. Locate comment, if any   → NotFoundError (404)
    3. Ownership check          → ForbiddenError (403), nothing changed yet
    4. Validate new values      → ValidationError (400)
    5. Mutate + refresh updated_at, flush

Comment deletes reuse the update lookup: an id that is not in the post is a
404, never a silent success.
"""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hoots.auth import is_same_identity
from hoots.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from hoots.models.post import Category, Comment, Post
from hoots.models.user import User, utcnow
from hoots.schemas.post import (
    CommentResponse,
    PostCreate,
    PostResponse,
    PostUpdate,
)

logger = logging.getLogger(__name__)


def _require_text(value: Optional[str], field: str) -> str:
    """Rejects `value` when it is empty or whitespace only; returns it unchanged."""
    if not (value or "").strip():
        raise ValidationError(message=f"'{field}' must not be empty", field=field)
    return value


def _require_category(value: Optional[str]) -> str:
    try:
        return Category(value).value
    except ValueError:
        raise ValidationError(
            message=f"Category '{value}' is not supported. Allowed: {', '.join(Category.values())}",
            field="category",
            context={"allowed": Category.values()},
        )


class PostService:
    """
    Business logic layer for posts and comments.

    Stateless: holds no session or per-request data, so one instance serves
    every request.

    Error Handling Strategy:
        Application errors (NotFound, Forbidden, Validation) propagate as-is.
        SQLAlchemy errors are logged and re-raised as DatabaseError, which
        the boundary turns into a generic 500.
    """

    # ── Lookups ───────────────────────────────────────────────────────────

    async def _load_post(self, db: AsyncSession, post_id: UUID) -> Post:
        """Post with author and comments (and their authors) loaded."""
        result = await db.execute(select(Post).where(Post.id == post_id))
        post = result.scalar_one_or_none()
        if post is None:
            raise NotFoundError(resource="post", resource_id=str(post_id))
        return post

    @staticmethod
    def _find_comment(post: Post, comment_id: UUID) -> Comment:
        for comment in post.comments:
            if comment.id == comment_id:
                return comment
        raise NotFoundError(
            resource="comment",
            resource_id=str(comment_id),
            context={"post_id": str(post.id)},
        )

    @staticmethod
    def _ensure_author(owner_id: str, caller: User, resource: str, resource_id: UUID) -> None:
        if not is_same_identity(owner_id, caller.id):
            logger.warning(
                "User %s tried to modify %s %s owned by %s",
                caller.id, resource, resource_id, owner_id,
            )
            raise ForbiddenError(
                context={"resource": resource, "resource_id": str(resource_id)},
            )

    # ── Posts ─────────────────────────────────────────────────────────────

    async def list_posts(self, db: AsyncSession) -> List[PostResponse]:
        """
        All posts, newest first, with post and comment authors resolved.

        Query plan:
            SELECT ... FROM posts ORDER BY created_at DESC
            → idx_posts_created_at; authors and comments come from the
              selectin loads configured on the model
        """
        try:
            result = await db.execute(select(Post).order_by(desc(Post.created_at)))
            posts = result.scalars().all()
            return [PostResponse.model_validate(post) for post in posts]
        except SQLAlchemyError as e:
            logger.error("Database error listing posts: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not retrieve posts. Please try again.",
                context={"error_type": type(e).__name__},
            )

    async def get_post(self, db: AsyncSession, post_id: UUID) -> PostResponse:
        """
        Single post with author and every comment author resolved.

        Raises:
            NotFoundError: no post with that id (→ 404)
            DatabaseError: query failed (→ 500)
        """
        try:
            post = await self._load_post(db, post_id)
            return PostResponse.model_validate(post)
        except SQLAlchemyError as e:
            logger.error("Database error fetching post %s: %s", post_id, str(e))
            raise DatabaseError(
                message="Could not retrieve the post. Please try again.",
                context={"post_id": str(post_id)},
            )

    async def create_post(self, db: AsyncSession, author: User, data: PostCreate) -> PostResponse:
        """
        Create a post owned by `author`.

        The author comes from the authenticated caller, never from the body.
        The response reuses the caller record instead of a second lookup.

        Raises:
            ValidationError: empty title/text or unknown category (→ 400)
        """
        title = _require_text(data.title, "title")
        text = _require_text(data.text, "text")
        category = _require_category(data.category)

        try:
            post = Post(
                title=title,
                text=text,
                category=category,
                author=author,
                comments=[],
            )
            db.add(post)
            await db.flush()  # Assigns id and timestamps without committing
        except SQLAlchemyError as e:
            logger.error("Database error creating post: %s", str(e), exc_info=True)
            raise DatabaseError(
                message="Could not create the post. Please try again.",
                context={"error_type": type(e).__name__},
            )

        logger.info("Post %s created by %s (%s)", post.id, author.id, category)
        return PostResponse.model_validate(post)

    async def update_post(
        self,
        db: AsyncSession,
        post_id: UUID,
        caller: User,
        data: PostUpdate,
    ) -> PostResponse:
        """
        Overwrite the supplied fields of a post owned by `caller`.

        Raises:
            NotFoundError: no post with that id (→ 404)
            ForbiddenError: caller is not the post's author (→ 403)
            ValidationError: a supplied field is empty/unknown (→ 400)
        """
        try:
            post = await self._load_post(db, post_id)
            self._ensure_author(post.author_id, caller, "post", post_id)

            changes = {}
            if data.title is not None:
                changes["title"] = _require_text(data.title, "title")
            if data.text is not None:
                changes["text"] = _require_text(data.text, "text")
            if data.category is not None:
                changes["category"] = _require_category(data.category)

            for field, value in changes.items():
                setattr(post, field, value)
            post.updated_at = utcnow()
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the post. Please try again.",
                context={"post_id": str(post_id)},
            )

        logger.info("Post %s updated by %s: %s", post_id, caller.id, sorted(changes))
        return PostResponse.model_validate(post)

    async def delete_post(self, db: AsyncSession, post_id: UUID, caller: User) -> PostResponse:
        """
        Delete a post owned by `caller` together with all its comments.

        Returns the post as it was just before removal.

        Raises:
            NotFoundError: no post with that id (→ 404)
            ForbiddenError: caller is not the post's author (→ 403)
        """
        try:
            post = await self._load_post(db, post_id)
            self._ensure_author(post.author_id, caller, "post", post_id)

            removed = PostResponse.model_validate(post)
            await db.delete(post)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the post. Please try again.",
                context={"post_id": str(post_id)},
            )

        logger.info(
            "Post %s deleted by %s (%d comments removed)",
            post_id, caller.id, len(removed.comments),
        )
        return removed

    # ── Comments ──────────────────────────────────────────────────────────

    async def add_comment(
        self,
        db: AsyncSession,
        post_id: UUID,
        author: User,
        text: str,
    ) -> CommentResponse:
        """
        Append a comment to a post. Any authenticated user may comment.

        The new comment becomes the last element of the post's comment list.

        Raises:
            NotFoundError: no post with that id (→ 404)
            ValidationError: empty text (→ 400)
        """
        try:
            post = await self._load_post(db, post_id)
            _require_text(text, "text")

            comment = Comment(text=text, author=author)
            post.comments.append(comment)
            post.updated_at = utcnow()
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error commenting on post %s: %s", post_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not add the comment. Please try again.",
                context={"post_id": str(post_id)},
            )

        logger.info("Comment %s added to post %s by %s", comment.id, post_id, author.id)
        return CommentResponse.model_validate(comment)

    async def update_comment(
        self,
        db: AsyncSession,
        post_id: UUID,
        comment_id: UUID,
        caller: User,
        text: str,
    ) -> CommentResponse:
        """
        Replace the text of a comment written by `caller`.

        Raises:
            NotFoundError: post or comment missing (→ 404)
            ForbiddenError: caller is not the comment's author (→ 403)
            ValidationError: empty text (→ 400)
        """
        try:
            post = await self._load_post(db, post_id)
            comment = self._find_comment(post, comment_id)
            self._ensure_author(comment.author_id, caller, "comment", comment_id)
            _require_text(text, "text")

            now = utcnow()
            comment.text = text
            comment.updated_at = now
            post.updated_at = now
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating comment %s: %s", comment_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not update the comment. Please try again.",
                context={"post_id": str(post_id), "comment_id": str(comment_id)},
            )

        logger.info("Comment %s on post %s updated by %s", comment_id, post_id, caller.id)
        return CommentResponse.model_validate(comment)

    async def delete_comment(
        self,
        db: AsyncSession,
        post_id: UUID,
        comment_id: UUID,
        caller: User,
    ) -> CommentResponse:
        """
        Remove exactly one comment written by `caller` from a post.

        The remaining comments keep their relative order.

        Raises:
            NotFoundError: post or comment missing (→ 404)
            ForbiddenError: caller is not the comment's author (→ 403)
        """
        try:
            post = await self._load_post(db, post_id)
            comment = self._find_comment(post, comment_id)
            self._ensure_author(comment.author_id, caller, "comment", comment_id)

            removed = CommentResponse.model_validate(comment)
            post.comments.remove(comment)  # delete-orphan issues the DELETE
            post.updated_at = utcnow()
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting comment %s: %s", comment_id, str(e), exc_info=True)
            raise DatabaseError(
                message="Could not delete the comment. Please try again.",
                context={"post_id": str(post_id), "comment_id": str(comment_id)},
            )

        logger.info("Comment %s removed from post %s by %s", comment_id, post_id, caller.id)
        return removed
