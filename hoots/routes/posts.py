"""
Hoots Backend — Post and Comment Route Handlers
================================================

What:  HTTP surface for posts and the comments embedded in them.
How:   Each handler takes the request session, the resolved caller and the
       shared PostService, delegates, and returns the response model.
       Errors raised by the service are mapped to status codes by the
       handlers registered in main.py.

Route Inventory:
    POST   /posts                                  → 201 create post
    GET    /posts                                  → 200 list, newest first
    GET    /posts/{post_id}                        → 200 one post + comments
    PUT    /posts/{post_id}                        → 200 update (author only)
    DELETE /posts/{post_id}                        → 200 delete (author only)
    POST   /posts/{post_id}/comments               → 201 add comment
    PUT    /posts/{post_id}/comments/{comment_id}  → 200 edit (author only)
    DELETE /posts/{post_id}/comments/{comment_id}  → 200 delete (author only)

Every route requires a caller identity (CurrentUser).
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from hoots.auth import CurrentUser
from hoots.database import get_db_session
from hoots.schemas.common import ErrorResponse
from hoots.schemas.post import (
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    PostCreate,
    PostResponse,
    PostUpdate,
)
from hoots.services.post_service import PostService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["Posts"])


def get_post_service(request: Request) -> PostService:
    """The PostService built by create_app()."""
    return request.app.state.post_service


# Shared OpenAPI error documentation
_AUTH_ERRORS = {
    401: {"description": "Caller identity missing", "model": ErrorResponse},
    500: {"description": "Server error", "model": ErrorResponse},
}
_LOOKUP_ERRORS = {
    **_AUTH_ERRORS,
    404: {"description": "Post or comment not found", "model": ErrorResponse},
}
_MUTATION_ERRORS = {
    **_LOOKUP_ERRORS,
    400: {"description": "Invalid field value", "model": ErrorResponse},
    403: {"description": "Caller is not the author", "model": ErrorResponse},
}


# ── Posts ─────────────────────────────────────────────────────────────────

@router.post(
    "",
    response_model=PostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_AUTH_ERRORS, 400: {"description": "Invalid field value", "model": ErrorResponse}},
    summary="Create a post",
)
async def create_post(
    body: PostCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Creates a post authored by the caller. Any author field in the body is ignored."""
    return await service.create_post(db=db, author=current_user, data=body)


@router.get(
    "",
    response_model=List[PostResponse],
    responses=_AUTH_ERRORS,
    summary="List all posts, newest first",
)
async def list_posts(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> List[PostResponse]:
    return await service.list_posts(db=db)


@router.get(
    "/{post_id}",
    response_model=PostResponse,
    responses=_LOOKUP_ERRORS,
    summary="Get a single post with its comments",
)
async def get_post(
    post_id: UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    return await service.get_post(db=db, post_id=post_id)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses=_MUTATION_ERRORS,
    summary="Update a post (author only)",
)
async def update_post(
    post_id: UUID,
    body: PostUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    return await service.update_post(db=db, post_id=post_id, caller=current_user, data=body)


@router.delete(
    "/{post_id}",
    response_model=PostResponse,
    responses=_MUTATION_ERRORS,
    summary="Delete a post and its comments (author only)",
)
async def delete_post(
    post_id: UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> PostResponse:
    """Returns the deleted post, comments included."""
    return await service.delete_post(db=db, post_id=post_id, caller=current_user)


# ── Comments ──────────────────────────────────────────────────────────────

@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_LOOKUP_ERRORS, 400: {"description": "Empty comment", "model": ErrorResponse}},
    summary="Add a comment to a post",
)
async def add_comment(
    post_id: UUID,
    body: CommentCreate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> CommentResponse:
    return await service.add_comment(db=db, post_id=post_id, author=current_user, text=body.text)


@router.put(
    "/{post_id}/comments/{comment_id}",
    response_model=CommentResponse,
    responses=_MUTATION_ERRORS,
    summary="Edit a comment (comment author only)",
)
async def update_comment(
    post_id: UUID,
    comment_id: UUID,
    body: CommentUpdate,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> CommentResponse:
    return await service.update_comment(
        db=db,
        post_id=post_id,
        comment_id=comment_id,
        caller=current_user,
        text=body.text,
    )


@router.delete(
    "/{post_id}/comments/{comment_id}",
    response_model=CommentResponse,
    responses=_MUTATION_ERRORS,
    summary="Delete a comment (comment author only)",
)
async def delete_comment(
    post_id: UUID,
    comment_id: UUID,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db_session),
    service: PostService = Depends(get_post_service),
) -> CommentResponse:
    """Returns the removed comment. Unknown comment ids answer 404."""
    return await service.delete_comment(
        db=db,
        post_id=post_id,
        comment_id=comment_id,
        caller=current_user,
    )
