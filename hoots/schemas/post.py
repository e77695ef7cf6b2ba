"""
Hoots Backend — Pydantic Request/Response Schemas
==================================================

What:  Pydantic models defining the API contract for posts and comments.
How:   FastAPI validates request bodies against the *Create/*Update models
       and serializes responses through the *Response models, which read
       straight from the ORM objects (from_attributes).

Request models only check JSON shape. Business rules (non-empty text,
closed category set) are enforced by PostService so they answer with 400
and the same error envelope as every other rule.

Authors are never accepted from the client: none of the request models has
an author field, and unknown fields are ignored.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorResponse(BaseModel):
    """Displayable author record embedded wherever an author id is stored."""
    id: str = Field(description="Author's external identifier")
    username: str = Field(description="Author's display name")

    model_config = {"from_attributes": True}


class CommentResponse(BaseModel):
    """
    What:  A comment inside a post.
    Who:   Returned on its own by POST/PUT/DELETE .../comments and nested in
           PostResponse.comments (in insertion order).
    """
    id: uuid.UUID = Field(description="Comment identifier")
    text: str
    author: AuthorResponse
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class PostResponse(BaseModel):
    """
    What:  Full representation of a post with its comments.
    Who:   Returned by every /posts endpoint.
    """
    id: uuid.UUID = Field(description="Post identifier")
    title: str
    text: str = Field(description="Post body")
    category: str = Field(description="One of News, Sports, Games, Movies, Music, Television")
    author: AuthorResponse
    comments: List[CommentResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreate(BaseModel):
    """Body of POST /posts. `body` is accepted as an alias of `text`."""
    title: str
    text: str = Field(validation_alias=AliasChoices("text", "body"))
    category: str


class PostUpdate(BaseModel):
    """
    Body of PUT /posts/{id}.

    Every field is optional; only the fields present are overwritten.
    """
    title: Optional[str] = None
    text: Optional[str] = Field(default=None, validation_alias=AliasChoices("text", "body"))
    category: Optional[str] = None


class CommentCreate(BaseModel):
    """Body of POST /posts/{id}/comments."""
    text: str


class CommentUpdate(BaseModel):
    """Body of PUT /posts/{id}/comments/{comment_id}."""
    text: str
