"""
Pydantic schemas for request/response validation.
Field names are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base schema: camelCase aliases, accepts either spelling on input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ==================== AUTH SCHEMAS ====================

class LoginRequest(ApiModel):
    username: str
    password: str


class RegisterRequest(ApiModel):
    username: str
    password: str


class TokenResponse(ApiModel):
    token: str
    expiration: datetime


class MessageResponse(ApiModel):
    message: str


# ==================== COMMENT SCHEMAS ====================

class CommentCreate(ApiModel):
    """
    New comment body.

    ``parentCommentId`` of ``0`` or ``null`` both mean a top-level comment.
    """
    text: str = Field(..., min_length=1)
    parent_comment_id: Optional[int] = None


class CommentUpdate(ApiModel):
    id: int
    text: str = Field(..., min_length=1)
    # Accepted for compatibility; an update always marks the comment as edited.
    is_updated: Optional[bool] = None


class CommentReply(ApiModel):
    """A direct reply, without its own replies; those appear on its top-level entry."""
    id: int
    text: str
    is_updated: bool
    task_id: int
    parent_comment_id: Optional[int] = None


class CommentRead(CommentReply):
    replies: List[CommentReply] = []


# ==================== TASK SCHEMAS ====================

class TaskCreate(ApiModel):
    title: str = Field(..., min_length=1, max_length=500)
    description: str = ""
    is_completed: bool = False


class TaskUpdate(TaskCreate):
    id: int


class TaskRead(ApiModel):
    id: int
    title: str
    description: str
    is_completed: bool
    comments: List[CommentRead] = []

