"""
SQLAlchemy model definitions.

Tasks own their comments. A comment may point at a parent comment of the
same task; the reply collection is not mapped, it is assembled from
``parent_comment_id`` links when a response is built.
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, func
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """User identity owned by the credential store."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(256), nullable=False)
    normalized_username = Column(String(256), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now())

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"


class Task(Base):
    """To-do item; deleting it deletes every comment attached to it."""
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=False, default="")
    is_completed = Column(Boolean, nullable=False, default=False)

    comments = relationship(
        "Comment",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="Comment.id",
    )

    def __repr__(self) -> str:
        return f"<Task(id={self.id}, title='{self.title}', is_completed={self.is_completed})>"


class Comment(Base):
    """Note attached to a task, optionally replying to another comment of the same task."""
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, index=True)
    text = Column(Text, nullable=False)
    is_updated = Column(Boolean, nullable=False, default=False)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    parent_comment_id = Column(
        Integer, ForeignKey("comments.id", ondelete="CASCADE"), nullable=True, index=True
    )

    task = relationship("Task", back_populates="comments")
    parent = relationship("Comment", remote_side=[id])

    def __repr__(self) -> str:
        return (
            f"<Comment(id={self.id}, task_id={self.task_id}, "
            f"parent_comment_id={self.parent_comment_id})>"
        )
