"""
Comment Tree Manager.

Owns the integrity rules of the per-task comment tree:

- a comment always belongs to an existing task;
- a parent comment, when given, belongs to the same task (``0`` means no parent);
- deleting a comment deletes its whole reply subtree, so no reply is left
  pointing at a parent that no longer exists.

Only ``parent_comment_id`` is stored. Reply lists are assembled from the flat
comment set by ``thread_comments`` when a response is built.
"""

import logging
from collections import deque
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from todo_api.core.exceptions import (
    CommentNotFoundError,
    ParentCommentNotFoundError,
    ParentInDifferentTaskError,
    TaskNotFoundError,
)
from todo_api.models import Comment, Task

logger = logging.getLogger(__name__)

# Clients send 0 to mean "top-level comment"
NO_PARENT = 0


def normalize_parent_id(parent_comment_id: Optional[int]) -> Optional[int]:
    if parent_comment_id is None or parent_comment_id == NO_PARENT:
        return None
    return parent_comment_id


def subtree_ids(root_id: int, comments: Iterable[Comment]) -> List[int]:
    """
    Ids of ``root_id`` and all of its descendants, in breadth-first order.

    ``comments`` is the flat comment set the subtree lives in.
    """
    children: Dict[int, List[int]] = {}
    for comment in comments:
        if comment.parent_comment_id is not None:
            children.setdefault(comment.parent_comment_id, []).append(comment.id)

    ordered = []
    visited = set()
    queue = deque([root_id])
    while queue:
        current_id = queue.popleft()
        if current_id in visited:
            logger.warning(f"Comment {current_id} reached twice while walking replies of {root_id}")
            continue
        visited.add(current_id)
        ordered.append(current_id)
        queue.extend(children.get(current_id, []))
    return ordered


def _comment_fields(comment: Comment) -> Dict[str, Any]:
    return {
        "id": comment.id,
        "text": comment.text,
        "is_updated": comment.is_updated,
        "task_id": comment.task_id,
        "parent_comment_id": comment.parent_comment_id,
    }


def thread_comments(comments: Iterable[Comment]) -> List[Dict[str, Any]]:
    """
    Flat list of comment views, each carrying its populated ``replies``.

    ``replies`` holds the direct replies only, without their own replies.
    Every comment appears at the top level of the result with its own
    ``replies``, so a thread of any depth is fully described and the
    response size stays linear in the number of comments.
    """
    ordered = sorted(comments, key=lambda c: c.id)
    views = {c.id: dict(_comment_fields(c), replies=[]) for c in ordered}
    for c in ordered:
        parent = views.get(c.parent_comment_id) if c.parent_comment_id is not None else None
        if parent is not None:
            parent["replies"].append(_comment_fields(c))
    return [views[c.id] for c in ordered]


class CommentTreeManager:
    def __init__(self, db: Session):
        self.db = db

    def _require_task(self, task_id: int) -> Task:
        task = self.db.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def _require_comment(self, comment_id: int, task_id: Optional[int] = None) -> Comment:
        comment = self.db.get(Comment, comment_id)
        if comment is None or (task_id is not None and comment.task_id != task_id):
            raise CommentNotFoundError(comment_id)
        return comment

    def _task_comments(self, task_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.task_id == task_id)
            .order_by(Comment.id)
            .all()
        )

    def create(self, task_id: int, text: str, parent_comment_id: Optional[int] = None) -> Comment:
        """
        Add a comment to a task.

        Raises:
            TaskNotFoundError: the task does not exist.
            ParentCommentNotFoundError: the parent comment does not exist.
            ParentInDifferentTaskError: the parent comment belongs to another task.
        """
        self._require_task(task_id)

        parent_id = normalize_parent_id(parent_comment_id)
        if parent_id is not None:
            parent = self.db.get(Comment, parent_id)
            if parent is None:
                raise ParentCommentNotFoundError(parent_id)
            if parent.task_id != task_id:
                raise ParentInDifferentTaskError(parent_id, task_id)

        comment = Comment(
            text=text,
            is_updated=False,
            task_id=task_id,
            parent_comment_id=parent_id,
        )
        self.db.add(comment)
        self.db.commit()

        logger.info(f"Created comment {comment.id} on task {task_id} (parent={parent_id})")
        return comment

    def get(self, task_id: int, comment_id: int) -> Comment:
        self._require_task(task_id)
        return self._require_comment(comment_id, task_id)

    def update(self, comment_id: int, text: str, task_id: Optional[int] = None) -> Comment:
        """Replace the text; the comment is marked edited even if the text is unchanged."""
        comment = self._require_comment(comment_id, task_id)
        comment.text = text
        comment.is_updated = True
        self.db.commit()

        logger.info(f"Updated comment {comment_id}")
        return comment

    def delete(self, comment_id: int, task_id: Optional[int] = None) -> List[int]:
        """
        Delete a comment together with every reply beneath it.

        Returns:
            Ids of all deleted comments.
        """
        comment = self._require_comment(comment_id, task_id)
        siblings = self._task_comments(comment.task_id)
        by_id = {c.id: c for c in siblings}
        doomed = subtree_ids(comment.id, siblings)

        # Deepest first so no row outlives its parent
        for doomed_id in reversed(doomed):
            self.db.delete(by_id[doomed_id])
        self.db.commit()

        logger.info(f"Deleted comment {comment_id} and {len(doomed) - 1} repl(ies)")
        return doomed

    def delete_for_task(self, task_id: int) -> int:
        """
        Delete every comment of a task, leaves before their parents.

        Flushes but does not commit; the caller owns the transaction.
        """
        comments = self._task_comments(task_id)
        by_id = {c.id: c for c in comments}
        roots = [c.id for c in comments if c.parent_comment_id is None]

        removed = 0
        for root_id in roots:
            for doomed_id in reversed(subtree_ids(root_id, comments)):
                self.db.delete(by_id.pop(doomed_id))
                removed += 1

        # Anything left was unreachable from a root
        for leftover in by_id.values():
            self.db.delete(leftover)
            removed += 1

        self.db.flush()
        return removed

    def list_for_task(self, task_id: int) -> List[Comment]:
        """Flat list of a task's comments, ordered by id."""
        self._require_task(task_id)
        return self._task_comments(task_id)
