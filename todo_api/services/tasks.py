"""Task Repository Facade: CRUD over tasks, with comment cascade on delete."""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from todo_api.core.exceptions import IdMismatchError, TaskNotFoundError
from todo_api.models import Task
from todo_api.schemas import TaskCreate, TaskUpdate
from todo_api.services.comments import CommentTreeManager

logger = logging.getLogger(__name__)


class TaskRepository:
    def __init__(self, db: Session, comments: Optional[CommentTreeManager] = None):
        self.db = db
        self.comments = comments or CommentTreeManager(db)

    def list(self) -> List[Task]:
        """All tasks with their comments loaded."""
        return (
            self.db.query(Task)
            .options(selectinload(Task.comments))
            .order_by(Task.id)
            .all()
        )

    def get(self, task_id: int) -> Task:
        task = (
            self.db.query(Task)
            .options(selectinload(Task.comments))
            .filter(Task.id == task_id)
            .first()
        )
        if task is None:
            raise TaskNotFoundError(task_id)
        return task

    def create(self, data: TaskCreate) -> Task:
        task = Task(
            title=data.title,
            description=data.description,
            is_completed=data.is_completed,
        )
        self.db.add(task)
        self.db.commit()

        logger.info(f"Created task {task.id}")
        return task

    def update(self, task_id: int, data: TaskUpdate) -> Task:
        """
        Overwrite the mutable fields of a task.

        Raises:
            IdMismatchError: ``data.id`` differs from ``task_id``; nothing is read or written.
            TaskNotFoundError: no task with that id.
        """
        if data.id != task_id:
            raise IdMismatchError(task_id, data.id)

        task = self.db.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        task.title = data.title
        task.description = data.description
        task.is_completed = data.is_completed
        self.db.commit()

        logger.info(f"Updated task {task_id}")
        return task

    def delete(self, task_id: int) -> None:
        """Delete a task and all of its comments."""
        task = self.db.get(Task, task_id)
        if task is None:
            raise TaskNotFoundError(task_id)

        removed = self.comments.delete_for_task(task_id)
        self.db.expire(task, ["comments"])
        self.db.delete(task)
        self.db.commit()

        logger.info(f"Deleted task {task_id} with {removed} comment(s)")
