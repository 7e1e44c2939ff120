"""Task and comment endpoints. Every route here sits behind the bearer-token gate."""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, Response, status

from todo_api.api.deps import get_comment_manager, get_current_user, get_task_repository
from todo_api.core.exceptions import IdMismatchError
from todo_api.models import Task
from todo_api.schemas import CommentCreate, CommentRead, CommentUpdate, TaskCreate, TaskRead, TaskUpdate
from todo_api.services.comments import CommentTreeManager, thread_comments
from todo_api.services.tasks import TaskRepository

logger = logging.getLogger(__name__)

router = APIRouter(
    dependencies=[Depends(get_current_user)],
    responses={401: {"description": "Missing or invalid bearer token"}},
)


def _task_view(task: Task) -> Dict[str, Any]:
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "is_completed": task.is_completed,
        "comments": thread_comments(task.comments),
    }


# ==================== TASKS ====================

@router.get("", response_model=List[TaskRead])
def list_tasks(tasks: TaskRepository = Depends(get_task_repository)):
    """All tasks, each with its comments."""
    return [_task_view(task) for task in tasks.list()]


@router.get("/{task_id}", response_model=TaskRead, responses={404: {"description": "Task not found"}})
def get_task(task_id: int, tasks: TaskRepository = Depends(get_task_repository)):
    return _task_view(tasks.get(task_id))


@router.post("", response_model=TaskRead)
def create_task(
    body: TaskCreate,
    request: Request,
    response: Response,
    tasks: TaskRepository = Depends(get_task_repository),
):
    task = tasks.create(body)
    response.headers["Location"] = str(request.url_for("get_task", task_id=task.id))
    return {
        "id": task.id,
        "title": task.title,
        "description": task.description,
        "is_completed": task.is_completed,
        "comments": [],
    }


@router.put(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: {"description": "Path id and body id differ"}, 404: {"description": "Task not found"}},
)
def update_task(task_id: int, body: TaskUpdate, tasks: TaskRepository = Depends(get_task_repository)):
    tasks.update(task_id, body)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Task not found"}},
)
def delete_task(task_id: int, tasks: TaskRepository = Depends(get_task_repository)):
    """Delete a task and every comment on it."""
    tasks.delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== COMMENTS ====================

@router.get(
    "/{task_id}/comments",
    response_model=List[CommentRead],
    responses={404: {"description": "Task not found"}},
)
def list_comments(task_id: int, comments: CommentTreeManager = Depends(get_comment_manager)):
    """
    Every comment of the task as a flat list. Each entry also carries its
    replies, so clients can render the thread without rebuilding it.
    """
    return thread_comments(comments.list_for_task(task_id))


@router.get(
    "/{task_id}/comments/{comment_id}",
    response_model=CommentRead,
    responses={404: {"description": "Task or comment not found"}},
)
def get_comment(task_id: int, comment_id: int, comments: CommentTreeManager = Depends(get_comment_manager)):
    comment = comments.get(task_id, comment_id)
    siblings = comments.list_for_task(task_id)
    views = {view["id"]: view for view in thread_comments(siblings)}
    return views[comment.id]


@router.post(
    "/{task_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"description": "Parent comment missing or on another task"},
        404: {"description": "Task not found"},
    },
)
def create_comment(
    task_id: int,
    body: CommentCreate,
    request: Request,
    response: Response,
    comments: CommentTreeManager = Depends(get_comment_manager),
):
    comment = comments.create(task_id, body.text, body.parent_comment_id)
    response.headers["Location"] = str(
        request.url_for("get_comment", task_id=task_id, comment_id=comment.id)
    )
    return thread_comments([comment])[0]


@router.put(
    "/{task_id}/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={400: {"description": "Path id and body id differ"}, 404: {"description": "Comment not found"}},
)
def update_comment(
    task_id: int,
    comment_id: int,
    body: CommentUpdate,
    comments: CommentTreeManager = Depends(get_comment_manager),
):
    if body.id != comment_id:
        raise IdMismatchError(comment_id, body.id)
    comments.update(comment_id, body.text, task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{task_id}/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"description": "Comment not found"}},
)
def delete_comment(task_id: int, comment_id: int, comments: CommentTreeManager = Depends(get_comment_manager)):
    """Delete a comment and all replies beneath it."""
    comments.delete(comment_id, task_id=task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
