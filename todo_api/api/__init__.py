"""
API Namespace Initialization.

Aggregates the endpoint routers:
- Auth: login and registration (public).
- Tasks: tasks and their threaded comments (bearer token required).
"""

from fastapi import APIRouter

from todo_api.api.routes import auth, tasks

api_router = APIRouter()

# Authentication Routes
api_router.include_router(
    auth.router,
    prefix="/auth",
    tags=["Authentication"],
)

# Task and Comment Routes
api_router.include_router(
    tasks.router,
    prefix="/tasks",
    tags=["Tasks"],
)

__all__ = ["api_router"]
