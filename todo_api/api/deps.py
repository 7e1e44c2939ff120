"""
Route dependencies: services bound to the request's database session and
the bearer-token gate.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from todo_api.core.database import get_db
from todo_api.core.exceptions import UnauthorizedException
from todo_api.security.credentials import SqlCredentialStore
from todo_api.security.tokens import TokenService
from todo_api.services.auth import AuthService
from todo_api.services.comments import CommentTreeManager
from todo_api.services.tasks import TaskRepository

bearer_scheme = HTTPBearer(auto_error=False, description="JWT issued by /auth/login")


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_auth_service(
    request: Request,
    db: Session = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    credentials = SqlCredentialStore(
        db,
        password_manager=request.app.state.password_manager,
        policy=request.app.state.password_policy,
    )
    return AuthService(credentials, tokens)


def get_comment_manager(db: Session = Depends(get_db)) -> CommentTreeManager:
    return CommentTreeManager(db)


def get_task_repository(
    db: Session = Depends(get_db),
    comments: CommentTreeManager = Depends(get_comment_manager),
) -> TaskRepository:
    return TaskRepository(db, comments)


def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> str:
    """
    Validate the bearer token and return its subject (the username).

    Raises:
        UnauthorizedException: missing, malformed, forged or expired token.
    """
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthorizedException(reason="missing bearer token")

    username = tokens.validate(credentials.credentials)
    request.state.username = username
    return username
