from fastapi import APIRouter, Depends

from todo_api.api.deps import get_auth_service
from todo_api.schemas import LoginRequest, MessageResponse, RegisterRequest, TokenResponse
from todo_api.services.auth import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid username or password"}},
)
def login(body: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Exchange a username and password for a bearer token valid for three hours."""
    token, expiration = auth.login(body.username, body.password)
    return TokenResponse(token=token, expiration=expiration)


@router.post(
    "/register",
    response_model=MessageResponse,
    responses={400: {"description": "Username or password rejected"}},
)
def register(body: RegisterRequest, auth: AuthService = Depends(get_auth_service)):
    """Create a user account."""
    auth.register(body.username, body.password)
    return MessageResponse(message="User registered.")
