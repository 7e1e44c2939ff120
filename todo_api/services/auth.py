"""Login and registration on top of the credential store and token service."""

import logging
from datetime import datetime
from typing import Optional, Tuple

from todo_api.core.exceptions import UnauthorizedException
from todo_api.security.credentials import CredentialStore
from todo_api.security.tokens import TokenService

logger = logging.getLogger(__name__)

LOGIN_FAILED_MESSAGE = "Invalid username or password"


class AuthService:
    def __init__(self, credentials: CredentialStore, tokens: TokenService):
        self.credentials = credentials
        self.tokens = tokens

    def login(
        self, username: str, password: str, now: Optional[datetime] = None
    ) -> Tuple[str, datetime]:
        """
        Verify credentials and issue a token whose subject is the username.

        Unknown users and wrong passwords fail identically.
        """
        user = self.credentials.verify(username, password)
        if user is None:
            logger.warning("Failed login attempt")
            raise UnauthorizedException(reason="bad credentials", message=LOGIN_FAILED_MESSAGE)

        token, expiry = self.tokens.issue(user.username, now=now)
        logger.info(f"User {user.username} logged in")
        return token, expiry

    def register(self, username: str, password: str) -> int:
        return self.credentials.create(username, password)
