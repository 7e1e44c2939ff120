"""
Credential store.

The rest of the application only sees the narrow ``CredentialStore``
capability (``verify`` and ``create``). ``SqlCredentialStore`` keeps users
in the ``users`` table with bcrypt password hashes; validation failures are
reported as a list of ``{"code", "description"}`` entries.
"""

import logging
import re
from typing import Dict, List, Optional, Protocol

import bcrypt
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from todo_api.config import Settings
from todo_api.core.exceptions import RegistrationError
from todo_api.models import User

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72
USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9\-._@+]+$")
USERNAME_MAX_LENGTH = 256


def _error(code: str, description: str) -> Dict[str, str]:
    return {"code": code, "description": description}


class PasswordPolicy(BaseModel):
    """Password policy configuration"""
    min_length: int = 3
    require_digit: bool = False
    require_lowercase: bool = False
    require_uppercase: bool = False
    require_non_alphanumeric: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordPolicy":
        return cls(
            min_length=settings.PASSWORD_MIN_LENGTH,
            require_digit=settings.PASSWORD_REQUIRE_DIGIT,
            require_lowercase=settings.PASSWORD_REQUIRE_LOWERCASE,
            require_uppercase=settings.PASSWORD_REQUIRE_UPPERCASE,
            require_non_alphanumeric=settings.PASSWORD_REQUIRE_NON_ALPHANUMERIC,
        )

    def validate_password(self, password: str) -> List[Dict[str, str]]:
        """Return every policy violation; an empty list means the password is acceptable."""
        errors = []
        if len(password) < self.min_length:
            errors.append(_error(
                "PasswordTooShort",
                f"Passwords must be at least {self.min_length} characters.",
            ))
        try:
            encoded_length = len(password.encode("utf-8"))
        except UnicodeEncodeError:
            errors.append(_error(
                "PasswordInvalidCharacter",
                "Passwords must not contain unpaired surrogate characters.",
            ))
        else:
            if encoded_length > BCRYPT_MAX_BYTES:
                errors.append(_error(
                    "PasswordTooLong",
                    f"Passwords must be at most {BCRYPT_MAX_BYTES} bytes.",
                ))
        if self.require_digit and not any(c.isdigit() for c in password):
            errors.append(_error("PasswordRequiresDigit", "Passwords must have at least one digit ('0'-'9')."))
        if self.require_lowercase and not any(c.islower() for c in password):
            errors.append(_error("PasswordRequiresLower", "Passwords must have at least one lowercase ('a'-'z')."))
        if self.require_uppercase and not any(c.isupper() for c in password):
            errors.append(_error("PasswordRequiresUpper", "Passwords must have at least one uppercase ('A'-'Z')."))
        if self.require_non_alphanumeric and all(c.isalnum() for c in password):
            errors.append(_error(
                "PasswordRequiresNonAlphanumeric",
                "Passwords must have at least one non alphanumeric character.",
            ))
        return errors


class PasswordManager:
    """Password hashing with bcrypt"""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._dummy_hash: Optional[bytes] = None

    def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

    def verify_password(self, password: str, hashed_password: str) -> bool:
        try:
            return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))
        except (ValueError, TypeError):
            return False

    def burn_verification(self, password: str) -> None:
        """
        Spend the same work as a real verification.

        Called for unknown usernames so that response time does not reveal
        whether an account exists.
        """
        if self._dummy_hash is None:
            self._dummy_hash = bcrypt.hashpw(b"unused-dummy-password", bcrypt.gensalt(rounds=self.rounds))
        try:
            bcrypt.checkpw(password.encode("utf-8"), self._dummy_hash)
        except ValueError:
            pass


class CredentialStore(Protocol):
    """Capability interface for identity storage."""

    def verify(self, username: str, password: str) -> Optional[User]:
        ...

    def create(self, username: str, password: str) -> int:
        ...


def normalize_username(username: str) -> str:
    return username.strip().upper()


class SqlCredentialStore:
    """Credential store backed by the ``users`` table."""

    def __init__(self, db: Session, password_manager: PasswordManager, policy: PasswordPolicy):
        self.db = db
        self.password_manager = password_manager
        self.policy = policy

    def find_by_name(self, username: str) -> Optional[User]:
        return (
            self.db.query(User)
            .filter(User.normalized_username == normalize_username(username))
            .first()
        )

    def verify(self, username: str, password: str) -> Optional[User]:
        """Return the user when the password matches, ``None`` otherwise."""
        # Names that could never be registered are not looked up
        user = self.find_by_name(username) if username and USERNAME_PATTERN.match(username.strip()) else None
        if user is None:
            self.password_manager.burn_verification(password)
            return None
        if not self.password_manager.verify_password(password, user.password_hash):
            return None
        return user

    def _validate_username(self, username: str) -> List[Dict[str, str]]:
        if not username or not USERNAME_PATTERN.match(username) or len(username) > USERNAME_MAX_LENGTH:
            return [_error(
                "InvalidUserName",
                "Username is invalid, can only contain letters, digits and '-._@+'.",
            )]
        if self.find_by_name(username) is not None:
            return [_error("DuplicateUserName", f"Username '{username}' is already taken.")]
        return []

    def create(self, username: str, password: str) -> int:
        """
        Register a new user.

        Raises:
            RegistrationError: with every username and password violation found.
        """
        errors = self._validate_username(username) + self.policy.validate_password(password)
        if errors:
            raise RegistrationError(errors)

        user = User(
            username=username,
            normalized_username=normalize_username(username),
            password_hash=self.password_manager.hash_password(password),
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same name
            self.db.rollback()
            raise RegistrationError(
                [_error("DuplicateUserName", f"Username '{username}' is already taken.")]
            ) from e

        logger.info(f"Registered user {user.username} (id={user.id})")
        return user.id
