"""
Bearer token issuance and validation.

Tokens are HMAC-SHA256 signed JWTs carrying ``sub``, ``jti``, ``iss``,
``aud`` and ``exp``. ``issue`` and ``validate`` are pure functions of their
arguments (key, issuer, audience and clock are passed in explicitly);
``TokenService`` binds them to application settings.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

import jwt

from todo_api.config import Settings
from todo_api.core.exceptions import (
    InvalidTokenError,
    TokenExpiredError,
    TokenSignatureError,
)

logger = logging.getLogger(__name__)

DEFAULT_ALGORITHM = "HS256"
TOKEN_LIFETIME = timedelta(hours=3)
REQUIRED_CLAIMS = ["sub", "jti", "iss", "aud", "exp"]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def issue(
    subject: str,
    signing_key: str,
    issuer: str,
    audience: str,
    now: Optional[datetime] = None,
    lifetime: timedelta = TOKEN_LIFETIME,
    algorithm: str = DEFAULT_ALGORITHM,
) -> Tuple[str, datetime]:
    """
    Create a signed token for ``subject``.

    JWT timestamps have whole-second resolution, so ``now`` is truncated to
    the second and the returned expiry is exactly the ``exp`` claim.

    Returns:
        Tuple of (serialized token, absolute UTC expiry).
    """
    issued_at = _as_utc(now or _utcnow()).replace(microsecond=0)
    expiry = issued_at + lifetime

    payload = {
        "sub": subject,
        "jti": str(uuid.uuid4()),
        "iss": issuer,
        "aud": audience,
        "exp": expiry,
    }
    token = jwt.encode(payload, signing_key, algorithm=algorithm)
    return token, expiry


def validate(
    token: str,
    signing_key: str,
    issuer: str,
    audience: str,
    now: Optional[datetime] = None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """
    Verify ``token`` and return its subject.

    Raises:
        TokenSignatureError: the signature does not verify with ``signing_key``.
        TokenExpiredError: ``exp`` is at or before ``now``.
        InvalidTokenError: malformed token, wrong issuer or audience, missing claims.
    """
    try:
        # Expiry is checked below against the supplied clock
        payload = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=audience,
            issuer=issuer,
            options={"require": REQUIRED_CLAIMS, "verify_exp": False},
        )
    except jwt.InvalidSignatureError as e:
        raise TokenSignatureError(reason=f"signature mismatch: {e}") from e
    except jwt.InvalidTokenError as e:
        raise InvalidTokenError(reason=f"invalid token: {e}") from e

    try:
        expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidTokenError(reason="exp claim is not a timestamp") from e

    if expires_at <= _as_utc(now or _utcnow()):
        raise TokenExpiredError(reason=f"token expired at {expires_at.isoformat()}")

    subject = payload["sub"]
    if not isinstance(subject, str) or not subject:
        raise InvalidTokenError(reason="sub claim is empty")
    return subject


class TokenService:
    """Token issuance and validation bound to the configured key, issuer and audience."""

    def __init__(
        self,
        signing_key: str,
        issuer: str,
        audience: str,
        lifetime: timedelta = TOKEN_LIFETIME,
        algorithm: str = DEFAULT_ALGORITHM,
    ):
        if len(signing_key) < 32:
            raise ValueError("JWT secret must be at least 32 characters")

        self.signing_key = signing_key
        self.issuer = issuer
        self.audience = audience
        self.lifetime = lifetime
        self.algorithm = algorithm

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            signing_key=settings.JWT_SECRET_KEY,
            issuer=settings.JWT_ISSUER,
            audience=settings.JWT_AUDIENCE,
            lifetime=timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS),
            algorithm=settings.JWT_ALGORITHM,
        )

    def issue(self, subject: str, now: Optional[datetime] = None) -> Tuple[str, datetime]:
        token, expiry = issue(
            subject,
            self.signing_key,
            self.issuer,
            self.audience,
            now=now,
            lifetime=self.lifetime,
            algorithm=self.algorithm,
        )
        logger.debug(f"Issued token for {subject}, expires {expiry.isoformat()}")
        return token, expiry

    def validate(self, token: str, now: Optional[datetime] = None) -> str:
        return validate(
            token,
            self.signing_key,
            self.issuer,
            self.audience,
            now=now,
            algorithm=self.algorithm,
        )
