"""
Session Token Service

Issues and verifies signed, time-bounded session tokens (JWT, HS256 by
default). Tokens carry whatever claims the client signs in with; the
subject identifier lives in the "uid" claim and is what the access guards
correlate with a user document.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import jwt

from app.core.config import Settings
from app.core.exceptions import InvalidClaimsError, InvalidCredentialError

logger = logging.getLogger(__name__)

# Claim holding the external auth subject id
SUBJECT_CLAIM = "uid"

# Registered claims added by issue() and removed again by verify()
_TIME_CLAIMS = ("iat", "exp")


class TokenService:
    """
    Sign and verify session tokens against a shared secret.

    Example:
        >>> tokens = TokenService(secret="s3cret" * 8)
        >>> token = tokens.issue({"uid": "firebase-uid-1"})
        >>> tokens.verify(token)
        {'uid': 'firebase-uid-1'}
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        lifetime: timedelta = timedelta(hours=1),
    ):
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.lifetime = lifetime

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        """
        Build the service from configuration.

        Development mode falls back to a random per-process secret when
        JWT_SECRET is unset; every other mode requires it.
        """
        secret = settings.jwt_secret
        if not secret:
            if not settings.is_development:
                raise ValueError(
                    "JWT_SECRET is required outside development mode. "
                    "Set it in your .env file or environment variables."
                )
            logger.warning(
                "JWT_SECRET not set, using a random secret "
                "(tokens will not survive a restart)"
            )
            secret = secrets.token_urlsafe(48)

        return cls(
            secret=secret,
            algorithm=settings.jwt_algorithm,
            lifetime=timedelta(minutes=settings.jwt_expires_minutes),
        )

    def issue(self, claims: dict[str, Any], expires_in: Optional[timedelta] = None) -> str:
        """
        Sign claims into a token.

        The "iat" and "exp" claims belong to the token itself, so callers may
        not supply them; any other JSON-serializable claim is signed as given.

        Args:
            claims: Claims to sign
            expires_in: Override of the default lifetime

        Returns:
            str: Encoded token

        Raises:
            InvalidClaimsError: Claims set "iat" or "exp", or a "uid" that is
                not a string
        """
        reserved = sorted(k for k in _TIME_CLAIMS if k in claims)
        if reserved:
            raise InvalidClaimsError(f"Reserved claims not allowed: {', '.join(reserved)}")
        if SUBJECT_CLAIM in claims and not isinstance(claims[SUBJECT_CLAIM], str):
            raise InvalidClaimsError(f"Claim '{SUBJECT_CLAIM}' must be a string")

        now = datetime.now(timezone.utc)
        payload = {
            **claims,
            "iat": now,
            "exp": now + (expires_in if expires_in is not None else self.lifetime),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """
        Verify a token and return its claims.

        Raises:
            InvalidCredentialError: Bad signature, expired or malformed token,
                or a "uid" claim that is not a string
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except jwt.ExpiredSignatureError:
            raise InvalidCredentialError("Token expired")
        except jwt.InvalidTokenError as e:
            logger.debug(f"Token rejected: {e}")
            raise InvalidCredentialError()

        # Guards look users up by this value; only plain strings may reach a query
        if SUBJECT_CLAIM in payload and not isinstance(payload[SUBJECT_CLAIM], str):
            logger.info(f"Token rejected: non-string '{SUBJECT_CLAIM}' claim")
            raise InvalidCredentialError()

        return {k: v for k, v in payload.items() if k not in _TIME_CLAIMS}
