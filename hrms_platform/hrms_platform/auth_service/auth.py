from passlib.context import CryptContext
from pydantic import ValidationError as SchemaError
from typing import Optional
import logging
import time
import jwt

from .config import settings
from .errors import InvalidSignatureError, MalformedTokenError, ServerFaultError, TokenExpiredError
from .schemas import TokenClaims

logger = logging.getLogger(__name__)

# Use pbkdf2_sha256 to avoid external bcrypt backend issues in some environments
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__default_rounds=settings.PASSWORD_HASH_ROUNDS,
)

_dummy_hash = None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        # Unrecognised or corrupt digest is just a mismatch to the caller
        return False


def is_password_hash(value: str) -> bool:
    """True if ``value`` already looks like a digest this context can verify."""
    return pwd_context.identify(value) is not None


def burn_verify_time(plain_password: str) -> None:
    """Run a verification against a throwaway hash.

    Used when the account does not exist so the response takes as long as a
    real password check.
    """
    global _dummy_hash
    if _dummy_hash is None:
        _dummy_hash = pwd_context.hash("not-a-real-password")
    pwd_context.verify(plain_password, _dummy_hash)


def issue_token(
    subject_id,
    email: str,
    *,
    secret: Optional[str] = None,
    duration: Optional[int] = None,
    now: Optional[float] = None,
) -> str:
    """
    Mint a signed, time-bounded token for a user.

    Args:
        subject_id: The user's primary key (stored as the ``sub`` claim)
        email: The user's email
        secret: Signing secret, defaults to ``JWT_SECRET``
        duration: Lifetime in seconds, defaults to ``SESSION_DURATION_SECONDS``
        now: Issue time as epoch seconds, defaults to the current time

    Raises:
        ServerFaultError: If the token cannot be signed
    """
    issued_at = int(time.time() if now is None else now)
    lifetime = settings.SESSION_DURATION_SECONDS if duration is None else duration
    payload = {
        "sub": str(subject_id),
        "email": email,
        "iat": issued_at,
        "exp": issued_at + lifetime,
    }
    try:
        return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
    except (jwt.PyJWTError, TypeError, ValueError) as e:
        raise ServerFaultError(f"Failed to sign token: {e}") from e


def validate_token(
    token: str,
    *,
    secret: Optional[str] = None,
    now: Optional[float] = None,
) -> TokenClaims:
    """
    Verify a token's signature and expiry and return its claims.

    Expiry is judged against the server clock (or ``now``): a token is dead
    from the instant ``now >= exp``.

    Raises:
        InvalidSignatureError: Signature does not match the secret
        TokenExpiredError: The token's ``exp`` has been reached
        MalformedTokenError: Not a token, or required claims are missing
    """
    if not token:
        raise MalformedTokenError("Empty token")
    try:
        # exp/iat are checked below against our own clock
        payload = jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={
                "verify_exp": False,
                "verify_iat": False,
                "require": ["sub", "email", "iat", "exp"],
            },
        )
    except jwt.InvalidSignatureError as e:
        raise InvalidSignatureError(str(e)) from e
    except jwt.PyJWTError as e:
        raise MalformedTokenError(str(e)) from e

    try:
        claims = TokenClaims(**payload)
    except SchemaError as e:
        raise MalformedTokenError("Token claims have the wrong shape") from e

    current = time.time() if now is None else now
    if current >= claims.exp:
        raise TokenExpiredError(f"Token expired at {claims.exp}")
    return claims
