"""
Access gate for protected routes.

Attach with ``Depends(access_gate)`` or as a router-level dependency. The
request only reaches the handler when the bearer token validates; claims are
stored on ``request.state.user``.
"""
from fastapi import Header, HTTPException, Request, status
from typing import Optional
import logging

from .auth import validate_token
from .errors import InvalidTokenError, MalformedTokenError, NoAuthHeaderError
from .schemas import TokenClaims

logger = logging.getLogger(__name__)


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an ``Authorization: Bearer <token>`` header.

    Raises:
        NoAuthHeaderError: Header missing or empty
        MalformedTokenError: Header is not a bearer credential
    """
    if not authorization or not authorization.strip():
        raise NoAuthHeaderError()
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise MalformedTokenError("Authorization header is not a bearer token")
    return token.strip()


def access_gate(
    request: Request,
    authorization: Optional[str] = Header(default=None, alias="Authorization"),
) -> TokenClaims:
    try:
        token = extract_bearer_token(authorization)
        claims = validate_token(token)
    except InvalidTokenError as exc:
        # The reason is only for our logs; callers get the generic message
        logger.info(
            "Rejected %s %s: %s (%s)",
            request.method, request.url.path, type(exc).__name__, exc
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=exc.public_message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc

    request.state.user = claims
    return claims
