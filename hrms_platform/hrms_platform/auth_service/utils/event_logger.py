"""
Event logger utility for authentication events.
"""
from datetime import datetime
from fastapi import Request
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Optional
import sys
import logging
import os

from ..config import settings
from ..models import LoginAttempt

logger = logging.getLogger(__name__)


ALLOWED_EVENT_TYPES = {
    "register_success",
    "register_failure",
    "login_success",
    "login_failure",
}


def configure_logging() -> None:
    """Configure stdout logging, plus a file log when LOG_DIR is set."""
    handlers = [logging.StreamHandler(sys.stdout)]

    # Try to add file handler, but continue without it if directory creation fails
    if settings.LOG_DIR:
        try:
            os.makedirs(settings.LOG_DIR, exist_ok=True)
            handlers.append(logging.FileHandler(os.path.join(settings.LOG_DIR, "auth_events.log")))
        except (OSError, PermissionError) as e:
            print(f"WARNING: Could not set up file logging: {e}", file=sys.stderr)

    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=handlers
    )


def client_ip(request: Request) -> Optional[str]:
    """Client address, falling back to the first X-Forwarded-For entry."""
    if request.client and request.client.host:
        return request.client.host
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return None


def record_login_attempt(email: Optional[str], request: Request, db: Session) -> None:
    """
    Append a login attempt row. Called before the credentials are checked.

    Only the email and request metadata are stored, never the password.
    A storage failure is reported and rolled back; it does not block login.
    """
    try:
        attempt = LoginAttempt(
            email=email,
            ip_address=client_ip(request),
            user_agent=request.headers.get("user-agent"),
            timestamp=datetime.utcnow(),
        )
        db.add(attempt)
        db.commit()
    except SQLAlchemyError as e:
        logger.warning("Failed to record login attempt - email=%s, error=%s", email, e)
        db.rollback()


def log_auth_event(event_type: str, email: Optional[str], request: Request, reason: str = None) -> None:
    """
    Write one line per authentication outcome to the application log.

    Raises:
        ValueError: If event_type is invalid
    """
    if event_type not in ALLOWED_EVENT_TYPES:
        raise ValueError(
            f"Invalid event_type '{event_type}'. Must be one of: {', '.join(sorted(ALLOWED_EVENT_TYPES))}"
        )

    logger.info(
        "AUTH %s email=%s ip=%s reason=%s timestamp=%s",
        event_type, email, client_ip(request), reason, datetime.utcnow().isoformat()
    )
