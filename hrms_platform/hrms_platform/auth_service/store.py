"""
Credential store: user identity records keyed by a unique email.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from typing import Optional
import logging

from .auth import burn_verify_time, hash_password, verify_password
from .errors import DuplicateEmailError, InvalidCredentialsError, ServerFaultError, ValidationError
from .models import User

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def register_user(db: Session, name: str, email: str, password: str) -> User:
    """
    Create a user with a hashed password.

    Uniqueness is left to the database: the row is inserted directly and a
    unique-constraint violation is reported as a duplicate, so two concurrent
    registrations for one email cannot both succeed.

    Raises:
        ValidationError: If any field is empty
        DuplicateEmailError: If the email is already registered
        ServerFaultError: If the database is unavailable
    """
    if _blank(name) or _blank(email) or _blank(password):
        raise ValidationError()

    user = User(name=name, email=email, password_hash=hash_password(password))
    try:
        db.add(user)
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Registration rejected, email already registered: %s", email)
        raise DuplicateEmailError() from e
    except SQLAlchemyError as e:
        db.rollback()
        raise ServerFaultError(f"Failed to store user: {e}") from e

    db.refresh(user)
    logger.info("Registered user_id=%s email=%s", user.id, user.email)
    return user


def find_by_email(db: Session, email: str) -> Optional[User]:
    try:
        return db.query(User).filter(User.email == email).first()
    except SQLAlchemyError as e:
        raise ServerFaultError(f"Failed to look up user: {e}") from e


def authenticate(db: Session, email: str, password: str) -> User:
    """
    Return the user whose email and password match.

    Raises:
        InvalidCredentialsError: Unknown email or wrong password (same error
            for both, and the same amount of hashing work)
        ServerFaultError: If the database is unavailable
    """
    if _blank(email) or not password:
        raise InvalidCredentialsError()

    user = find_by_email(db, email)
    if user is None:
        burn_verify_time(password)
        raise InvalidCredentialsError()
    if not verify_password(password, user.password_hash):
        raise InvalidCredentialsError()
    return user
