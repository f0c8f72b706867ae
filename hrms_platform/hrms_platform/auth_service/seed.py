"""
Import users from a JSON file into the credential store.

Usage:
  python -m hrms_platform.hrms_platform.auth_service.seed users.json
  python -m hrms_platform.hrms_platform.auth_service.seed users.json --replace

The file holds a JSON array of {"name", "email", "password"} objects.
Plaintext passwords are hashed; values that are already password hashes
are stored as-is.
"""
import argparse
import json
import logging
import sys
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .auth import hash_password, is_password_hash
from .db import SessionLocal, init_db
from .models import User
from .utils.event_logger import configure_logging

logger = logging.getLogger(__name__)


def load_users(path: Path) -> list[dict]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, list):
        raise ValueError(f"{path}: expected a JSON array of users")
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ValueError(f"{path}: user #{i} is not a JSON object")
        missing = [k for k in ("name", "email", "password") if not entry.get(k)]
        if missing:
            raise ValueError(f"{path}: user #{i} is missing {', '.join(missing)}")
    return data


def seed_users(db: Session, users: list[dict], replace: bool = False) -> int:
    """Insert ``users`` in one transaction and return how many were written."""
    try:
        if replace:
            deleted = db.query(User).delete()
            logger.info("Removed %s existing users", deleted)
        for entry in users:
            password = entry["password"]
            if not is_password_hash(password):
                password = hash_password(password)
            db.add(User(name=entry["name"], email=entry["email"], password_hash=password))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    return len(users)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Import HRMS users from a JSON file")
    parser.add_argument("path", type=Path, help="JSON file containing an array of users")
    parser.add_argument("--replace", action="store_true", help="Delete existing users first")
    args = parser.parse_args(argv)

    configure_logging()
    try:
        users = load_users(args.path)
    except (OSError, ValueError) as e:
        logger.error("Import error: %s", e)
        return 1

    init_db()
    db = SessionLocal()
    try:
        count = seed_users(db, users, replace=args.replace)
    except SQLAlchemyError as e:
        logger.error("Import error: %s", e)
        return 1
    finally:
        db.close()

    logger.info("Imported %s users", count)
    return 0


if __name__ == "__main__":
    sys.exit(main())
