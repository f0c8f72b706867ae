"""
Tests for the credential store and password hashing.
"""
import threading

import pytest
from sqlalchemy.exc import OperationalError

from hrms_platform.hrms_platform.auth_service.auth import hash_password, is_password_hash, verify_password
from hrms_platform.hrms_platform.auth_service.db import SessionLocal
from hrms_platform.hrms_platform.auth_service.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    ServerFaultError,
    ValidationError,
)
from hrms_platform.hrms_platform.auth_service.models import User
from hrms_platform.hrms_platform.auth_service.store import authenticate, find_by_email, register_user


def test_hash_password_is_salted():
    first = hash_password("Secret123!")
    second = hash_password("Secret123!")
    assert first != second
    assert verify_password("Secret123!", first)
    assert verify_password("Secret123!", second)
    assert not verify_password("secret123!", first)


def test_verify_password_with_garbage_digest():
    assert verify_password("Secret123!", "not-a-hash") is False
    assert not is_password_hash("Secret123!")
    assert is_password_hash(hash_password("Secret123!"))


def test_register_user(db_session):
    user = register_user(db_session, "Alice", "alice@example.com", "Secret123!")
    assert user.id is not None
    assert user.name == "Alice"
    assert user.password_hash != "Secret123!"
    assert find_by_email(db_session, "alice@example.com").id == user.id


@pytest.mark.parametrize("name,email,password", [
    ("", "a@example.com", "pw"),
    ("A", "", "pw"),
    ("A", "a@example.com", ""),
    ("A", None, "pw"),
    ("A", "   ", "pw"),
])
def test_register_user_requires_all_fields(db_session, name, email, password):
    with pytest.raises(ValidationError):
        register_user(db_session, name, email, password)
    assert db_session.query(User).count() == 0


def test_register_duplicate_email(db_session):
    register_user(db_session, "Alice", "alice@example.com", "Secret123!")
    with pytest.raises(DuplicateEmailError):
        register_user(db_session, "Alice Two", "alice@example.com", "Other123!")

    assert db_session.query(User).filter(User.email == "alice@example.com").count() == 1
    # The session is still usable after the rejected insert
    register_user(db_session, "Bob", "bob@example.com", "Secret123!")


def test_concurrent_registration_same_email():
    barrier = threading.Barrier(2)
    outcomes = []
    lock = threading.Lock()

    def worker(name):
        db = SessionLocal()
        try:
            barrier.wait()
            register_user(db, name, "race@example.com", "Secret123!")
            result = "ok"
        except DuplicateEmailError:
            result = "duplicate"
        finally:
            db.close()
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker, args=(f"user{i}",)) for i in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sorted(outcomes) == ["duplicate", "ok"]
    db = SessionLocal()
    try:
        assert db.query(User).filter(User.email == "race@example.com").count() == 1
    finally:
        db.close()


def test_authenticate(db_session):
    registered = register_user(db_session, "Alice", "alice@example.com", "Secret123!")
    assert authenticate(db_session, "alice@example.com", "Secret123!").id == registered.id


@pytest.mark.parametrize("email,password", [
    ("alice@example.com", "wrong"),
    ("nobody@example.com", "Secret123!"),
    ("", "Secret123!"),
    ("alice@example.com", ""),
])
def test_authenticate_rejects(db_session, email, password):
    register_user(db_session, "Alice", "alice@example.com", "Secret123!")
    with pytest.raises(InvalidCredentialsError) as excinfo:
        authenticate(db_session, email, password)
    assert str(excinfo.value) == "Invalid credentials"


def test_storage_failure_is_server_fault(db_session, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is gone"))

    monkeypatch.setattr(db_session, "query", broken_query)
    with pytest.raises(ServerFaultError):
        find_by_email(db_session, "alice@example.com")
