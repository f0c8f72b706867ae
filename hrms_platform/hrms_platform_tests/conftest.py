import os

# Must be set before the service modules read their settings
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_hrms.db")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-at-least-32-bytes!")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1000")

import pytest
from fastapi.testclient import TestClient

from hrms_platform.hrms_platform.auth_service.db import Base, engine, SessionLocal
from hrms_platform.hrms_platform.auth_service.main import app


@pytest.fixture(autouse=True)
def reset_database():
    # Drop all tables and recreate them before each test
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture(scope="session")
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db_session():
    session = SessionLocal()
    yield session
    session.close()
