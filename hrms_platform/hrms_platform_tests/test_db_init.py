"""Tests for database initialization."""
import os
import tempfile

from sqlalchemy import create_engine, inspect

from hrms_platform.hrms_platform.auth_service.db import init_db


def _init_temp_db():
    with tempfile.NamedTemporaryFile(delete=False, suffix='.db') as tmp:
        tmp_db_path = tmp.name
    test_engine = create_engine(f"sqlite:///{tmp_db_path}", connect_args={"check_same_thread": False})

    import hrms_platform.hrms_platform.auth_service.db as db_module
    original_engine = db_module.engine
    db_module.engine = test_engine
    try:
        init_db()
    finally:
        db_module.engine = original_engine
    return test_engine, tmp_db_path


def test_init_db_creates_tables():
    test_engine, path = _init_temp_db()
    try:
        tables = inspect(test_engine).get_table_names()
        assert 'users' in tables
        assert 'login_attempts' in tables
    finally:
        test_engine.dispose()
        os.unlink(path)


def test_users_email_is_unique():
    test_engine, path = _init_temp_db()
    try:
        inspector = inspect(test_engine)
        unique_columns = [idx['column_names'] for idx in inspector.get_indexes('users') if idx['unique']]
        unique_columns += [c['column_names'] for c in inspector.get_unique_constraints('users')]
        assert ['email'] in unique_columns

        columns = {col['name']: col for col in inspector.get_columns('users')}
        assert columns['email']['nullable'] is False
        assert columns['password_hash']['nullable'] is False
    finally:
        test_engine.dispose()
        os.unlink(path)


def test_login_attempts_do_not_store_passwords():
    test_engine, path = _init_temp_db()
    try:
        columns = {col['name'] for col in inspect(test_engine).get_columns('login_attempts')}
        assert columns == {'id', 'email', 'ip_address', 'user_agent', 'timestamp'}
        index_names = [idx['name'] for idx in inspect(test_engine).get_indexes('login_attempts')]
        assert 'ix_login_attempts_email_timestamp' in index_names
    finally:
        test_engine.dispose()
        os.unlink(path)
