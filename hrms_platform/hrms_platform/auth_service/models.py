from sqlalchemy import Column, Integer, String, DateTime, Index
from datetime import datetime
from .db import Base


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    # Case-sensitive as stored; the unique index is the only duplicate check.
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


class LoginAttempt(Base):
    """Append-only audit row written for every login call, before verification.

    The submitted password is intentionally not a column.
    """
    __tablename__ = "login_attempts"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, nullable=True)
    ip_address = Column(String, nullable=True)
    user_agent = Column(String, nullable=True)
    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_login_attempts_email_timestamp', 'email', 'timestamp'),
    )
