from fastapi import FastAPI, Body, Depends, HTTPException, status, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from contextlib import asynccontextmanager
import logging

from .config import settings
from .db import get_db, init_db
from .schemas import UserCreate, UserLogin, Token
from .auth import issue_token
from .errors import AuthError, ServerFaultError
from .store import authenticate, register_user
from .utils.event_logger import configure_logging, log_auth_event, record_login_attempt
from .routes import health, protected

configure_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Initialize database on startup"""
    init_db()
    yield


app = FastAPI(
    title="HRMS Auth Service",
    description="Credential verification and token issuance for the HRMS API",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(protected.router)


def _to_http(exc: AuthError) -> HTTPException:
    if isinstance(exc, ServerFaultError):
        # Internal detail stays in the log
        logger.error("Server fault: %s", exc)
    return HTTPException(status_code=exc.status_code, detail=exc.public_message)


@app.post("/api/register", response_model=Token)
def register(request: Request, user: UserCreate = Body(default=UserCreate()), db: Session = Depends(get_db)):
    try:
        new_user = register_user(db, user.name, user.email, user.password)
        token = issue_token(new_user.id, new_user.email)
    except AuthError as e:
        log_auth_event("register_failure", user.email, request, reason=type(e).__name__)
        raise _to_http(e) from e
    except Exception as e:
        logger.exception("Registration error for %s", user.email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ServerFaultError.public_message
        ) from e

    log_auth_event("register_success", new_user.email, request)
    return Token(token=token)


@app.post("/api/login", response_model=Token)
def login(request: Request, credentials: UserLogin = Body(default=UserLogin()), db: Session = Depends(get_db)):
    record_login_attempt(credentials.email, request, db)
    try:
        user = authenticate(db, credentials.email, credentials.password)
        token = issue_token(user.id, user.email)
    except AuthError as e:
        log_auth_event("login_failure", credentials.email, request, reason=type(e).__name__)
        raise _to_http(e) from e
    except Exception as e:
        logger.exception("Login error for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ServerFaultError.public_message
        ) from e

    log_auth_event("login_success", user.email, request)
    return Token(token=token)


def run() -> None:
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
