"""
Client-side session coordinator.

Owns the current token and its absolute expiry, persists both through a
session storage backend, and arms a one-shot auto-logout timer. Public
operations never raise: login and register return an ``AuthResult`` and
logout is always safe to call.
"""
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
import asyncio
import logging
import time

import httpx

from .storage import MemorySessionStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "hrms_token"
EXPIRY_KEY = "hrms_token_expiry"
SESSION_DURATION_SECONDS = 2 * 60 * 60

LANDING_PATH = "/"
LOGIN_PATH = "/login"


@dataclass(frozen=True)
class AuthResult:
    success: bool
    message: Optional[str] = None


@dataclass
class SessionState:
    """Token and expiry (epoch ms) are only ever set or cleared together."""
    token: Optional[str] = None
    expires_at: Optional[int] = None
    loading: bool = True

    def establish(self, token: str, expires_at: int) -> None:
        self.token = token
        self.expires_at = expires_at
        self.loading = False

    def clear(self) -> None:
        self.token = None
        self.expires_at = None
        self.loading = False


class SessionCoordinator:
    """
    Usage:
        async with SessionCoordinator("http://localhost:5001", FileSessionStorage(path)) as session:
            result = await session.login(email, password)
            headers = session.auth_headers()

    Args:
        base_url: Auth service root, used when ``client`` is not given
        storage: Durable key/value store for the token and expiry
        client: Pre-built ``httpx.AsyncClient``; not closed by ``close()``
        on_navigate: Called with ``"/"`` after login/register and ``"/login"`` after logout
        session_duration: Seconds until auto-logout after login/register
        timeout: Seconds before a network call is reported as failed
        clock: Returns the current time as epoch seconds
    """

    def __init__(
        self,
        base_url: str = "http://localhost:5001",
        storage=None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        on_navigate: Optional[Callable[[str], Any]] = None,
        session_duration: float = SESSION_DURATION_SECONDS,
        timeout: float = 10.0,
        clock: Callable[[], float] = time.time,
    ):
        self.storage = storage if storage is not None else MemorySessionStorage()
        self.state = SessionState()
        self.session_duration = session_duration
        self._on_navigate = on_navigate
        self._clock = clock
        self._timer: Optional[asyncio.TimerHandle] = None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "SessionCoordinator":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def token(self) -> Optional[str]:
        return self.state.token

    @property
    def is_authenticated(self) -> bool:
        return (
            self.state.token is not None
            and self.state.expires_at is not None
            and self._now_ms() < self.state.expires_at
        )

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None and not self._timer.cancelled()

    def auth_headers(self) -> Dict[str, str]:
        if not self.is_authenticated:
            return {}
        return {"Authorization": f"Bearer {self.state.token}"}

    async def start(self) -> bool:
        """
        Restore a persisted session.

        Returns True when a still-valid session was restored and the timer
        re-armed for the remaining time; otherwise clears everything through
        the logout path and returns False.
        """
        token = self._read(TOKEN_KEY)
        expires_at = _parse_ms(self._read(EXPIRY_KEY))
        now_ms = self._now_ms()

        if token and expires_at is not None and now_ms < expires_at:
            self.state.establish(token, expires_at)
            self._arm_timer((expires_at - now_ms) / 1000.0)
            logger.info("Session restored, %.0fs remaining", (expires_at - now_ms) / 1000.0)
            return True

        self.logout()
        return False

    async def login(self, email: str, password: str) -> AuthResult:
        return await self._submit(
            "/api/login", {"email": email, "password": password}, "Invalid credentials"
        )

    async def register(self, name: str, email: str, password: str) -> AuthResult:
        return await self._submit(
            "/api/register", {"name": name, "email": email, "password": password}, "Registration failed"
        )

    def logout(self) -> None:
        self._cancel_timer()
        for key in (TOKEN_KEY, EXPIRY_KEY):
            try:
                self.storage.remove(key)
            except OSError as e:
                logger.warning("Could not clear persisted %s: %s", key, e)
        was_authenticated = self.state.token is not None
        self.state.clear()
        if was_authenticated:
            logger.info("Logged out")
        self._navigate(LOGIN_PATH)

    async def close(self) -> None:
        self._cancel_timer()
        if self._owns_client:
            await self._client.aclose()

    async def _submit(self, path: str, payload: Dict[str, str], fallback: str) -> AuthResult:
        self.state.loading = True
        try:
            try:
                response = await self._client.post(path, json=payload)
            except httpx.TimeoutException as e:
                logger.warning("POST %s timed out: %s", path, e)
                return AuthResult(False, "Request timed out, please try again")
            except httpx.HTTPError as e:
                logger.warning("POST %s failed: %s", path, e)
                return AuthResult(False, "Unable to reach the server")
            except Exception:
                logger.exception("POST %s could not be sent", path)
                return AuthResult(False, "Unable to reach the server")

            if not response.is_success:
                return AuthResult(False, _error_message(response, fallback))

            try:
                token = response.json()["token"]
            except (ValueError, KeyError, TypeError):
                logger.warning("POST %s returned no token", path)
                return AuthResult(False, "Unexpected response from the server")
            if not isinstance(token, str) or not token:
                return AuthResult(False, "Unexpected response from the server")

            self._establish(token)
            return AuthResult(True)
        finally:
            self.state.loading = False

    def _establish(self, token: str) -> None:
        expires_at = self._now_ms() + int(self.session_duration * 1000)
        try:
            self.storage.set_many({TOKEN_KEY: token, EXPIRY_KEY: str(expires_at)})
        except OSError as e:
            # The session still works for this process, it just won't survive a restart
            logger.warning("Could not persist session: %s", e)
        self.state.establish(token, expires_at)
        self._arm_timer(self.session_duration)
        self._navigate(LANDING_PATH)

    def _arm_timer(self, delay: float) -> None:
        # A stale timer must never clear a newer session
        self._cancel_timer()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(max(delay, 0.0), self._expire)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _expire(self) -> None:
        self._timer = None
        logger.info("Session expired")
        self.logout()

    def _navigate(self, path: str) -> None:
        if self._on_navigate is None:
            return
        try:
            self._on_navigate(path)
        except Exception:
            logger.exception("Navigation callback failed for %s", path)

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.storage.get(key)
        except OSError as e:
            logger.warning("Could not read persisted %s: %s", key, e)
            return None

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)


def _parse_ms(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback
    if isinstance(body, dict):
        message = body.get("detail") or body.get("message")
        if isinstance(message, str) and message:
            return message
    return fallback
