"""Identity: accounts, password sign-in, revocable bearer sessions and auth-state events."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Callable, List, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.core.config import ACCESS_TOKEN_TTL_MINUTES, JWT_ALGORITHM, JWT_SECRET
from cardboard.core.errors import AuthError, NotAuthenticatedError
from cardboard.db.models import Account, AuthSession

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"

MIN_PASSWORD_LENGTH = 6


@dataclass
class Session:
    access_token: str
    expires_at: datetime
    user_id: str
    email: str
    token_type: str = "bearer"


@dataclass
class AuthEvent:
    event: str
    account_id: str
    session: Optional[Session]


AuthHandler = Callable[[AuthEvent], None]


class Subscription:
    """Handle returned by ``on_auth_state_change``; release it with ``unsubscribe``."""

    def __init__(self, hub: "AuthEventHub", handler: AuthHandler):
        self._hub = hub
        self._handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if not self.active:
            return
        self.active = False
        self._hub._discard(self._handler)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc) -> None:
        self.unsubscribe()


class AuthEventHub:
    """In-process fan-out of auth-state changes."""

    def __init__(self) -> None:
        self._handlers: List[AuthHandler] = []

    def subscribe(self, handler: AuthHandler) -> Subscription:
        self._handlers.append(handler)
        return Subscription(self, handler)

    def _discard(self, handler: AuthHandler) -> None:
        try:
            self._handlers.remove(handler)
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._handlers)

    def emit(self, event: AuthEvent) -> None:
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.error(f"Auth event handler failed for {event.event}", exc_info=True)


auth_events = AuthEventHub()


def _ensure_utc(value: datetime) -> datetime:
    """SQLite hands back naive datetimes."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class Identity:
    def __init__(self, db: AsyncSession, hub: AuthEventHub = auth_events):
        self.db = db
        self.hub = hub

    def on_auth_state_change(self, handler: AuthHandler) -> Subscription:
        return self.hub.subscribe(handler)

    async def sign_up(self, email: str, password: str) -> Account:
        email = _normalize_email(email)
        if "@" not in email:
            raise AuthError("Unable to validate email address: invalid format")
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(f"Password should be at least {MIN_PASSWORD_LENGTH} characters.")

        existing = await self.db.execute(select(Account).where(Account.email == email))
        if existing.scalar_one_or_none():
            raise AuthError("User already registered")

        account = Account(email=email, password_hash=pwd_context.hash(password))
        self.db.add(account)
        await self.db.commit()
        await self.db.refresh(account)
        logger.info(f"Account created: {account.id}")
        return account

    async def sign_in_with_password(self, email: str, password: str) -> Session:
        result = await self.db.execute(
            select(Account).where(Account.email == _normalize_email(email))
        )
        account = result.scalar_one_or_none()
        if not account or not pwd_context.verify(password or "", account.password_hash):
            raise AuthError("Invalid login credentials")

        expires_at = datetime.now(UTC) + timedelta(minutes=ACCESS_TOKEN_TTL_MINUTES)
        auth_session = AuthSession(account_id=account.id, expires_at=expires_at)
        self.db.add(auth_session)
        await self.db.commit()
        await self.db.refresh(auth_session)

        token = jwt.encode(
            {"sub": account.id, "sid": auth_session.id, "exp": expires_at},
            JWT_SECRET,
            algorithm=JWT_ALGORITHM,
        )
        session = Session(
            access_token=token,
            expires_at=expires_at,
            user_id=account.id,
            email=account.email,
        )
        self.hub.emit(AuthEvent(SIGNED_IN, account.id, session))
        return session

    async def _load(self, token: Optional[str]):
        if not token:
            return None, None
        try:
            claims = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        except JWTError:
            return None, None

        sid = claims.get("sid")
        if not sid:
            return None, None

        auth_session = await self.db.get(AuthSession, sid)
        if not auth_session or auth_session.account_id != claims.get("sub"):
            return None, None
        if _ensure_utc(auth_session.expires_at) <= datetime.now(UTC):
            return None, None

        account = await self.db.get(Account, auth_session.account_id)
        return auth_session, account

    async def get_session(self, token: Optional[str]) -> Optional[Session]:
        auth_session, account = await self._load(token)
        if not account:
            return None
        return Session(
            access_token=token,
            expires_at=_ensure_utc(auth_session.expires_at),
            user_id=account.id,
            email=account.email,
        )

    async def get_user(self, token: Optional[str]) -> Optional[Account]:
        _, account = await self._load(token)
        return account

    async def sign_out(self, token: Optional[str]) -> None:
        auth_session, account = await self._load(token)
        if not auth_session:
            raise NotAuthenticatedError("Auth session missing!")

        # global scope: every session of the account is revoked
        await self.db.execute(delete(AuthSession).where(AuthSession.account_id == account.id))
        await self.db.commit()
        self.hub.emit(AuthEvent(SIGNED_OUT, account.id, None))
