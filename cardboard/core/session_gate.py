"""Session gate: which screen a client should see, kept current from auth-state events."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from cardboard.core.errors import AuthError
from cardboard.core.identity import (
    SIGNED_IN,
    SIGNED_OUT,
    AuthEvent,
    Identity,
    Session,
    Subscription,
)

logger = logging.getLogger(__name__)

SIGN_UP_MESSAGE = "Check your email (if confirmations enabled) or try sign in."
SIGN_IN_MESSAGE = "Signed in"


class SessionGate:
    """
    Holds the current session for one client.

    Use as ``async with SessionGate(identity, token) as gate``: entering
    subscribes to auth-state changes and fetches the session once, leaving
    always releases the subscription. Results that arrive after the gate
    is closed are dropped.
    """

    def __init__(self, identity: Identity, token: Optional[str] = None):
        self.identity = identity
        self.token = token
        self.session: Optional[Session] = None
        self.message = ""
        self.closed = False
        self._subscription: Optional[Subscription] = None
        self._pending_email: Optional[str] = None
        self._events: asyncio.Queue[AuthEvent] = asyncio.Queue()

    @property
    def authenticated(self) -> bool:
        return self.session is not None

    @property
    def view(self) -> str:
        return "dashboard" if self.session else "auth"

    async def __aenter__(self) -> "SessionGate":
        # subscribe before the fetch so a change in between is not lost
        self._subscription = self.identity.on_auth_state_change(self._handle)
        session = await self.identity.get_session(self.token)
        if not self.closed and self.session is None:
            self.session = session
        return self

    async def __aexit__(self, *exc) -> None:
        self.close()

    def close(self) -> None:
        self.closed = True
        if self._subscription:
            self._subscription.unsubscribe()

    def _handle(self, event: AuthEvent) -> None:
        if self.closed:
            return

        if event.event == SIGNED_OUT:
            if self.session and self.session.user_id == event.account_id:
                self.session = None
                self._events.put_nowait(event)
        elif event.event == SIGNED_IN:
            if (
                self.session is None
                and self._pending_email
                and event.session
                and event.session.email == self._pending_email
            ):
                self.session = event.session
                self._events.put_nowait(event)

    async def next_event(self) -> AuthEvent:
        return await self._events.get()

    async def sign_up(self, email: str, password: str) -> str:
        self.message = ""
        try:
            await self.identity.sign_up(email, password)
            self.message = SIGN_UP_MESSAGE
        except AuthError as e:
            self.message = e.message
        return self.message

    async def sign_in(self, email: str, password: str) -> str:
        self.message = ""
        self._pending_email = (email or "").strip().lower()
        try:
            session = await self.identity.sign_in_with_password(email, password)
        except AuthError as e:
            self.message = e.message
            return self.message
        finally:
            self._pending_email = None

        if not self.closed:
            self.session = session
            self.token = session.access_token
        self.message = SIGN_IN_MESSAGE
        return self.message

    async def sign_out(self) -> None:
        token = self.session.access_token if self.session else self.token
        try:
            await self.identity.sign_out(token)
        except AuthError as e:
            logger.info(f"Sign out without a live session: {e.message}")
        if not self.closed:
            self.session = None

    def snapshot(self, event: str) -> Dict[str, Any]:
        return {
            "event": event,
            "view": self.view,
            "authenticated": self.authenticated,
            "user": (
                {"id": self.session.user_id, "email": self.session.email}
                if self.session
                else None
            ),
        }
