"""Tests for the session gate."""

from __future__ import annotations

import asyncio

import pytest

from cardboard.core.identity import SIGNED_IN, SIGNED_OUT
from cardboard.core.session_gate import SIGN_IN_MESSAGE, SIGN_UP_MESSAGE, SessionGate


class TestMount:
    @pytest.mark.asyncio
    async def test_without_token_shows_auth(self, identity, hub):
        async with SessionGate(identity) as gate:
            assert gate.view == "auth"
            assert not gate.authenticated
            assert hub.subscriber_count == 1
        assert hub.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_valid_token_shows_dashboard(self, identity, owner):
        session = await identity.sign_in_with_password("owner@example.com", "secret123")

        async with SessionGate(identity, session.access_token) as gate:
            assert gate.view == "dashboard"
            assert gate.session.user_id == owner.id
            assert gate.snapshot("INITIAL_SESSION") == {
                "event": "INITIAL_SESSION",
                "view": "dashboard",
                "authenticated": True,
                "user": {"id": owner.id, "email": "owner@example.com"},
            }

    @pytest.mark.asyncio
    async def test_released_on_error(self, identity, hub):
        with pytest.raises(RuntimeError):
            async with SessionGate(identity):
                raise RuntimeError("view crashed")
        assert hub.subscriber_count == 0


class TestEvents:
    @pytest.mark.asyncio
    async def test_sign_out_elsewhere_flips_to_auth(self, identity, owner):
        session = await identity.sign_in_with_password("owner@example.com", "secret123")

        async with SessionGate(identity, session.access_token) as gate:
            await identity.sign_out(session.access_token)
            event = await asyncio.wait_for(gate.next_event(), timeout=1)

            assert event.event == SIGNED_OUT
            assert gate.view == "auth"

    @pytest.mark.asyncio
    async def test_other_accounts_are_ignored(self, identity, owner, other_owner):
        mine = await identity.sign_in_with_password("owner@example.com", "secret123")

        async with SessionGate(identity, mine.access_token) as gate:
            theirs = await identity.sign_in_with_password("other@example.com", "secret123")
            await identity.sign_out(theirs.access_token)

            assert gate.view == "dashboard"
            assert gate._events.empty()

    @pytest.mark.asyncio
    async def test_closed_gate_ignores_events(self, identity, owner):
        session = await identity.sign_in_with_password("owner@example.com", "secret123")
        gate = SessionGate(identity, session.access_token)
        async with gate:
            pass

        await identity.sign_out(session.access_token)
        assert gate.session is not None
        assert gate._events.empty()


class TestPassThroughs:
    @pytest.mark.asyncio
    async def test_sign_up_message(self, identity):
        async with SessionGate(identity) as gate:
            assert await gate.sign_up("fresh@example.com", "secret123") == SIGN_UP_MESSAGE
            assert gate.view == "auth"

    @pytest.mark.asyncio
    async def test_raw_error_message(self, identity, owner):
        async with SessionGate(identity) as gate:
            assert await gate.sign_in("owner@example.com", "nope-nope") == "Invalid login credentials"
            assert gate.message == "Invalid login credentials"
            assert await gate.sign_up("owner@example.com", "secret123") == "User already registered"
            assert gate.view == "auth"

    @pytest.mark.asyncio
    async def test_sign_in_then_out(self, identity, owner):
        async with SessionGate(identity) as gate:
            assert await gate.sign_in("owner@example.com", "secret123") == SIGN_IN_MESSAGE
            assert gate.view == "dashboard"
            assert (await asyncio.wait_for(gate.next_event(), timeout=1)).event == SIGNED_IN

            await gate.sign_out()
            assert gate.view == "auth"
            assert (await asyncio.wait_for(gate.next_event(), timeout=1)).event == SIGNED_OUT

    @pytest.mark.asyncio
    async def test_foreign_sign_in_is_not_adopted(self, identity, owner):
        async with SessionGate(identity) as gate:
            await identity.sign_in_with_password("owner@example.com", "secret123")
            assert gate.view == "auth"
