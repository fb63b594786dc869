import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession

from cardboard.api.deps import get_identity, get_token
from cardboard.core.identity import Identity, Session
from cardboard.core.session_gate import SIGN_IN_MESSAGE, SIGN_UP_MESSAGE, SessionGate
from cardboard.db.session import get_db
from cardboard.schemas.auth import AuthMessage, Credentials, GateState, SessionRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _session_read(session: Session) -> SessionRead:
    return SessionRead(
        access_token=session.access_token,
        token_type=session.token_type,
        expires_at=session.expires_at,
        user={"id": session.user_id, "email": session.email},
    )


@router.post("/signup", response_model=AuthMessage)
async def sign_up(data: Credentials, identity: Identity = Depends(get_identity)):
    await identity.sign_up(data.email, data.password)
    return {"message": SIGN_UP_MESSAGE}


@router.post("/signin", response_model=AuthMessage)
async def sign_in(data: Credentials, identity: Identity = Depends(get_identity)):
    session = await identity.sign_in_with_password(data.email, data.password)
    return {"message": SIGN_IN_MESSAGE, "session": _session_read(session)}


@router.post("/signout", response_model=AuthMessage)
async def sign_out(
    token: Optional[str] = Depends(get_token),
    identity: Identity = Depends(get_identity),
):
    await identity.sign_out(token)
    return {"message": "Signed out"}


@router.get("/session", response_model=GateState)
async def current_session(
    token: Optional[str] = Depends(get_token),
    identity: Identity = Depends(get_identity),
):
    """Which screen the client should render for this token."""
    async with SessionGate(identity, token) as gate:
        return gate.snapshot("INITIAL_SESSION")


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/events")
async def auth_events(
    websocket: WebSocket,
    token: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """
    Stream gate state for one client: the initial state, then one message
    per auth-state change of the signed-in account. The subscription is
    released when the socket closes.
    """
    await websocket.accept()
    async with SessionGate(Identity(db), token) as gate:
        await websocket.send_json(gate.snapshot("INITIAL_SESSION"))

        disconnected = asyncio.create_task(_wait_for_disconnect(websocket))
        try:
            while True:
                next_event = asyncio.create_task(gate.next_event())
                done, _ = await asyncio.wait(
                    {disconnected, next_event}, return_when=asyncio.FIRST_COMPLETED
                )
                if disconnected in done:
                    next_event.cancel()
                    break
                event = next_event.result()
                await websocket.send_json(gate.snapshot(event.event))
        finally:
            disconnected.cancel()
    logger.info("Auth event stream closed")
