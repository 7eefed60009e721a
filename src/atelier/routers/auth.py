"""Login and session endpoints under ``/api/auth``."""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials
from prometheus_client import Counter
from sqlalchemy.orm import Session

from .. import services
from ..auth import get_codec, get_current_session, get_db, read_session, security
from ..errors import Unauthenticated
from ..schemas import ChangePasswordRequest, LoginRequest
from ..session import SessionCodec, SessionToken


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

LOGIN_COUNTER = Counter("auth_logins_total", "Login attempts by outcome", ["outcome"])


@router.post("/login")
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
    codec: SessionCodec = Depends(get_codec),
):
    """Exchange credentials for a session token."""
    member = services.authenticate(db, payload.username, payload.password)
    if member is None:
        LOGIN_COUNTER.labels(outcome="failure").inc()
        logger.info("failed login attempt")
        raise Unauthenticated("Invalid credentials")

    issued_at = datetime.now(timezone.utc).replace(microsecond=0)
    session = SessionToken(member_id=member.id, issued_at=issued_at)
    LOGIN_COUNTER.labels(outcome="success").inc()
    logger.info("member %s logged in", member.id)
    return {
        "member": services.serialize_member(member),
        "sessionToken": codec.encode(member.id, issued_at),
        "expiresAt": session.expires_at,
    }


@router.post("/logout")
def logout():
    """Sessions are not stored server side; the client drops its token."""
    return {"message": "Logged out successfully"}


@router.get("/validate")
def validate(session: SessionToken = Depends(get_current_session), db: Session = Depends(get_db)):
    """Return the member behind a valid, unexpired token."""
    return {"member": services.get_member(db, session.member_id)}


@router.get("/session")
def current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    codec: SessionCodec = Depends(get_codec),
):
    try:
        session = read_session(credentials, codec)
    except Unauthenticated:
        return {"session": None}
    return {
        "session": {
            "member_id": session.member_id,
            "issued_at": session.issued_at,
            "expires_at": session.expires_at,
        }
    }


@router.post("/change-password")
def change_password(
    payload: ChangePasswordRequest,
    session: SessionToken = Depends(get_current_session),
    db: Session = Depends(get_db),
):
    services.change_password(db, session.member_id, payload.current_password, payload.new_password)
    return {"message": "Password updated successfully"}
