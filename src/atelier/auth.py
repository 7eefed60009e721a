import logging
from typing import Generator, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from .errors import Expired, Forbidden, Unauthenticated
from .session import DecodeError, SessionCodec, SessionToken

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

security = HTTPBearer(auto_error=False)

# verified against when there is no stored hash, so every check costs the same
_DUMMY_HASH = pwd_context.hash("atelier-no-such-account")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    if not password_hash:
        pwd_context.verify(password or "", _DUMMY_HASH)
        return False
    if not password:
        return False
    try:
        return pwd_context.verify(password, password_hash)
    except ValueError:
        # stored value is not a recognised hash
        logger.warning("unrecognised password hash format")
        return False


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower()


def get_db(request: Request) -> Generator[Session, None, None]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_codec(request: Request) -> SessionCodec:
    return request.app.state.codec


def read_session(
    credentials: Optional[HTTPAuthorizationCredentials], codec: SessionCodec
) -> SessionToken:
    """Decode a bearer credential into an unexpired session."""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise Unauthenticated("No session token provided")
    try:
        token = codec.decode(credentials.credentials)
    except DecodeError:
        raise Unauthenticated("Invalid session token")
    if token.is_expired():
        raise Expired()
    return token


def get_current_session(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    codec: SessionCodec = Depends(get_codec),
) -> SessionToken:
    return read_session(credentials, codec)


def require_owner(member_id: str, session: SessionToken = Depends(get_current_session)) -> SessionToken:
    """Allow the request only when the token belongs to the member in the path."""
    if session.member_id != member_id:
        logger.info("member %s denied access to member %s", session.member_id, member_id)
        raise Forbidden()
    return session
