import time
from typing import Optional

from fastapi import Request, Response
from itsdangerous import BadData, URLSafeSerializer
from pydantic import ValidationError

from app.config import Settings
from app.schemas import SessionData

SALT = "google-auth-session"


def now_ms() -> int:
    return int(time.time() * 1000)


def _serializer(settings: Settings) -> URLSafeSerializer:
    return URLSafeSerializer(settings.secret_key, salt=SALT)


def encode_session(settings: Settings, user_id: str, email: str, name: str) -> str:
    """Sign {userId, email, name, exp} into a cookie-safe token.

    exp is epoch milliseconds, session_max_age seconds from now.
    """
    session = SessionData(
        userId=user_id,
        email=email,
        name=name,
        exp=now_ms() + settings.session_max_age * 1000,
    )
    return _serializer(settings).dumps(session.model_dump())


def decode_session(settings: Settings, token: Optional[str]) -> Optional[SessionData]:
    """Return the session if the token is authentic and unexpired, else None"""
    if not token:
        return None
    try:
        payload = _serializer(settings).loads(token)
        session = SessionData.model_validate(payload)
    except (BadData, ValidationError):
        return None
    if not session.userId or session.exp <= now_ms():
        return None
    return session


def session_from_request(request: Request, settings: Settings) -> Optional[SessionData]:
    return decode_session(settings, request.cookies.get(settings.cookie_name))


def set_session_cookie(response: Response, request: Request, settings: Settings, token: str):
    response.set_cookie(
        settings.cookie_name,
        token,
        max_age=settings.session_max_age,
        path="/",
        secure=request.url.scheme == "https",
        httponly=True,
        samesite="Lax",
    )


def clear_session_cookie(response: Response, request: Request, settings: Settings):
    response.set_cookie(
        settings.cookie_name,
        "",
        max_age=0,
        path="/",
        secure=request.url.scheme == "https",
        samesite="Lax",
    )
