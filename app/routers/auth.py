import logging
from typing import Optional

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from app.config import Settings, get_settings
from app.database import get_sessionmaker
from app.errors import GatewayError
from app.schemas import AuthConfigResponse, LogoutResponse, SessionUser, WhoAmIResponse
from app.services.google_client import GoogleOAuthClient, TokenExchangeError, get_google_client
from app.services.session_token import (
    clear_session_cookie,
    encode_session,
    session_from_request,
    set_session_cookie,
)
from app.services.users import upsert_user

router = APIRouter()
logger = logging.getLogger(__name__)


def redirect_uri_for(request: Request, settings: Settings) -> str:
    if settings.google_redirect_uri:
        return settings.google_redirect_uri
    origin = f"{request.url.scheme}://{request.url.netloc}"
    return f"{origin}/api/google-auth"


@router.get("")
async def google_auth_get(
    request: Request,
    action: Optional[str] = None,
    code: Optional[str] = None,
    state: Optional[str] = None,
    settings: Settings = Depends(get_settings),
    google: GoogleOAuthClient = Depends(get_google_client),
    sessionmaker=Depends(get_sessionmaker),
):
    """Front-end config, consent redirect, or the OAuth callback"""
    if action == "config":
        return AuthConfigResponse(
            clientId=settings.google_client_id or None,
            redirectUri=redirect_uri_for(request, settings),
        )

    if action == "login":
        if not settings.google_client_id:
            raise GatewayError(500, "Google OAuth not configured")
        url = google.authorization_url(redirect_uri_for(request, settings), state)
        return RedirectResponse(url=url, status_code=302)

    if not code:
        raise GatewayError(400, "Missing authorization code")

    if not settings.google_client_id or not settings.google_client_secret:
        raise GatewayError(500, "Google OAuth not configured")

    try:
        token_data = await google.exchange_code(code, redirect_uri_for(request, settings))
    except TokenExchangeError as e:
        logger.error(f"Token exchange failed ({e.status_code}): {e.body}")
        raise GatewayError(400, "Failed to exchange code for token")
    except (httpx.HTTPError, ValueError) as e:
        logger.exception(f"Google auth error: {e}")
        raise GatewayError(500, "Authentication failed")

    access_token = token_data.get("access_token") if isinstance(token_data, dict) else None
    if not access_token:
        raise GatewayError(400, "No access token received")

    user_info = await google.get_user_info(access_token)
    if not user_info:
        raise GatewayError(400, "Failed to get user info")

    await upsert_user(sessionmaker, user_info)

    token = encode_session(settings, user_info.id, user_info.email, user_info.name)
    response = RedirectResponse(url=state or "/", status_code=302)
    set_session_cookie(response, request, settings, token)
    logger.info(f"User {user_info.id} signed in")
    return response


@router.post("")
async def google_auth_post(
    request: Request,
    action: Optional[str] = None,
    settings: Settings = Depends(get_settings),
):
    """Logout, or report who the session cookie belongs to"""
    if action == "logout":
        response = JSONResponse(LogoutResponse(success=True).model_dump())
        clear_session_cookie(response, request, settings)
        return response

    session = session_from_request(request, settings)
    if session is None:
        return WhoAmIResponse(authenticated=False).model_dump(exclude_none=True)

    return WhoAmIResponse(
        authenticated=True,
        user=SessionUser(id=session.userId, email=session.email, name=session.name),
    ).model_dump()
