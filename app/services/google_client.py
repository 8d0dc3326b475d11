import logging
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from app.config import get_settings
from app.schemas import GoogleUserInfo

logger = logging.getLogger(__name__)

GOOGLE_AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_SCOPES = "openid email profile"


class TokenExchangeError(Exception):
    def __init__(self, status_code: int, body: str):
        super().__init__(f"token endpoint returned {status_code}")
        self.status_code = status_code
        self.body = body


class GoogleOAuthClient:
    """Authorization-code flow against Google's token and userinfo endpoints.

    Single attempt per call; failures surface straight to the caller.
    """

    def __init__(self, client_id: str, client_secret: str, http_client: Optional[httpx.AsyncClient] = None):
        self.client_id = client_id
        self.client_secret = client_secret
        self._http = http_client

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        if self._http is not None:
            return await self._http.request(method, url, **kwargs)
        async with httpx.AsyncClient(timeout=30.0) as client:
            return await client.request(method, url, **kwargs)

    def authorization_url(self, redirect_uri: str, state: Optional[str] = None) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": GOOGLE_SCOPES,
        }
        if state:
            params["state"] = state
        return f"{GOOGLE_AUTHORIZE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """POST the authorization code to the token endpoint"""
        response = await self._request(
            "POST",
            GOOGLE_TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if not response.is_success:
            raise TokenExchangeError(response.status_code, response.text)
        return response.json()

    async def get_user_info(self, access_token: str) -> Optional[GoogleUserInfo]:
        try:
            response = await self._request(
                "GET",
                GOOGLE_USERINFO_URL,
                headers={"Authorization": f"Bearer {access_token}"},
            )
            if not response.is_success:
                return None
            return GoogleUserInfo.model_validate(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Failed to fetch Google user info: {e}")
            return None


def get_google_client() -> GoogleOAuthClient:
    settings = get_settings()
    return GoogleOAuthClient(settings.google_client_id, settings.google_client_secret)
