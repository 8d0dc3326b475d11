import json

import httpx
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import NullPool

from app.config import Settings, get_settings
from app.database import get_sessionmaker, make_sessionmaker
from app.main import app
from app.services.google_client import GoogleOAuthClient, get_google_client
from app.services.session_token import encode_session


@pytest.fixture
def settings():
    return Settings(
        secret_key="test-secret",
        google_client_id="test-client-id",
        google_client_secret="test-client-secret",
        google_redirect_uri="",
        database_url="",
    )


@pytest.fixture
def sessionmaker(tmp_path):
    # NullPool: TestClient and pytest-asyncio each run their own event loop
    return make_sessionmaker(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)


class FakeGoogle:
    """Scriptable stand-in for Google's token and userinfo endpoints"""

    def __init__(self):
        self.token_status = 200
        self.token_body = {"access_token": "ya29.test", "token_type": "Bearer"}
        self.userinfo_status = 200
        self.userinfo_body = {
            "id": "10001",
            "email": "listener@example.com",
            "name": "Listener",
            "picture": "https://example.com/a.png",
        }
        self.requests = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            if isinstance(self.token_body, dict):
                return httpx.Response(self.token_status, json=self.token_body)
            return httpx.Response(self.token_status, text=self.token_body)
        if request.url.host == "www.googleapis.com":
            return httpx.Response(self.userinfo_status, content=json.dumps(self.userinfo_body))
        return httpx.Response(404)

    def client(self, settings: Settings) -> GoogleOAuthClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(self.handler))
        return GoogleOAuthClient(settings.google_client_id, settings.google_client_secret, http_client=http_client)


@pytest.fixture
def fake_google():
    return FakeGoogle()


@pytest.fixture
def client(settings, sessionmaker, fake_google):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_sessionmaker] = lambda: sessionmaker
    app.dependency_overrides[get_google_client] = lambda: fake_google.client(settings)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def login(client, settings):
    """Attach a valid session cookie for the given user to the test client"""

    def _login(user_id="10001", email="listener@example.com", name="Listener"):
        token = encode_session(settings, user_id, email, name)
        client.cookies.set(settings.cookie_name, token)
        return token

    return _login


@pytest.fixture
def broken_sessionmaker(tmp_path):
    # the parent directory does not exist, so every connection attempt fails
    return make_sessionmaker(f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'test.db'}", poolclass=NullPool)
