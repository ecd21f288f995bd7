from __future__ import annotations

import base64
import json
import time
from typing import Any
from unittest.mock import patch
from urllib.parse import parse_qs, unquote, urlsplit

import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives import serialization
from httpx import ASGITransport, AsyncClient
from jose import jwt
from starlette.testclient import TestClient

from onboarding.core.dependencies import get_current_user
from onboarding.main import app
from onboarding.models.auth import UserInfo
from onboarding.services.function_client import UpstreamResponse, function_client

TEST_TENANT_ID = "test-tenant-00000000-0000-0000-0000-000000000000"
TEST_CLIENT_ID = "test-client-00000000-0000-0000-0000-000000000000"
TEST_KID = "test-kid-1"
TEST_FUNCTION_BASE = "https://onboarding-func.example.net"
TEST_FUNCTION_CODE = "test-function-code"


def _int_to_base64url(value: int) -> str:
    byte_length = (value.bit_length() + 7) // 8
    return base64.urlsafe_b64encode(value.to_bytes(byte_length, byteorder="big")).rstrip(b"=").decode("ascii")


def upstream(status: int = 200, body: Any = None, content_type: str | None = "application/json") -> UpstreamResponse:
    """Canned Azure Function answer; dicts and lists are JSON-encoded."""
    if body is None:
        raw = b""
    elif isinstance(body, bytes):
        raw = body
    elif isinstance(body, str):
        raw = body.encode("utf-8")
    else:
        raw = json.dumps(body).encode("utf-8")
    return UpstreamResponse(status=status, body=raw, content_type=content_type)


def _decoded(content: bytes | None) -> Any:
    if not content:
        return None
    try:
        return json.loads(content)
    except ValueError:
        return None


class FakeUpstream:
    """Stands in for ``FunctionClient.send``; answers by (method, function name)."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Any] = {}
        self.calls: list[dict[str, Any]] = []

    def on(self, method: str, function: str, *responses: Any) -> None:
        self.routes[(method, function)] = list(responses)

    def calls_to(self, function: str, method: str | None = None) -> list[dict[str, Any]]:
        return [c for c in self.calls if c["function"] == function and (method is None or c["method"] == method)]

    async def __call__(
        self,
        method: str,
        url: str,
        *,
        headers: dict[str, str] | None = None,
        content: bytes | None = None,
    ) -> UpstreamResponse:
        parts = urlsplit(url)
        path = parts.path.split("/api/", 1)[-1].split("/")
        call = {
            "method": method,
            "url": url,
            "function": path[0],
            "segment": unquote(path[1]) if len(path) > 1 else None,
            "query": {k: v[0] for k, v in parse_qs(parts.query).items()},
            "headers": dict(headers or {}),
            "content": content,
            "body": _decoded(content),
        }
        self.calls.append(call)

        answers = self.routes.get((method, call["function"]))
        if not answers:
            return upstream(404, {"error": f"no fake for {method} {call['function']}"})
        answer = answers.pop(0) if len(answers) > 1 else answers[0]
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(call)
        return answer


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def _auth_settings():
    from onboarding.core.config import settings

    original_tenant = settings.AZURE_AD_TENANT_ID
    original_client = settings.AZURE_AD_CLIENT_ID
    settings.AZURE_AD_TENANT_ID = TEST_TENANT_ID
    settings.AZURE_AD_CLIENT_ID = TEST_CLIENT_ID
    yield
    settings.AZURE_AD_TENANT_ID = original_tenant
    settings.AZURE_AD_CLIENT_ID = original_client


@pytest.fixture
def function_settings(monkeypatch):
    from onboarding.core.config import settings

    monkeypatch.setattr(settings, "AZURE_FUNCTION_BASE_URL", TEST_FUNCTION_BASE)
    monkeypatch.setattr(settings, "AZURE_FUNCTION_CODE", TEST_FUNCTION_CODE)
    monkeypatch.setattr(settings, "AZURE_FUNCTION_KEY", "test-directory-key")
    return settings


@pytest.fixture
def fake_upstream(function_settings):
    fake = FakeUpstream()
    with patch.object(function_client, "send", new=fake):
        yield fake


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
async def async_client():
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def rsa_test_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode("utf-8")

    pub = private_key.public_key().public_numbers()
    jwk_dict = {
        "kty": "RSA",
        "kid": TEST_KID,
        "use": "sig",
        "alg": "RS256",
        "n": _int_to_base64url(pub.n),
        "e": _int_to_base64url(pub.e),
    }
    jwks_response = {"keys": [jwk_dict]}
    return private_pem, jwks_response


def _make_token(
    private_pem: str,
    *,
    oid: str = "test-oid-123",
    name: str = "Test User",
    email: str = "test@integracare.org",
    roles: list[str] | None = None,
    expired: bool = False,
    audience: str = TEST_CLIENT_ID,
    issuer: str | None = None,
) -> str:
    now = int(time.time())
    claims = {
        "oid": oid,
        "name": name,
        "preferred_username": email,
        "roles": roles or [],
        "iss": issuer or f"https://login.microsoftonline.com/{TEST_TENANT_ID}/v2.0",
        "aud": audience,
        "exp": now - 3600 if expired else now + 3600,
        "iat": now - 60,
        "nbf": now - 60,
    }
    return jwt.encode(claims, private_pem, algorithm="RS256", headers={"kid": TEST_KID})


@pytest.fixture
def mock_user_supervisor():
    return UserInfo(id="sup-1", name="Sam Supervisor", email="sam@integracare.org", roles=["supervisor"])


@pytest.fixture
def mock_user_employee():
    return UserInfo(id="emp-1", name="Erin Employee", email="erin@integracare.org", roles=["employee"])


@pytest.fixture
def mock_user_admin():
    return UserInfo(id="admin-1", name="Admin User", email="admin@integracare.org", roles=["admin"])


@pytest.fixture
def authenticated_client(mock_user_supervisor):
    app.dependency_overrides[get_current_user] = lambda: mock_user_supervisor
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def employee_client(mock_user_employee):
    app.dependency_overrides[get_current_user] = lambda: mock_user_employee
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
