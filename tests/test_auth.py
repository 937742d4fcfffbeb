import time

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import jwk, jwt

from mindmesh.core import auth
from mindmesh.core.auth import DEV_USER, get_current_user
from mindmesh.core.errors import ConfigError

SECRET = "test-jwt-secret"


def _token(sub="user-123", aud="authenticated", secret=SECRET, **claims):
    payload = {"sub": sub, "aud": aud, "email": "ada@example.com", "exp": int(time.time()) + 300}
    payload.update(claims)
    return jwt.encode(payload, secret, algorithm="HS256")


@pytest.fixture
def auth_on(monkeypatch):
    monkeypatch.setenv("FF_USE_AUTH", "true")
    monkeypatch.setenv("SUPABASE_JWT_SECRET", SECRET)


async def test_dev_user_when_auth_disabled():
    assert await get_current_user("") == DEV_USER


async def test_valid_token_resolves_user(auth_on):
    user = await get_current_user(f"Bearer {_token()}")
    assert user.user_id == "user-123"
    assert user.email == "ada@example.com"


async def test_missing_header_is_rejected(auth_on):
    with pytest.raises(PermissionError, match="Unauthorized"):
        await get_current_user("")


async def test_wrong_scheme_is_rejected(auth_on):
    with pytest.raises(PermissionError):
        await get_current_user(f"Token {_token()}")


async def test_bad_signature_is_rejected(auth_on):
    with pytest.raises(PermissionError, match="Invalid token"):
        await get_current_user(f"Bearer {_token(secret='someone-else')}")


async def test_wrong_audience_is_rejected(auth_on):
    with pytest.raises(PermissionError):
        await get_current_user(f"Bearer {_token(aud='anon')}")


async def test_expired_token_is_rejected(auth_on):
    with pytest.raises(PermissionError):
        await get_current_user(f"Bearer {_token(exp=int(time.time()) - 60)}")


async def test_missing_secret_is_config_error(monkeypatch):
    monkeypatch.setenv("FF_USE_AUTH", "true")
    monkeypatch.setenv("SUPABASE_JWT_SECRET", "")

    with pytest.raises(ConfigError):
        await get_current_user(f"Bearer {_token()}")


async def test_disallowed_algorithm_is_401_not_config_error(auth_on):
    token = jwt.encode(
        {"sub": "user-123", "aud": "authenticated", "exp": int(time.time()) + 300},
        SECRET, algorithm="HS512",
    )
    with pytest.raises(PermissionError, match="not allowed"):
        await get_current_user(f"Bearer {token}")


async def test_unsigned_token_is_rejected(auth_on):
    with pytest.raises(PermissionError):
        await get_current_user("Bearer not-a-jwt")


# ── Asymmetric keys (JWKS) ───────────────────────────────────────────

@pytest.fixture
def rsa_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = "key-1"
    return private_pem, public_jwk


@pytest.fixture
def jwks_on(monkeypatch, rsa_keys):
    monkeypatch.setenv("FF_USE_AUTH", "true")
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.co")
    fetched = []

    async def fake_get_jwks(base_url):
        fetched.append(base_url)
        return {"keys": [rsa_keys[1]]}

    monkeypatch.setattr(auth._auth_client, "_get_jwks", fake_get_jwks)
    return fetched


def _rs256_token(private_pem, kid="key-1"):
    payload = {"sub": "user-rsa", "aud": "authenticated", "exp": int(time.time()) + 300}
    return jwt.encode(payload, private_pem, algorithm="RS256", headers={"kid": kid})


async def test_rs256_token_verified_with_jwks(jwks_on, rsa_keys):
    user = await get_current_user(f"Bearer {_rs256_token(rsa_keys[0])}")

    assert user.user_id == "user-rsa"
    assert jwks_on == ["https://project.supabase.co"]


async def test_unknown_key_id_is_rejected(jwks_on, rsa_keys):
    with pytest.raises(PermissionError, match="matching key"):
        await get_current_user(f"Bearer {_rs256_token(rsa_keys[0], kid='rotated')}")


async def test_rs256_without_project_url_is_config_error(monkeypatch, rsa_keys):
    monkeypatch.setenv("FF_USE_AUTH", "true")
    monkeypatch.setenv("SUPABASE_URL", "")

    with pytest.raises(ConfigError):
        await get_current_user(f"Bearer {_rs256_token(rsa_keys[0])}")
