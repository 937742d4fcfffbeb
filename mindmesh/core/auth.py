"""
Hosted-auth (Supabase) JWT validation OR dev-mode bypass. Controlled by FF_USE_AUTH flag.
"""

import logging
import time
from dataclasses import dataclass
from typing import Optional

import httpx
from jose import jwt, JWTError

from .config import get_settings
from .errors import ConfigError
from .flags import get_flags

logger = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    user_id: str
    email: str = ""
    role: str = "authenticated"


# Dev-mode user — returned when FF_USE_AUTH=false
DEV_USER = AuthenticatedUser(
    user_id="dev-user",
    email="dev@local",
)


class SupabaseAuthClient:
    """
    Validates access tokens issued by the hosted auth service.

    Legacy projects sign with a shared HS256 secret; newer ones publish
    asymmetric keys at /auth/v1/.well-known/jwks.json. JWKS is cached.
    """

    def __init__(self):
        self._jwks: Optional[dict] = None
        self._jwks_fetched_at: float = 0
        self._jwks_ttl: int = 600  # 10 minutes

    async def _get_jwks(self, base_url: str) -> dict:
        now = time.time()
        if self._jwks and (now - self._jwks_fetched_at) < self._jwks_ttl:
            return self._jwks

        url = f"{base_url.rstrip('/')}/auth/v1/.well-known/jwks.json"
        async with httpx.AsyncClient() as client:
            resp = await client.get(url, timeout=10)
            resp.raise_for_status()
            self._jwks = resp.json()
            self._jwks_fetched_at = now
            return self._jwks

    async def verify_token(self, token: str) -> AuthenticatedUser:
        settings = get_settings()
        allowed = [a.strip().upper() for a in settings.supabase_jwt_algorithms.split(",") if a.strip()]
        header = jwt.get_unverified_header(token)
        algorithm = str(header.get("alg", "")).upper()

        # The header is only used to pick a key; decode is pinned to the allow-list.
        if algorithm not in allowed:
            raise JWTError(f"Signing algorithm '{algorithm or 'none'}' not allowed")

        if algorithm.startswith("HS"):
            if not settings.supabase_jwt_secret:
                raise ConfigError("Auth not configured. Set SUPABASE_JWT_SECRET.")
            key = settings.supabase_jwt_secret
            algorithms = [a for a in allowed if a.startswith("HS")]
        else:
            algorithms = [a for a in allowed if not a.startswith("HS")]
            if not settings.supabase_url:
                raise ConfigError("Auth not configured. Set SUPABASE_URL.")
            jwks = await self._get_jwks(settings.supabase_url)
            key = None
            for candidate in jwks.get("keys", []):
                if candidate.get("kid") == header.get("kid"):
                    key = candidate
                    break
            if not key:
                raise JWTError("Unable to find matching key in JWKS")

        payload = jwt.decode(
            token,
            key,
            algorithms=algorithms,
            audience=settings.supabase_jwt_audience,
        )

        return AuthenticatedUser(
            user_id=payload.get("sub", ""),
            email=payload.get("email", ""),
            role=payload.get("role", "authenticated"),
        )


# Singleton
_auth_client = SupabaseAuthClient()


async def get_current_user(authorization: str = "") -> AuthenticatedUser:
    """
    Resolve the current user from the Authorization header.
    If FF_USE_AUTH is false, returns a dev user.
    """
    flags = get_flags()

    if not flags.use_auth:
        return DEV_USER

    if not authorization:
        raise PermissionError("Unauthorized - please sign in")

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise PermissionError("Invalid Authorization header. Use: Bearer <token>")

    try:
        user = await _auth_client.verify_token(token)
    except (JWTError, httpx.HTTPError) as e:
        raise PermissionError(f"Invalid token: {e}")

    if not user.user_id:
        raise PermissionError("Token missing sub claim")

    return user
