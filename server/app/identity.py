"""Identity provider clients and the process-wide identity session."""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional, Protocol

import httpx

from pairing.errors import IdentityUnavailable

from .config import (
    get_identity_ready_timeout,
    get_identity_static_tokens,
    get_identity_timeout,
    get_identity_verify_url,
)

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    async def verify_token(self, token: str) -> Optional[str]:
        """Return the stable user id behind ``token`` or ``None`` if it is invalid."""
        ...

    async def aclose(self) -> None:
        ...


class HttpIdentityProvider:
    """Verifies bearer tokens against the identity provider's HTTP endpoint."""

    def __init__(
        self,
        verify_url: str,
        *,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.verify_url = verify_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def verify_token(self, token: str) -> Optional[str]:
        try:
            response = await self._client.get(
                self.verify_url, headers={"Authorization": f"Bearer {token}"}
            )
        except httpx.HTTPError as exc:
            logger.warning("Identity provider request failed: %s", exc)
            raise IdentityUnavailable(str(exc)) from exc

        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            logger.error("GET %s -> %s", self.verify_url, response.status_code)
            raise IdentityUnavailable(f"identity provider answered {response.status_code}")
        try:
            payload = response.json()
        except ValueError as exc:
            raise IdentityUnavailable("identity provider returned invalid JSON") from exc
        if not isinstance(payload, dict):
            return None
        uid = payload.get("uid") or payload.get("user_id")
        return str(uid) if uid else None

    async def aclose(self) -> None:
        await self._client.aclose()


class StaticIdentityProvider:
    """Token table provider for local development and tests."""

    def __init__(self, tokens: Optional[Dict[str, str]] = None) -> None:
        self._tokens = dict(tokens or {})

    async def verify_token(self, token: str) -> Optional[str]:
        return self._tokens.get(token)

    async def aclose(self) -> None:
        return None


def create_identity_provider() -> IdentityProvider:
    verify_url = get_identity_verify_url()
    if verify_url:
        return HttpIdentityProvider(verify_url, timeout=get_identity_timeout())
    tokens = get_identity_static_tokens()
    if not tokens:
        logger.warning("No identity provider configured: every request will be rejected")
    return StaticIdentityProvider(tokens)


def parse_bearer(authorization: Optional[str]) -> Optional[str]:
    scheme, _, token = (authorization or "").strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


class IdentitySession:
    """Holds the identity provider for the lifetime of the process.

    ``initialize`` and ``teardown`` are called from the application's startup
    and shutdown hooks. Request handlers await :meth:`wait_ready` once
    instead of polling for the provider to appear, and only hand the
    resolved user id on to the pairing engine.
    """

    def __init__(self) -> None:
        self._provider: Optional[IdentityProvider] = None
        self._ready = asyncio.Event()

    @property
    def is_ready(self) -> bool:
        return self._ready.is_set()

    def initialize(self, provider: Optional[IdentityProvider] = None) -> None:
        self._provider = provider or create_identity_provider()
        self._ready.set()
        logger.info("Identity session ready (%s)", type(self._provider).__name__)

    async def teardown(self) -> None:
        provider, self._provider = self._provider, None
        self._ready.clear()
        if provider is not None:
            await provider.aclose()

    async def wait_ready(self, timeout: Optional[float] = None) -> IdentityProvider:
        if not self._ready.is_set():
            wait_for = get_identity_ready_timeout() if timeout is None else timeout
            try:
                await asyncio.wait_for(self._ready.wait(), timeout=wait_for)
            except asyncio.TimeoutError as exc:
                raise IdentityUnavailable("identity session is not ready") from exc
        if self._provider is None:
            raise IdentityUnavailable("identity session was torn down")
        return self._provider

    async def authenticate(self, authorization: Optional[str]) -> Optional[str]:
        """Return the requester id for an ``Authorization`` header, or ``None``."""

        provider = await self.wait_ready()
        token = parse_bearer(authorization)
        if token is None:
            return None
        return await provider.verify_token(token)


__all__ = [
    "IdentityProvider",
    "HttpIdentityProvider",
    "StaticIdentityProvider",
    "IdentitySession",
    "create_identity_provider",
    "parse_bearer",
]
