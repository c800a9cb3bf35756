# link_warden/readiness/probe.py
"""
HTTP probe used by the readiness poller: one bounded GET per call.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Optional, Protocol

from aiohttp import ClientError, ClientSession, ClientTimeout

__all__ = ("ProbeResponse", "ProbeError", "HttpProbe", "AiohttpProbe", "PROBE_HEADERS")

PROBE_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


@dataclass(frozen=True)
class ProbeResponse:
    """Status code and decoded body of a single probe request."""

    status: int
    body: str


class ProbeError(Exception):
    """Transport-level failure: connection refused, DNS, TLS or request timeout."""


class HttpProbe(Protocol):
    async def get(self, url: str, *, timeout: float, verify_tls: bool) -> ProbeResponse:
        ...


class AiohttpProbe:
    """aiohttp-backed probe; owns one ClientSession for the lifetime of the context."""

    def __init__(self, headers: Optional[dict[str, str]] = None) -> None:
        self.headers = dict(PROBE_HEADERS if headers is None else headers)
        self.session: Optional[ClientSession] = None

    async def __aenter__(self) -> AiohttpProbe:
        self.session = ClientSession(headers=self.headers, raise_for_status=False)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    async def get(self, url: str, *, timeout: float, verify_tls: bool) -> ProbeResponse:
        if not self.session:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(
                url,
                timeout=ClientTimeout(total=timeout),
                ssl=verify_tls,
            ) as resp:
                body = await resp.text(errors="replace")
                return ProbeResponse(resp.status, body)
        except asyncio.TimeoutError as exc:
            raise ProbeError("Request timeout") from exc
        except ClientError as exc:
            raise ProbeError(str(exc) or type(exc).__name__) from exc
