# link_warden/readiness/poller.py
"""
Readiness poller: wait until a URL answers HTTP 200 (and, optionally, its body
matches a pattern) within a deadline.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Union

from link_warden.config import ReadinessConfig
from link_warden.logger import logger as default_logger
from link_warden.readiness.probe import HttpProbe, ProbeError

__all__ = ("Ready", "TimedOut", "ReadinessOutcome", "ReadinessPoller", "ATTEMPT_TIMEOUT")

ATTEMPT_TIMEOUT: float = 30.0


@dataclass(frozen=True)
class Ready:
    """The URL answered 200 and, if required, matched the content pattern."""

    body: str = ""


@dataclass(frozen=True)
class TimedOut:
    """The deadline elapsed without a successful attempt."""

    elapsed: float
    reason: str


ReadinessOutcome = Union[Ready, TimedOut]


class ReadinessPoller:
    """Strictly sequential retry loop bounded by ``config.timeout``.

    Transport errors, non-200 statuses and non-matching bodies are soft
    failures: they are logged and retried. Only the deadline ends the loop
    with :class:`TimedOut`; the poller never raises on network errors.
    """

    def __init__(
        self,
        probe: HttpProbe,
        *,
        logger: Optional[logging.Logger] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        attempt_timeout: float = ATTEMPT_TIMEOUT,
    ) -> None:
        self.probe = probe
        self.logger = logger or default_logger
        self._clock = clock
        self._sleep = sleep
        self.attempt_timeout = attempt_timeout
        self.attempts = 0

    async def poll(self, config: ReadinessConfig) -> ReadinessOutcome:
        self.attempts = 0
        if not config.enabled:
            return Ready("")

        pattern = config.compiled_pattern
        self.logger.info("Waiting for URL to be ready: %s", config.target_url)
        if pattern is not None:
            self.logger.info("Looking for content matching: %s", config.content_pattern)
        self.logger.info("Timeout: %gs, Interval: %gs", config.timeout, config.interval)

        start = self._clock()
        while self._clock() - start < config.timeout:
            elapsed = self._clock() - start
            self.attempts += 1
            self.logger.info("Attempt %d (%ds elapsed)...", self.attempts, round(elapsed))

            body = await self._attempt(config)
            if body is not None:
                if pattern is None:
                    return Ready(body)
                if pattern.search(body):
                    self.logger.info("Content match found!")
                    return Ready(body)
                self.logger.info("Content not yet matching, will retry...")

            remaining = config.timeout - (self._clock() - start)
            if remaining <= 0:
                break
            await self._sleep(min(config.interval, remaining))

        elapsed = self._clock() - start
        total = round(elapsed)
        if pattern is not None:
            reason = f"Timeout after {total}s: Content matching '{config.content_pattern}' not found"
        else:
            reason = f"Timeout after {total}s: URL not accessible"
        self.logger.error(reason)
        return TimedOut(elapsed=elapsed, reason=reason)

    async def _attempt(self, config: ReadinessConfig) -> Optional[str]:
        """One GET; returns the body on HTTP 200, ``None`` on any soft failure."""
        try:
            resp = await self.probe.get(
                config.target_url,
                timeout=self.attempt_timeout,
                verify_tls=not config.skip_tls_verify,
            )
        except (ProbeError, OSError, asyncio.TimeoutError) as exc:
            self.logger.info("Request failed: %s, will retry...", exc)
            return None

        if resp.status != 200:
            self.logger.info("HTTP %d, will retry...", resp.status)
            return None
        self.logger.info("URL is accessible (HTTP %d)", resp.status)
        return resp.body
