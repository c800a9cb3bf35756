# File: tests/conftest.py
import logging
from typing import List, Optional, Sequence, Tuple

import pytest

from link_warden.config import ActionSettings
from link_warden.readiness.probe import ProbeResponse


class FakeClock:
    """Deterministic monotonic clock; ``sleep`` advances time instead of waiting."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeProbe:
    """
    Scripted probe. Each item is a ProbeResponse or an exception to raise;
    the last item repeats once the script is exhausted.
    """

    def __init__(self, script, clock: Optional[FakeClock] = None, latency: float = 0.0) -> None:
        self.script = list(script)
        self.clock = clock
        self.latency = latency
        self.calls: List[Tuple[str, float, bool]] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def get(self, url: str, *, timeout: float, verify_tls: bool) -> ProbeResponse:
        self.calls.append((url, timeout, verify_tls))
        if self.clock is not None:
            self.clock.now += self.latency
        item = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(item, BaseException):
            raise item
        return item


class FakeRunner:
    """Replays (stream, bytes) chunks through the callback and returns a fixed exit code."""

    def __init__(
        self,
        chunks: Sequence[Tuple[str, bytes]] = (),
        exit_code: int = 0,
        error: Optional[BaseException] = None,
    ) -> None:
        self.chunks = list(chunks)
        self.exit_code = exit_code
        self.error = error
        self.calls: List[List[str]] = []

    async def run(self, argv, on_output) -> int:
        self.calls.append(list(argv))
        if self.error is not None:
            raise self.error
        for name, data in self.chunks:
            on_output(name, data)
        return self.exit_code


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def test_logger() -> logging.Logger:
    """A propagating logger so that caplog sees component output."""
    lg = logging.getLogger("link_warden.tests")
    lg.setLevel(logging.DEBUG)
    lg.propagate = True
    return lg


@pytest.fixture()
def basic_settings(tmp_path) -> ActionSettings:
    """Settings with an explicit muffet path so no installation is attempted."""
    return ActionSettings(
        url="https://example.com",
        muffet_path=str(tmp_path / "muffet"),
    )
