"""link_warden.readiness: ожидание готовности целевого URL перед проверкой ссылок."""

from .poller import ReadinessOutcome, ReadinessPoller, Ready, TimedOut
from .probe import AiohttpProbe, HttpProbe, ProbeError, ProbeResponse

__all__ = [
    "AiohttpProbe",
    "HttpProbe",
    "ProbeError",
    "ProbeResponse",
    "ReadinessOutcome",
    "ReadinessPoller",
    "Ready",
    "TimedOut",
]
