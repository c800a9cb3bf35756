# link_warden/check/runner.py
"""
Process execution for the external link checker.
"""
from __future__ import annotations

import asyncio
import contextlib
from typing import Callable, Protocol, Sequence

__all__ = ("OutputCallback", "ProcessRunner", "SubprocessRunner")

#: receives the stream name (``"stdout"`` or ``"stderr"``) and a raw chunk
OutputCallback = Callable[[str, bytes], None]


class ProcessRunner(Protocol):
    async def run(self, argv: Sequence[str], on_output: OutputCallback) -> int:
        ...


class SubprocessRunner:
    """Runs a child process and streams both pipes to a callback as data arrives.

    A non-zero exit code is returned, never raised. Launch failures (missing
    binary, permission denied) propagate as :class:`OSError`. If the callback
    raises, the child is killed and reaped before the error propagates.
    """

    def __init__(self, chunk_size: int = 4096) -> None:
        self.chunk_size = chunk_size

    async def run(self, argv: Sequence[str], on_output: OutputCallback) -> int:
        if not argv:
            raise ValueError("argv must not be empty")
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            await asyncio.gather(
                self._pump("stdout", proc.stdout, on_output),
                self._pump("stderr", proc.stderr, on_output),
            )
        except BaseException:
            if proc.returncode is None:
                with contextlib.suppress(ProcessLookupError):
                    proc.kill()
            await proc.wait()
            raise
        return await proc.wait()

    async def _pump(
        self,
        name: str,
        stream: asyncio.StreamReader | None,
        on_output: OutputCallback,
    ) -> None:
        if stream is None:
            return
        while True:
            chunk = await stream.read(self.chunk_size)
            if not chunk:
                break
            on_output(name, chunk)
