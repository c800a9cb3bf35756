# File: tests/test_runner.py
"""SubprocessRunner against real child processes (the Python interpreter itself)."""
import asyncio
import os
import sys

import pytest

from link_warden.check.runner import SubprocessRunner

SCRIPT = (
    "import sys\n"
    "sys.stdout.write('https://example.com/a\\n'); sys.stdout.flush()\n"
    "sys.stderr.write('oops\\n'); sys.stderr.flush()\n"
    "sys.exit(3)\n"
)


@pytest.mark.asyncio
async def test_non_zero_exit_is_returned_not_raised():
    received = []
    code = await SubprocessRunner().run(
        [sys.executable, "-c", SCRIPT], lambda name, chunk: received.append((name, chunk))
    )

    assert code == 3
    stdout = b"".join(c for n, c in received if n == "stdout")
    stderr = b"".join(c for n, c in received if n == "stderr")
    assert stdout.replace(b"\r\n", b"\n") == b"https://example.com/a\n"
    assert stderr.replace(b"\r\n", b"\n") == b"oops\n"


@pytest.mark.asyncio
async def test_large_output_is_streamed_in_chunks():
    received = []
    script = "import sys; sys.stdout.write('x' * 100000)"
    code = await SubprocessRunner(chunk_size=1024).run(
        [sys.executable, "-c", script], lambda name, chunk: received.append(chunk)
    )

    assert code == 0
    assert len(received) > 1
    assert sum(len(c) for c in received) == 100000


@pytest.mark.asyncio
async def test_missing_binary_raises_os_error(tmp_path):
    with pytest.raises(OSError):
        await SubprocessRunner().run([str(tmp_path / "no-such-muffet")], lambda *_: None)


@pytest.mark.asyncio
async def test_empty_argv_is_rejected():
    with pytest.raises(ValueError):
        await SubprocessRunner().run([], lambda *_: None)


@pytest.mark.asyncio
@pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX signal 0 to check the pid")
async def test_child_is_killed_when_callback_fails():
    script = "import os, time; print(os.getpid(), flush=True); time.sleep(60)"
    seen = bytearray()

    def on_output(name, chunk):
        seen.extend(chunk)
        if b"\n" in seen:
            raise RuntimeError("console closed")

    with pytest.raises(RuntimeError, match="console closed"):
        await asyncio.wait_for(SubprocessRunner().run([sys.executable, "-c", script], on_output), 30)

    pid = int(seen.split(b"\n", 1)[0])
    with pytest.raises(ProcessLookupError):
        os.kill(pid, 0)
