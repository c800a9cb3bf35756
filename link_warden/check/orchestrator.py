# link_warden/check/orchestrator.py
"""
Check orchestration: Build → Execute → Classify → Persist, once per run.
"""
from __future__ import annotations

import codecs
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, TextIO, Union

from link_warden.check.arguments import build_arguments
from link_warden.check.classify import count_broken_links
from link_warden.check.runner import ProcessRunner
from link_warden.config import CheckConfig
from link_warden.logger import logger as default_logger
from link_warden.logger import section

__all__ = ("CheckResult", "CheckOrchestrator", "REPORT_DIRNAME", "REPORT_FILENAME", "default_report_dir")

REPORT_DIRNAME = ".linkcheck"
REPORT_FILENAME = "muffet-report.txt"


def default_report_dir() -> Path:
    """``$GITHUB_WORKSPACE/.linkcheck``, or ``./.linkcheck`` outside of CI."""
    return Path(os.environ.get("GITHUB_WORKSPACE") or ".") / REPORT_DIRNAME


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one muffet run. The broken-link count is always derived from the output."""

    exit_code: int
    combined_output: str
    report_path: str

    @property
    def broken_link_count(self) -> int:
        return count_broken_links(self.combined_output)

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class _Tee:
    """Collects decoded chunks in arrival order and mirrors them to the console.

    A console stream that fails to write is dropped from mirroring; capture
    continues so the report and the classification stay complete.
    """

    def __init__(self, streams: Dict[str, TextIO], logger: logging.Logger) -> None:
        self.streams = streams
        self.logger = logger
        self.parts: List[str] = []
        self._broken: Set[str] = set()
        self._decoders = {
            name: codecs.getincrementaldecoder("utf-8")(errors="replace") for name in streams
        }

    def __call__(self, name: str, chunk: bytes) -> None:
        text = self._decoders[name].decode(chunk)
        self._emit(name, text)

    def close(self) -> None:
        for name, decoder in self._decoders.items():
            self._emit(name, decoder.decode(b"", final=True))

    def _emit(self, name: str, text: str) -> None:
        if not text:
            return
        self.parts.append(text)
        if name in self._broken:
            return
        stream = self.streams[name]
        try:
            stream.write(text)
            stream.flush()
        except OSError as exc:
            self._broken.add(name)
            self.logger.warning("Cannot mirror muffet %s to console: %s", name, exc)

    @property
    def text(self) -> str:
        return "".join(self.parts)


class CheckOrchestrator:
    """Runs the external link checker exactly once and classifies its output."""

    def __init__(
        self,
        runner: ProcessRunner,
        *,
        report_dir: Union[str, Path, None] = None,
        logger: Optional[logging.Logger] = None,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
    ) -> None:
        self.runner = runner
        self.report_dir = Path(report_dir) if report_dir is not None else default_report_dir()
        self.logger = logger or default_logger
        self.stdout = stdout
        self.stderr = stderr

    async def run(self, executable: Union[str, Path], config: CheckConfig) -> CheckResult:
        args = build_arguments(config)
        with section("Muffet Configuration", self.logger):
            self.logger.info("URL: %s", config.target_url)
            self.logger.info("Arguments: %s", " ".join(args))

        report_path = self.report_dir / REPORT_FILENAME
        tee = _Tee({
            "stdout": self.stdout or sys.stdout,
            "stderr": self.stderr or sys.stderr,
        }, self.logger)

        with section("Link Check Results", self.logger):
            try:
                exit_code = await self.runner.run([str(executable), *args], tee)
            except OSError as exc:
                self.logger.warning("Muffet execution error: %s", exc)
                exit_code = 1
            finally:
                tee.close()

        output = tee.text
        self._write_report(report_path, output)

        result = CheckResult(exit_code=exit_code, combined_output=output, report_path=str(report_path))
        self.logger.info(
            "Muffet exited with code %d, broken links: %d", result.exit_code, result.broken_link_count
        )
        return result

    @staticmethod
    def _write_report(path: Path, output: str) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the tool's line endings byte for byte
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(output)
