# File: link_warden/engine.py
"""link_warden.engine: Orchestration layer: ожидание готовности, установка muffet, проверка, вердикт."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Awaitable, Callable, Dict, Optional, Union

from link_warden.check import CheckOrchestrator, CheckResult, ProcessRunner, SubprocessRunner
from link_warden.config import ActionSettings
from link_warden.installer import install_muffet
from link_warden.logger import logger as default_logger
from link_warden.logger import section
from link_warden.readiness import AiohttpProbe, HttpProbe, ReadinessOutcome, ReadinessPoller, TimedOut

__all__ = ["Engine", "Verdict"]

ToolResolver = Callable[[], Awaitable[Path]]


@dataclass(frozen=True)
class Verdict:
    """Итог шага: значения выходов и статус, который сообщается CI."""

    success: bool
    broken_links_count: int
    report_path: str
    failed: bool
    message: str
    output: str = ""

    def outputs(self) -> Dict[str, str]:
        values = {
            "success": "true" if self.success else "false",
            "broken-links-count": str(self.broken_links_count),
        }
        # no report exists when the readiness wait aborted the run
        if self.report_path:
            values["report-path"] = self.report_path
        return values

    @classmethod
    def from_timeout(cls, outcome: TimedOut) -> Verdict:
        return cls(
            success=False,
            broken_links_count=0,
            report_path="",
            failed=True,
            message=outcome.reason,
        )

    @classmethod
    def from_check(cls, result: CheckResult, *, fail_on_error: bool) -> Verdict:
        count = result.broken_link_count
        if result.success:
            message = "All links are valid!"
        else:
            message = f"Link check failed with {count} broken links"
        return cls(
            success=result.success,
            broken_links_count=count,
            report_path=result.report_path,
            failed=fail_on_error and not result.success,
            message=message,
            output=result.combined_output,
        )


class Engine:
    """Фасад для CLI и тестов: один прогон шага от ожидания URL до вердикта."""

    def __init__(
        self,
        settings: ActionSettings,
        *,
        probe_factory: Callable[[], HttpProbe] = AiohttpProbe,
        runner: Optional[ProcessRunner] = None,
        tool_resolver: Optional[ToolResolver] = None,
        report_dir: Union[str, Path, None] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.settings = settings
        self.probe_factory = probe_factory
        self.runner = runner or SubprocessRunner()
        self.tool_resolver = tool_resolver
        self.report_dir = report_dir
        self.logger = logger or default_logger

    async def wait_until_ready(self) -> ReadinessOutcome:
        """Опрашивает URL; без запрошенного ожидания сразу возвращает Ready("")."""
        config = self.settings.readiness_config()
        if not config.enabled:
            return await ReadinessPoller(self.probe_factory(), logger=self.logger).poll(config)
        with section("WAITING FOR URL TO BE READY", self.logger):
            async with self.probe_factory() as probe:
                return await ReadinessPoller(probe, logger=self.logger).poll(config)

    async def resolve_tool(self) -> Path:
        if self.settings.muffet_path:
            return Path(self.settings.muffet_path)
        if self.tool_resolver is not None:
            return await self.tool_resolver()
        return await install_muffet(runner=self.runner, logger=self.logger)

    async def run(self) -> Verdict:
        outcome = await self.wait_until_ready()
        if isinstance(outcome, TimedOut):
            return Verdict.from_timeout(outcome)
        if self.settings.wants_readiness:
            self.logger.info("URL is ready, proceeding with link check...")

        executable = await self.resolve_tool()
        orchestrator = CheckOrchestrator(self.runner, report_dir=self.report_dir, logger=self.logger)
        result = await orchestrator.run(executable, self.settings.check_config())

        verdict = Verdict.from_check(result, fail_on_error=self.settings.fail_on_error)
        if verdict.success:
            self.logger.info(verdict.message)
        else:
            self.logger.warning(
                "Found %d broken links. See report for details.", verdict.broken_links_count
            )
        return verdict
