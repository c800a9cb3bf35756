# File: tests/test_engine.py
from pathlib import Path

import pytest

from conftest import FakeProbe, FakeRunner
from link_warden.check import CheckResult
from link_warden.config import ActionSettings
from link_warden.engine import Engine, Verdict
from link_warden.readiness import Ready
from link_warden.readiness.probe import ProbeResponse

URL = "https://example.com"


def settings(tmp_path, **overrides) -> ActionSettings:
    data = {"url": URL, "muffet_path": str(tmp_path / "muffet")}
    data.update(overrides)
    return ActionSettings(**data)


def make_engine(cfg, runner, probe, tmp_path, logger) -> Engine:
    return Engine(
        cfg,
        probe_factory=lambda: probe,
        runner=runner,
        report_dir=tmp_path / "reports",
        logger=logger,
    )


@pytest.mark.asyncio
async def test_clean_run_is_successful(tmp_path, test_logger):
    runner = FakeRunner(chunks=[("stdout", b"")], exit_code=0)
    probe = FakeProbe([ProbeResponse(200, "")])
    engine = make_engine(settings(tmp_path), runner, probe, tmp_path, test_logger)

    verdict = await engine.run()

    assert verdict.success is True
    assert verdict.failed is False
    assert verdict.message == "All links are valid!"
    assert verdict.outputs() == {
        "success": "true",
        "broken-links-count": "0",
        "report-path": str(tmp_path / "reports" / "muffet-report.txt"),
    }
    assert probe.calls == []
    assert runner.calls[0][0] == str(tmp_path / "muffet")


@pytest.mark.asyncio
async def test_broken_links_fail_the_step(tmp_path, test_logger):
    output = b"https://example.com/\n\t404\thttps://example.com/x\nhttps://example.com/y\n"
    runner = FakeRunner(chunks=[("stdout", output)], exit_code=1)
    engine = make_engine(settings(tmp_path), runner, FakeProbe([]), tmp_path, test_logger)

    verdict = await engine.run()

    assert verdict.success is False
    assert verdict.failed is True
    assert verdict.broken_links_count == 2
    assert verdict.message == "Link check failed with 2 broken links"


@pytest.mark.asyncio
async def test_fail_on_error_false_keeps_step_green(tmp_path, test_logger):
    output = b"http://a.test/\nhttp://b.test/\nhttp://c.test/\n"
    runner = FakeRunner(chunks=[("stdout", output)], exit_code=1)
    cfg = settings(tmp_path, fail_on_error=False)
    engine = make_engine(cfg, runner, FakeProbe([]), tmp_path, test_logger)

    verdict = await engine.run()

    assert verdict.failed is False
    assert verdict.outputs()["success"] == "false"
    assert verdict.outputs()["broken-links-count"] == "3"


@pytest.mark.asyncio
async def test_readiness_timeout_aborts_before_check(tmp_path, test_logger):
    runner = FakeRunner()
    probe = FakeProbe([ProbeResponse(503, "")])
    cfg = settings(tmp_path, wait_for_url=True, wait_timeout=0.2, wait_interval=0.05)
    engine = make_engine(cfg, runner, probe, tmp_path, test_logger)

    verdict = await engine.run()

    assert runner.calls == []
    assert verdict.failed is True
    assert verdict.outputs() == {"success": "false", "broken-links-count": "0"}
    assert "URL not accessible" in verdict.message
    assert all(verify for _, _, verify in probe.calls)


@pytest.mark.asyncio
async def test_wait_for_content_implies_url_wait(tmp_path, test_logger):
    runner = FakeRunner(exit_code=0)
    probe = FakeProbe([ProbeResponse(200, "booting"), ProbeResponse(200, "Welcome home")])
    cfg = settings(
        tmp_path,
        wait_for_content="Welcome",
        wait_interval=0.01,
        skip_tls_verification=True,
    )
    engine = make_engine(cfg, runner, probe, tmp_path, test_logger)

    verdict = await engine.run()

    assert len(probe.calls) == 2
    assert probe.calls[0][2] is False
    assert verdict.success is True
    assert "--skip-tls-verification" in runner.calls[0]


@pytest.mark.asyncio
async def test_wait_until_ready_without_wait_options(tmp_path, test_logger):
    probe = FakeProbe([ProbeResponse(200, "")])
    engine = make_engine(settings(tmp_path), FakeRunner(), probe, tmp_path, test_logger)

    assert await engine.wait_until_ready() == Ready("")
    assert probe.calls == []


@pytest.mark.asyncio
async def test_tool_resolver_used_without_explicit_path(tmp_path, test_logger):
    installed = tmp_path / "cache" / "muffet"

    async def resolver() -> Path:
        return installed

    runner = FakeRunner()
    engine = Engine(
        ActionSettings(url=URL),
        runner=runner,
        tool_resolver=resolver,
        report_dir=tmp_path,
        logger=test_logger,
    )

    await engine.run()

    assert runner.calls[0][0] == str(installed)


def test_verdict_from_check_passes_output_through():
    result = CheckResult(exit_code=0, combined_output="ok\n", report_path="r.txt")
    verdict = Verdict.from_check(result, fail_on_error=True)
    assert verdict.output == "ok\n"
    assert verdict.failed is False
