# File: tests/test_config.py
import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from link_warden.config import (
    ActionSettings,
    CheckConfig,
    ReadinessConfig,
    load_config,
    split_patterns,
)


def write_file(tmp_path: Path, content: str, suffix: str) -> Path:
    path = tmp_path / f"config{suffix}"
    path.write_text(content, encoding="utf-8")
    return path


@pytest.mark.parametrize(
    "content,suffix,expect_exc",
    [
        ("url: http://example.com\nmax-connections: 20", ".yaml", None),
        (json.dumps({"url": "http://example.com", "max-connections": 20}), ".json", None),
        ("{}", ".json", ValidationError),
        ("not: a: mapping", ".yaml", ValueError),
        ("::invalid yaml", ".yml", TypeError),
        ("[1, 2]", ".json", TypeError),
        ("url = 'x'", ".toml", ValueError),
    ],
)
def test_load_config_variants(tmp_path, content, suffix, expect_exc):
    cfg_path = write_file(tmp_path, content, suffix)
    if expect_exc:
        with pytest.raises(expect_exc):
            load_config(cfg_path)
    else:
        cfg = load_config(cfg_path)
        assert isinstance(cfg, ActionSettings)
        assert cfg.url == "http://example.com"
        assert cfg.max_connections == 20


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


def test_unknown_key_is_rejected(tmp_path):
    cfg_path = write_file(tmp_path, "url: http://example.com\nmax-pages: 3", ".yaml")
    with pytest.raises(ValidationError):
        load_config(cfg_path)


def test_overrides_win_over_file(tmp_path):
    cfg_path = write_file(
        tmp_path,
        "url: http://example.com\ntimeout: 10\nfail-on-error: false\nexclude: |\n  a.com\n  b.com\n",
        ".yaml",
    )
    cfg = load_config(cfg_path, {"timeout": 45, "fail_on_error": None, "url": None})
    assert cfg.timeout == 45
    assert cfg.fail_on_error is False
    assert cfg.url == "http://example.com"
    assert cfg.exclude == ("a.com", "b.com")


def test_defaults_without_file():
    cfg = load_config(None, {"url": "https://example.com"})
    assert cfg.timeout == 30
    assert cfg.max_connections == 10
    assert cfg.max_connections_per_host == 5
    assert cfg.buffer_size == 16384
    assert cfg.max_redirects == 10
    assert cfg.include_browser_headers is True
    assert cfg.skip_tls_verification is False
    assert cfg.fail_on_error is True
    assert cfg.wait_timeout == 300
    assert cfg.wait_interval == 5
    assert cfg.wants_readiness is False


@pytest.mark.parametrize("bad", ["example.com", "ftp://example.com", "https://", ""])
def test_url_must_be_http(bad):
    with pytest.raises(ValidationError):
        ActionSettings(url=bad)


@pytest.mark.parametrize("field", ["timeout", "max_connections", "buffer_size", "max_redirects"])
def test_numeric_fields_must_be_positive(field):
    with pytest.raises(ValidationError):
        CheckConfig(target_url="https://example.com", **{field: 0})


def test_split_patterns():
    assert split_patterns("a\n  \nb ") == ("a", "b")
    assert split_patterns(["  ", "foo.com", ""]) == ("foo.com",)
    assert split_patterns(None) == ()


def test_content_pattern_implies_reachable():
    cfg = ReadinessConfig(target_url="https://example.com", content_pattern="ready")
    assert cfg.require_reachable is True
    assert cfg.enabled is True
    assert cfg.compiled_pattern.search("is ready now")


def test_empty_content_pattern_is_none():
    cfg = ReadinessConfig(target_url="https://example.com", content_pattern="")
    assert cfg.content_pattern is None
    assert cfg.enabled is False


def test_invalid_content_pattern():
    with pytest.raises(ValidationError):
        ReadinessConfig(target_url="https://example.com", content_pattern="(unclosed")


@pytest.mark.parametrize("field,value", [("timeout", 0), ("interval", -1)])
def test_readiness_durations_positive(field, value):
    with pytest.raises(ValidationError):
        ReadinessConfig(target_url="https://example.com", **{field: value})


def test_projections():
    settings = ActionSettings(
        url="https://example.com",
        wait_for_content="Welcome",
        wait_timeout=60,
        wait_interval=2,
        skip_tls_verification=True,
        exclude="x.com\n\ny.com",
        verbose=True,
    )
    readiness = settings.readiness_config()
    check = settings.check_config()

    assert settings.wants_readiness is True
    assert readiness.require_reachable is True
    assert readiness.timeout == 60
    assert readiness.interval == 2
    assert readiness.skip_tls_verify is True
    assert check.exclude_patterns == ("x.com", "y.com")
    assert check.skip_tls_verify is True
    assert check.verbose is True


def test_settings_are_frozen():
    settings = ActionSettings(url="https://example.com")
    with pytest.raises(ValidationError):
        settings.timeout = 5


@pytest.mark.parametrize("value", ["   ", "\n\t"])
def test_blank_wait_for_content_disables_waiting(value):
    settings = ActionSettings(url="https://example.com", wait_for_content=value)
    assert settings.wait_for_content == ""
    assert settings.wants_readiness is False
    assert settings.readiness_config().enabled is False


def test_wait_for_content_is_trimmed():
    settings = ActionSettings(url="https://example.com", wait_for_content="  build 42 \n")
    assert settings.readiness_config().content_pattern == "build 42"
