"""Tests for the structlog configuration."""

import json

import pytest
import structlog

from netpluginspect.core.logging import bind_run_context, configure_logging, get_logger


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


def test_records_go_to_stderr_as_json(capsys):
    configure_logging("INFO")
    bind_run_context(plugin="acme/netplug:1.0")

    get_logger("netpluginspect.test").info("Plugin installed", attempts=1)

    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["event"] == "Plugin installed"
    assert record["plugin"] == "acme/netplug:1.0"
    assert record["level"] == "info"


def test_level_filters_debug(capsys):
    configure_logging("WARNING")
    get_logger("netpluginspect.test").debug("Running command", command="docker ps")
    assert capsys.readouterr().err == ""
