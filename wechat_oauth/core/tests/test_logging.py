"""Tests for the contextual logger and JSON formatter."""

import json
import logging

from wechat_oauth.core.logging import (
    ContextualLogger,
    JSONFormatter,
    LoggerConfigurator,
    logger,
)


def test_with_context_merges_dimensions_without_mutating():
    base = logger.with_context(request_id="r1")
    child = base.with_context(flow_id="f1")

    assert base.dimensions == {"request_id": "r1"}
    assert child.dimensions == {"request_id": "r1", "flow_id": "f1"}


def test_with_prefix_keeps_dimensions():
    prefixed = logger.with_context(request_id="r1").with_prefix("WeChat: ")

    msg, kwargs = prefixed.process("hello", {})

    assert msg == "WeChat: hello"
    assert kwargs["extra"] == {"request_id": "r1"}


def test_call_site_extra_wins_over_dimensions():
    adapter = logger.with_context(step="a")
    _, kwargs = adapter.process("m", {"extra": {"step": "b"}})
    assert kwargs["extra"] == {"step": "b"}


def test_dimensions_reach_log_records(caplog):
    flow_logger = LoggerConfigurator.configure_logger(
        "wechat_oauth.tests", dimensions={"flow_id": "f1"}
    )
    assert isinstance(flow_logger, ContextualLogger)

    with caplog.at_level(logging.INFO, logger="wechat_oauth"):
        flow_logger.info("exchanging code")

    record = caplog.records[-1]
    assert record.getMessage() == "exchanging code"
    assert record.flow_id == "f1"


def test_json_formatter_renders_dimensions():
    record = logging.LogRecord(
        name="wechat_oauth",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="code %s rejected",
        args=("abc",),
        exc_info=None,
    )
    record.flow_id = "f1"

    data = json.loads(JSONFormatter().format(record))

    assert data["level"] == "WARNING"
    assert data["logger"] == "wechat_oauth"
    assert data["message"] == "code abc rejected"
    assert data["flow_id"] == "f1"
    assert "timestamp" in data
