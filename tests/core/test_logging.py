from __future__ import annotations

import logging

from oauth_consent.core.logging import _ContainerFormatter, setup_logging
from oauth_consent.middleware.request_context import RequestContextFilter


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_httpx_at_debug() -> None:
    # httpx logs full request URLs, which include the PKCE challenge.
    setup_logging("debug")
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("uvicorn").level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_setup_logging_installs_request_context_filter() -> None:
    setup_logging("info")
    assert any(
        isinstance(f, RequestContextFilter)
        for handler in logging.getLogger().handlers
        for f in handler.filters
    )


def _record(level: int, msg: str, lineno: int = 1) -> logging.LogRecord:
    return logging.LogRecord(
        name="oauth_consent.test",
        level=level,
        pathname="consent.py",
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO, "page rendered"))
    assert "page rendered" in output
    assert "[consent.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "upstream 500", 42))
    assert "upstream 500" in output
    assert "[consent.py:42]" in output
