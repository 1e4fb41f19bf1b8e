"""
Tests for Turn client logging and log sanitizing.
"""

import io
import logging

from hypothesis import given, settings
from hypothesis import strategies as st

from turnclient.logging import (
    LOG_MAX_LENGTH,
    TRUNCATION_MARKER,
    configure_logging,
    get_logger,
    log_http_request,
    log_http_response,
    safe_log_dict,
    sanitize_for_log,
)

CONTROL_CHARS = [chr(c) for c in range(0x20)] + ["\x7f"]


@given(value=st.text(max_size=400))
@settings(max_examples=200)
def test_property_no_raw_control_characters(value: str) -> None:
    """
    Sanitized output never contains a raw control character, whatever the input.
    """
    result = sanitize_for_log(value)

    for char in CONTROL_CHARS:
        assert char not in result, f"raw control character {char!r} in {result!r}"


@given(value=st.text(max_size=400))
@settings(max_examples=200)
def test_property_truncation_marker_iff_input_too_long(value: str) -> None:
    """
    The marker is appended exactly when the input exceeded the cap, and at most
    LOG_MAX_LENGTH input characters survive (each may expand to a 2-char escape).
    """
    result = sanitize_for_log(value)

    if len(value) > LOG_MAX_LENGTH:
        assert result.endswith(TRUNCATION_MARKER)
        assert len(result) <= 2 * LOG_MAX_LENGTH + len(TRUNCATION_MARKER)
    else:
        assert len(result) <= 2 * len(value)


@given(
    value=st.text(
        alphabet=st.characters(blacklist_categories=("Cc", "Cs")),
        max_size=LOG_MAX_LENGTH,
    )
)
@settings(max_examples=100)
def test_property_printable_short_input_unchanged(value: str) -> None:
    """Short input without control characters passes through untouched."""
    assert sanitize_for_log(value) == value


def test_long_string_with_newlines_and_nul() -> None:
    value = "line1\nline2\rnul\x00end" + "x" * 250
    result = sanitize_for_log(value)

    assert "\n" not in result
    assert "\r" not in result
    assert "\x00" not in result
    assert result.startswith("line1\\nline2\\rnulend")
    assert result.endswith(TRUNCATION_MARKER)
    # 100 input characters kept, minus the dropped NUL, plus 2 escape backslashes
    assert len(result) == 100 - 1 + 2 + len(TRUNCATION_MARKER)


def test_tab_is_escaped_and_del_dropped() -> None:
    assert sanitize_for_log("a\tb\x7fc") == "a\\tbc"


def test_truncation_never_splits_characters() -> None:
    value = "é" * 150
    result = sanitize_for_log(value)

    assert result == "é" * 100 + TRUNCATION_MARKER


def test_custom_max_length() -> None:
    assert sanitize_for_log("abcdef", max_length=3) == "abc" + TRUNCATION_MARKER


def test_safe_log_dict_masks_authorization() -> None:
    headers = {
        "Authorization": "Bearer ghp_secret",
        "User-Agent": "turnclient/1.1",
        "Cache-Control": "no-cache",
    }

    safe = safe_log_dict(headers)

    assert safe["Authorization"] == "[REDACTED]"
    assert safe["User-Agent"] == "turnclient/1.1"
    assert safe["Cache-Control"] == "no-cache"


def test_safe_log_dict_nested() -> None:
    data = {"outer": {"token": "abc", "name": "line\nbreak"}}

    safe = safe_log_dict(data)

    assert safe["outer"]["token"] == "[REDACTED]"
    assert safe["outer"]["name"] == "line\\nbreak"


def test_log_http_request_never_contains_token(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="turnclient.http")

    log_http_request(
        "POST",
        "https://turn.example.test/v1/validate",
        {"Authorization": "Bearer ghp_supersecret"},
    )

    assert "ghp_supersecret" not in caplog.text
    assert "POST https://turn.example.test/v1/validate" in caplog.text


def test_log_http_response_reports_size(caplog) -> None:
    caplog.set_level(logging.DEBUG, logger="turnclient.http")

    log_http_response(503, "https://turn.example.test/v1/validate", size=42, elapsed_ms=1.5)

    assert "Response 503" in caplog.text
    assert "size=42" in caplog.text


def test_http_logging_skipped_when_disabled(caplog) -> None:
    caplog.set_level(logging.WARNING, logger="turnclient.http")

    log_http_request("GET", "https://api.github.com/user")

    assert caplog.records == []


def test_get_logger_names() -> None:
    assert get_logger().name == "turnclient"
    assert get_logger("http").name == "turnclient.http"
    assert get_logger("client").name == "turnclient.client"


def test_configure_logging_with_custom_handler() -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    logger = get_logger()
    previous_level = logger.level

    try:
        configure_logging(level=logging.DEBUG, handler=handler, format_string="%(name)s:%(message)s")
        get_logger("client").debug("retrying request (attempt 1): boom")

        assert "turnclient.client:retrying request (attempt 1): boom" in stream.getvalue()
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)
        get_logger("http").setLevel(logging.NOTSET)


def test_package_import_is_silent_by_default() -> None:
    import turnclient

    assert turnclient.get_logger is get_logger
    assert turnclient.TurnClient.__module__ == "turnclient.client"
    assert any(isinstance(h, logging.NullHandler) for h in get_logger().handlers)
