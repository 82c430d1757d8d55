"""
Property-based tests for the Audit Logger module.

Uses Hypothesis to check output formats, secret masking, error context
and level filtering.
"""

import json
from io import StringIO

from hypothesis import given, settings, assume
from hypothesis import strategies as st

from domain_scout.audit_logger import AuditLogger, LoggingMixin
from domain_scout.enums import LogLevel
from domain_scout.exceptions import NetworkError


SENSITIVE_PATTERNS = [
    'token', 'secret', 'password', 'api_key', 'apikey', 'auth',
    'credential', 'api_user',
]


@st.composite
def component_name_strategy(draw) -> str:
    """Generate valid component names."""
    return draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-"),
        min_size=1,
        max_size=30,
    ))


@st.composite
def message_strategy(draw) -> str:
    """Generate single-line log messages."""
    return draw(st.text(
        alphabet=st.characters(
            whitelist_categories=('L', 'N', 'P', 'S', 'Zs'),
            blacklist_characters='\x00\n\r',
        ),
        min_size=1,
        max_size=100,
    ))


@st.composite
def non_sensitive_key_strategy(draw) -> str:
    """Generate keys that are NOT sensitive."""
    key = draw(st.text(
        alphabet=st.sampled_from("abcdefghijklmnopqrstuvwxyz_"),
        min_size=1,
        max_size=20,
    ))
    for pattern in SENSITIVE_PATTERNS:
        assume(pattern not in key)
    return key


@st.composite
def sensitive_key_strategy(draw) -> str:
    """Generate keys that ARE sensitive (registrar credentials and the like)."""
    base = draw(st.sampled_from([
        'api_key', 'apikey', 'secret_key', 'api_secret', 'cron_secret',
        'hmac_secret', 'token', 'authorization', 'password', 'api_user',
    ]))
    prefix = draw(st.sampled_from(['', 'porkbun_', 'godaddy_', 'namecheap_']))
    return f"{prefix}{base}"


class TestDualFormatProperty:
    """Log entries are written as JSON, text, or both."""

    @given(
        level=st.sampled_from(list(LogLevel)),
        component=component_name_strategy(),
        message=message_strategy(),
    )
    @settings(max_examples=100)
    def test_dual_format_produces_both_outputs(
        self,
        level: LogLevel,
        component: str,
        message: str,
    ) -> None:
        """
        *For any* entry with output_format "both", one JSON line and one
        text line are written.
        """
        output = StringIO()
        logger = AuditLogger(output_format="both", output_stream=output, level="debug")

        logger.log(level, component, message, {"domain": "tapr.com"})

        lines = output.getvalue().strip().split('\n')
        assert len(lines) == 2

        parsed = json.loads(lines[0])
        assert parsed["level"] == level.value
        assert parsed["component"] == component
        assert parsed["message"] == message
        assert parsed["data"] == {"domain": "tapr.com"}
        assert "timestamp" in parsed

        assert level.value.upper() in lines[1]
        assert f"[{component}]" in lines[1]

    def test_json_only_output_is_single_line(self) -> None:
        output = StringIO()
        logger = AuditLogger(output_format="json", output_stream=output)

        logger.log(LogLevel.INFO, "Test", "hello")

        lines = output.getvalue().strip().split('\n')
        assert len(lines) == 1
        assert json.loads(lines[0])["message"] == "hello"

    def test_invalid_output_format_rejected(self) -> None:
        try:
            AuditLogger(output_format="xml")
        except ValueError:
            return
        assert False, "Expected ValueError for unknown output format"


class TestSensitiveMaskingProperty:
    """Credentials never reach the log output."""

    @given(
        key=sensitive_key_strategy(),
        value=st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ", min_size=8, max_size=40),
    )
    @settings(max_examples=100)
    def test_sensitive_values_are_masked(self, key: str, value: str) -> None:
        """
        *For any* sensitive key, the logged value is replaced by the mask and
        the original value does not appear in the output.
        """
        output = StringIO()
        logger = AuditLogger(output_format="json", output_stream=output)

        entry = logger.log(LogLevel.INFO, "Test", "credentials", {key: value})

        assert entry.data[key] == AuditLogger.MASK_VALUE
        assert value not in output.getvalue()

    @given(
        key=non_sensitive_key_strategy(),
        value=st.integers(min_value=-1000, max_value=1000),
    )
    @settings(max_examples=100)
    def test_non_sensitive_values_preserved(self, key: str, value: int) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())

        entry = logger.log(LogLevel.INFO, "Test", "data", {key: value})

        assert entry.data[key] == value

    def test_nested_values_are_masked(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())

        masked = logger.mask_sensitive_data({
            "registrar": {"name": "porkbun", "secret_key": "sk_live"},
            "items": [{"api_key": "k1"}, {"tld": "com"}],
        })

        assert masked["registrar"]["name"] == "porkbun"
        assert masked["registrar"]["secret_key"] == AuditLogger.MASK_VALUE
        assert masked["items"][0]["api_key"] == AuditLogger.MASK_VALUE
        assert masked["items"][1]["tld"] == "com"


class TestErrorContextProperty:
    """log_error carries exception, URL and status context."""

    @given(
        message=message_strategy(),
        status=st.one_of(st.none(), st.sampled_from([400, 404, 429, 500, 503])),
    )
    @settings(max_examples=50)
    def test_error_context_included(self, message: str, status) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        error = NetworkError(code="timeout", message="request timed out")

        entry = logger.log_error(
            "RDAPClient",
            message,
            error=error,
            request_url="https://rdap.org/domain/tapr.com",
            response_status_code=status,
        )

        assert entry.level == LogLevel.ERROR
        assert entry.data["error_type"] == "NetworkError"
        assert entry.data["error_code"] == "timeout"
        assert entry.data["error_message"] == "request timed out"
        assert entry.data["request_url"] == "https://rdap.org/domain/tapr.com"
        if status is None:
            assert "response_status_code" not in entry.data
        else:
            assert entry.data["response_status_code"] == status


class TestLevelFilteringProperty:
    """Entries below the minimum level are dropped."""

    @given(
        minimum=st.sampled_from(list(LogLevel)),
        level=st.sampled_from(list(LogLevel)),
    )
    @settings(max_examples=100)
    def test_level_filtering(self, minimum: LogLevel, level: LogLevel) -> None:
        order = [LogLevel.DEBUG, LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR]
        output = StringIO()
        logger = AuditLogger(output_format="text", output_stream=output, level=minimum.value)

        entry = logger.log(level, "Test", "message")

        if order.index(level) >= order.index(minimum):
            assert entry is not None
            assert len(logger.entries) == 1
        else:
            assert entry is None
            assert logger.entries == []
            assert output.getvalue() == ""


class TestRetainedEntriesProperty:
    """Only the most recent entries are kept in memory; output is unaffected."""

    @given(
        limit=st.integers(min_value=1, max_value=50),
        count=st.integers(min_value=0, max_value=200),
    )
    @settings(max_examples=50)
    def test_retained_count_is_bounded(self, limit: int, count: int) -> None:
        output = StringIO()
        logger = AuditLogger(output_format="json", output_stream=output, max_entries=limit)

        for i in range(count):
            logger.log(LogLevel.INFO, "Test", f"message {i}")

        entries = logger.entries
        assert len(entries) == min(count, limit)
        assert [e.message for e in entries] == [
            f"message {i}" for i in range(max(0, count - limit), count)
        ]
        assert len(output.getvalue().splitlines()) == count

    def test_default_limit(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())

        for _ in range(10000):
            logger.log(LogLevel.INFO, "Test", "message")

        assert len(logger.entries) == 1000


class _Component(LoggingMixin):
    COMPONENT = "Component"

    def __init__(self, logger=None):
        self._logger = logger


class TestLoggingMixin:
    """Components log through the mixin only when a logger is attached."""

    def test_mixin_without_logger_is_silent(self) -> None:
        component = _Component()
        component._log_info("nothing happens")
        component._log_error("still nothing", error=ValueError("x"))

    def test_mixin_uses_component_name(self) -> None:
        logger = AuditLogger(output_format="json", output_stream=StringIO())
        component = _Component(logger)

        component._log_warn("careful", {"domain": "tapr.io"})
        component._log_error("failed", error=ValueError("boom"), data={"domain": "tapr.io"})

        entries = logger.entries
        assert [e.level for e in entries] == [LogLevel.WARN, LogLevel.ERROR]
        assert all(e.component == "Component" for e in entries)
        assert entries[1].data["error_type"] == "ValueError"
        assert entries[1].data["domain"] == "tapr.io"
