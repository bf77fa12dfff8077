"""
Unit tests for lenient pagination query parsing.
"""

import pytest

from sequence_service.api.dependencies import parse_int


class TestParseInt:
    """Test parse_int fallback behaviour."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("10", 10),
            ("0", 0),
            ("-3", -3),
            ("+7", 7),
            (None, 50),
            ("", 50),
            ("ten", 50),
            ("1.5", 50),
            (" 5", 50),
            ("1_000", 50),
            ("9223372036854775807", 9223372036854775807),
            ("-9223372036854775808", -9223372036854775808),
            ("9223372036854775808", 50),
            ("-9223372036854775809", 50),
            ("99999999999999999999", 50),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_int(value, 50) == expected
