"""
Unit tests for the combat log line tokenizer.
"""

import pytest
from datetime import datetime

from arena_parser.parser.tokenizer import LineTokenizer, TimestampError, TokenizeError


class TestSplitFields:
    """Test payload splitting into fields."""

    def test_quotes_and_groups(self):
        """Test escaped quotes, nested groups and plain values together."""
        tokenizer = LineTokenizer()
        fields = tokenizer.split_fields('EVENT,"a""b",[1,2,"x,y"],plain')

        assert fields == ["EVENT", 'a"b', ["1", "2", "x,y"], "plain"]

    def test_nested_groups(self):
        """Test groups inside groups, including empty ones."""
        tokenizer = LineTokenizer()
        fields = tokenizer.split_fields("COMBATANT_INFO,[(212065,619,(),(10839,1540))],(0,1)")

        assert fields == [
            "COMBATANT_INFO",
            [["212065", "619", [], ["10839", "1540"]]],
            ["0", "1"],
        ]

    def test_empty_fields_between_commas(self):
        """Test that consecutive commas produce empty fields."""
        tokenizer = LineTokenizer()
        assert tokenizer.split_fields("A,,B") == ["A", "", "B"]

    def test_trailing_comma(self):
        """Test that a trailing comma ends with an empty field."""
        tokenizer = LineTokenizer()
        assert tokenizer.split_fields("A,B,") == ["A", "B", ""]

    def test_quoted_value_keeps_commas(self):
        """Test that commas inside quotes do not split."""
        tokenizer = LineTokenizer()
        fields = tokenizer.split_fields('ZONE_CHANGE,1,"Dalaran, Sewers",0')
        assert fields[2] == "Dalaran, Sewers"

    def test_unclosed_group(self):
        """Test that an unterminated group is rejected."""
        tokenizer = LineTokenizer()
        with pytest.raises(TokenizeError):
            tokenizer.split_fields("EVENT,[1,2")

    def test_stray_closer(self):
        """Test that a closing bracket at top level is rejected."""
        tokenizer = LineTokenizer()
        with pytest.raises(TokenizeError):
            tokenizer.split_fields("EVENT,1],2")

    def test_mismatched_closer(self):
        """Test that ) cannot close a [ group."""
        tokenizer = LineTokenizer()
        with pytest.raises(TokenizeError):
            tokenizer.split_fields("EVENT,[1,2)")


class TestTimestamps:
    """Test timestamp parsing."""

    def test_four_digit_fraction(self):
        """Test the usual ten-thousandths precision."""
        ts = LineTokenizer.parse_timestamp("9/18/2025 20:23:42.7580")
        assert ts == datetime(2025, 9, 18, 20, 23, 42, 758000)

    def test_timezone_suffix(self):
        """Test that an offset suffix is accepted and ignored."""
        ts = LineTokenizer.parse_timestamp("9/15/2025 21:30:21.462-4")
        assert ts == datetime(2025, 9, 15, 21, 30, 21, 462000)

    @pytest.mark.parametrize(
        "raw",
        [
            "",
            "not a timestamp",
            "13/40/2025 20:23:42.758",
            "1/1/1999 00:00:00.000",
            "9/18/2025 20:23:42",
        ],
    )
    def test_invalid(self, raw):
        """Test that malformed or implausible timestamps raise."""
        with pytest.raises(TimestampError):
            LineTokenizer.parse_timestamp(raw)


class TestLineTokenizer:
    """Test whole-line tokenization."""

    def test_tokenize_line(self):
        """Test splitting a line into timestamp and fields."""
        tokenizer = LineTokenizer()
        line = tokenizer.tokenize("9/15/2025 21:30:22.0000-4  ARENA_MATCH_START,2547,33,2v2,1\r\n")

        assert line.timestamp == datetime(2025, 9, 15, 21, 30, 22)
        assert line.event_type == "ARENA_MATCH_START"
        assert line.get_int(1) == 2547
        assert line.get_str(3) == "2v2"
        assert line.get_field(10) is None
        assert len(line) == 5
        assert line.raw_line.endswith(",1")

    def test_lenient_integers(self):
        """Test that leading digits are used and junk is ignored."""
        tokenizer = LineTokenizer()
        line = tokenizer.tokenize("9/15/2025 21:30:22.0000  EVENT,12abc,abc,1.0,[1]")

        assert line.get_int(1) == 12
        assert line.get_int(2) is None
        assert line.get_int(3) == 1
        assert line.get_int(4) is None

    def test_hex_flags(self):
        """Test hexadecimal flag fields."""
        tokenizer = LineTokenizer()
        line = tokenizer.tokenize("9/15/2025 21:30:22.0000  EVENT,0x511,zz")

        assert line.get_hex(1) == 0x511
        assert line.get_hex(2) is None

    def test_missing_separator(self):
        """Test that a line without the double-space separator fails on its timestamp."""
        tokenizer = LineTokenizer()
        with pytest.raises(TimestampError):
            tokenizer.tokenize("ARENA_MATCH_START,2547,33,2v2,1")

    def test_parse_line_returns_none_and_counts_errors(self):
        """Test the non-raising variant and statistics."""
        tokenizer = LineTokenizer()

        assert tokenizer.parse_line("garbage") is None
        assert tokenizer.parse_line("9/15/2025 21:30:22.0000  EVENT,[1") is None
        assert tokenizer.parse_line("9/15/2025 21:30:22.0000  EVENT,1") is not None

        stats = tokenizer.get_stats()
        assert stats["lines_processed"] == 3
        assert stats["errors"] == 2
