"""
Line tokenizer for parsing WoW combat log lines.
"""

import re
from datetime import datetime
from typing import Any, List, Optional, Tuple
from dataclasses import dataclass, field

from .units import parse_unit_flags


class TokenizeError(ValueError):
    """Raised when a line payload cannot be split into fields."""


class TimestampError(ValueError):
    """Raised when the timestamp portion of a line is not a valid log timestamp."""


@dataclass(frozen=True)
class LogLine:
    """
    Represents one tokenized combat log line.

    Fields are either strings or (possibly nested) lists of strings. The event
    type is always field 0.
    """

    timestamp: datetime
    raw_timestamp: str
    fields: Tuple[Any, ...]
    raw_line: str = field(repr=False, default="")

    @property
    def event_type(self) -> str:
        """Get the event type (first field)."""
        if not self.fields:
            return ""
        value = self.fields[0]
        return value if isinstance(value, str) else ""

    def get_field(self, index: int) -> Any:
        """Return the field at index, or None if the line is too short."""
        if 0 <= index < len(self.fields):
            return self.fields[index]
        return None

    def get_str(self, index: int) -> Optional[str]:
        """Return a string field, or None if missing or a nested group."""
        value = self.get_field(index)
        return value if isinstance(value, str) else None

    def get_int(self, index: int) -> Optional[int]:
        """
        Return a base-10 integer field.

        Mirrors lenient integer parsing: leading digits are used and anything
        after them is ignored ("12abc" -> 12), so "1.0" reads as 1.

        Returns:
            The integer, or None when the field is missing or has no leading digits
        """
        value = self.get_str(index)
        if value is None:
            return None
        match = _LEADING_INT.match(value)
        if not match:
            return None
        return int(match.group(0))

    def get_hex(self, index: int) -> Optional[int]:
        """Return a hexadecimal flag field such as 0x511, or None."""
        return parse_unit_flags(self.get_str(index))

    def __len__(self) -> int:
        return len(self.fields)


_LEADING_INT = re.compile(r"^\s*[-+]?\d+")


class LineTokenizer:
    """
    Tokenizes individual lines from WoW combat logs.

    Handles the CSV-like payload with quoted strings (using "" as an escaped
    quote) and nested [...] / (...) groups.
    """

    # Format: "M/D/YYYY HH:MM:SS.ffff" with an optional timezone suffix like "-4"
    TIMESTAMP_PATTERN = re.compile(
        r"^(\d{1,2})/(\d{1,2})/(\d{1,4})\s+(\d{1,2}):(\d{1,2}):(\d{1,2})\.(\d+)(?:[-+]\d+)?\s*$"
    )

    SEPARATOR = "  "
    MIN_YEAR = 2000

    _CLOSERS = {"[": "]", "(": ")"}

    def __init__(self):
        self.line_count = 0
        self.error_count = 0

    def tokenize(self, line: str) -> LogLine:
        """
        Parse a single combat log line into a timestamp and fields.

        Args:
            line: Raw line from combat log file

        Returns:
            LogLine with the parsed timestamp and fields

        Raises:
            TimestampError: If the timestamp portion is malformed
            TokenizeError: If the payload has unbalanced groups
        """
        self.line_count += 1
        line = line.rstrip("\r\n")

        sep_idx = line.find(self.SEPARATOR)
        if sep_idx == -1:
            raw_timestamp, payload = "", line
        else:
            raw_timestamp = line[:sep_idx]
            payload = line[sep_idx + len(self.SEPARATOR):]

        try:
            timestamp = self.parse_timestamp(raw_timestamp)
            fields = self.split_fields(payload)
        except ValueError:
            self.error_count += 1
            raise

        return LogLine(
            timestamp=timestamp,
            raw_timestamp=raw_timestamp,
            fields=tuple(fields),
            raw_line=line,
        )

    def parse_line(self, line: str) -> Optional[LogLine]:
        """Tokenize a line, returning None instead of raising on bad input."""
        try:
            return self.tokenize(line)
        except ValueError:
            return None

    @classmethod
    def parse_timestamp(cls, raw_timestamp: str) -> datetime:
        """
        Convert "9/18/2025 20:23:42.7580" to a naive local datetime.

        Raises:
            TimestampError: If the text does not match or is out of range
        """
        match = cls.TIMESTAMP_PATTERN.match(raw_timestamp.strip())
        if not match:
            raise TimestampError(f"Invalid timestamp: {raw_timestamp!r}")

        month, day, year, hour, minute, second = (int(part) for part in match.groups()[:6])
        fraction = match.group(7)

        if year < cls.MIN_YEAR:
            raise TimestampError(f"Implausible timestamp year {year}: {raw_timestamp!r}")

        microsecond = int(fraction[:6].ljust(6, "0"))
        try:
            return datetime(year, month, day, hour, minute, second, microsecond)
        except ValueError as e:
            raise TimestampError(f"Invalid timestamp {raw_timestamp!r}: {e}") from e

    def split_fields(self, payload: str) -> List[Any]:
        """
        Split the payload into top-level fields.

        Args:
            payload: Everything after the timestamp separator

        Returns:
            List of strings and nested lists
        """
        fields: List[Any] = []
        pos = 0
        length = len(payload)

        while pos < length:
            value, pos = self._parse_value(payload, pos)
            fields.append(value)

            if pos >= length or payload[pos] == "\n":
                break

            ch = payload[pos]
            if ch == ",":
                pos += 1
                if pos >= length:
                    # Trailing comma ends with an empty field
                    fields.append("")
            elif ch in "])":
                raise TokenizeError(f"Unexpected {ch!r} at position {pos}")

        return fields

    def _parse_value(self, payload: str, pos: int) -> Tuple[Any, int]:
        """Parse a single value starting at pos and return it with the next position."""
        length = len(payload)
        while pos < length and payload[pos] == " ":
            pos += 1

        if pos >= length:
            return "", pos

        ch = payload[pos]
        if ch == '"':
            return self._parse_quoted(payload, pos)
        if ch in self._CLOSERS:
            return self._parse_group(payload, pos)
        return self._parse_plain(payload, pos)

    @staticmethod
    def _parse_quoted(payload: str, pos: int) -> Tuple[str, int]:
        """Parse "value" with "" as an escaped quote."""
        pos += 1
        chars = []
        length = len(payload)

        while pos < length:
            ch = payload[pos]
            if ch == '"':
                if pos + 1 < length and payload[pos + 1] == '"':
                    chars.append('"')
                    pos += 2
                    continue
                pos += 1
                break
            chars.append(ch)
            pos += 1

        return "".join(chars), pos

    def _parse_group(self, payload: str, pos: int) -> Tuple[List[Any], int]:
        """Parse a [...] or (...) group into a list."""
        opener = payload[pos]
        closer = self._CLOSERS[opener]
        pos += 1

        items: List[Any] = []
        length = len(payload)

        while True:
            while pos < length and payload[pos] == " ":
                pos += 1

            if pos >= length or payload[pos] == "\n":
                raise TokenizeError(f"Unclosed {opener!r}")

            ch = payload[pos]
            if ch == closer:
                return items, pos + 1
            if ch == ",":
                pos += 1
                continue
            if ch in "])":
                raise TokenizeError(f"Mismatched {ch!r} inside {opener!r} group")

            value, pos = self._parse_value(payload, pos)
            items.append(value)

            while pos < length and payload[pos] == " ":
                pos += 1
            if pos < length and payload[pos] == ",":
                pos += 1

    @staticmethod
    def _parse_plain(payload: str, pos: int) -> Tuple[str, int]:
        """Parse an unquoted token up to the next delimiter."""
        end = pos
        length = len(payload)
        while end < length and payload[end] not in ",])\n":
            end += 1
        return payload[pos:end], end

    def get_stats(self):
        """
        Get tokenizing statistics.

        Returns:
            Dictionary with line_count and error_count
        """
        return {
            "lines_processed": self.line_count,
            "errors": self.error_count,
            "success_rate": (self.line_count - self.error_count) / max(self.line_count, 1),
        }
