"""
Combat log parsing module for arena match detection.
"""

from .tokenizer import LineTokenizer, LogLine, TimestampError, TokenizeError
from .events import (
    MatchEndedEvent,
    MatchEvent,
    MatchEventType,
    MatchStartedEvent,
    ParseResult,
    SkipReason,
    ZoneChangeEvent,
)
from .deaths import DeathEvent, extract_death_event

__all__ = [
    "LineTokenizer",
    "LogLine",
    "TimestampError",
    "TokenizeError",
    "MatchEndedEvent",
    "MatchEvent",
    "MatchEventType",
    "MatchStartedEvent",
    "ParseResult",
    "SkipReason",
    "ZoneChangeEvent",
    "DeathEvent",
    "extract_death_event",
]
