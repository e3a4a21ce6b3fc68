"""
Match events emitted by the arena log parser.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..models.match import MatchMetadata, PlayerMetadata


class MatchEventType(Enum):
    """Arena match event types for real-time detection."""

    MATCH_STARTED = "MATCH_STARTED"
    MATCH_ENDED = "MATCH_ENDED"
    ZONE_CHANGE = "ZONE_CHANGE"


class SkipReason(Enum):
    """Why a line produced no event."""

    BAD_TIMESTAMP = "bad_timestamp"
    MALFORMED_LINE = "malformed_line"
    UNHANDLED_EVENT = "unhandled_event"
    NO_EVENT = "no_event"
    UNKNOWN_BRACKET = "unknown_bracket"
    UNRANKED_MATCH = "unranked_match"
    INVALID_FIELDS = "invalid_fields"
    NO_ACTIVE_MATCH = "no_active_match"
    SHUFFLE_ROUND = "shuffle_round"
    INSUFFICIENT_METADATA = "insufficient_metadata"
    INTERNAL_ERROR = "internal_error"


@dataclass
class MatchStartedEvent:
    """
    Start of an arena session.

    buffer_id correlates this event with the matching MatchEndedEvent. A Solo
    Shuffle emits one of these for its first round only.
    """

    timestamp: datetime
    zone_id: int
    buffer_id: str
    bracket: str
    season: int
    is_ranked: bool
    players: List[PlayerMetadata] = field(default_factory=list)
    type: MatchEventType = field(default=MatchEventType.MATCH_STARTED, init=False)

    @property
    def session_id(self) -> str:
        return self.buffer_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "zoneId": self.zone_id,
            "bufferId": self.buffer_id,
            "bracket": self.bracket,
            "season": self.season,
            "isRanked": self.is_ranked,
            "players": [player.to_dict() for player in self.players],
        }


@dataclass
class MatchEndedEvent:
    """End of an arena session with the complete metadata snapshot."""

    timestamp: datetime
    buffer_id: str
    metadata: MatchMetadata
    type: MatchEventType = field(default=MatchEventType.MATCH_ENDED, init=False)

    @property
    def session_id(self) -> str:
        return self.buffer_id

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "bufferId": self.buffer_id,
            "metadata": self.metadata.to_dict(),
        }


@dataclass
class ZoneChangeEvent:
    """The recording player moved to another zone."""

    timestamp: datetime
    zone_id: int
    zone_name: str
    source_id: Optional[str] = None
    type: MatchEventType = field(default=MatchEventType.ZONE_CHANGE, init=False)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "type": self.type.value,
            "timestamp": self.timestamp.isoformat(),
            "zoneId": self.zone_id,
            "zoneName": self.zone_name,
        }
        if self.source_id:
            data["sourceGUID"] = self.source_id
        return data


MatchEvent = Union[MatchStartedEvent, MatchEndedEvent, ZoneChangeEvent]


@dataclass(frozen=True)
class ParseResult:
    """Outcome of parsing one line: an event, or the reason there is none."""

    event: Optional[MatchEvent] = None
    skip: Optional[SkipReason] = None

    @classmethod
    def emitted(cls, event: MatchEvent) -> "ParseResult":
        return cls(event=event)

    @classmethod
    def skipped(cls, reason: SkipReason) -> "ParseResult":
        return cls(skip=reason)

    @property
    def has_event(self) -> bool:
        return self.event is not None
