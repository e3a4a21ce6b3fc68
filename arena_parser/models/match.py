"""
Match session models: the open match context, combatants and the metadata
snapshot handed to the persistence layer.
"""

import hashlib
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..config.wow_data import ArenaBracket


def to_epoch_millis(timestamp: datetime) -> int:
    """Milliseconds since the epoch for a naive local timestamp."""
    return round(timestamp.timestamp() * 1000)


@dataclass
class PlayerMetadata:
    """Combatant extracted from COMBATANT_INFO, enriched with names later."""

    id: str
    team_id: int
    spec_id: int
    class_id: int
    personal_rating: int = 0
    highest_pvp_tier: int = 0
    name: Optional[str] = None
    realm: Optional[str] = None
    region: Optional[str] = None

    # Solo Shuffle only
    wins: Optional[int] = None
    losses: Optional[int] = None

    @property
    def has_name(self) -> bool:
        return bool(self.name)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "teamId": self.team_id,
            "specId": self.spec_id,
            "classId": self.class_id,
            "personalRating": self.personal_rating,
            "highestPvpTier": self.highest_pvp_tier,
        }
        for key, value in (
            ("name", self.name),
            ("realm", self.realm),
            ("region", self.region),
            ("wins", self.wins),
            ("losses", self.losses),
        ):
            if value is not None:
                data[key] = value
        return data


@dataclass
class MatchContext:
    """
    An open match session.

    The parser holds either None (no session) or one of the two subclasses
    below, so every open session has a start time, zone and buffer id.
    """

    start_time: datetime
    bracket: ArenaBracket
    zone_id: int
    buffer_id: str
    season_id: int
    is_ranked: bool

    @property
    def is_shuffle(self) -> bool:
        return False


@dataclass
class NonShuffleContext(MatchContext):
    """A 2v2 or 3v3 session."""


@dataclass
class ShuffleContext(MatchContext):
    """A Solo Shuffle session spanning all of its rounds."""

    @property
    def is_shuffle(self) -> bool:
        return True


@dataclass
class ShuffleRoundSummary:
    """Individual round summary for Solo Shuffle."""

    round_number: int
    start_timestamp: int  # ms relative to shuffle start
    winning_team_id: Optional[int] = None
    killed_player_id: Optional[str] = None
    duration: Optional[int] = None  # seconds
    end_timestamp: Optional[int] = None  # ms relative to shuffle start
    team0_players: Optional[List[str]] = None
    team1_players: Optional[List[str]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "roundNumber": self.round_number,
            "winningTeamId": self.winning_team_id,
            "killedPlayerId": self.killed_player_id,
            "duration": self.duration,
            "startTimestamp": self.start_timestamp,
            "endTimestamp": self.end_timestamp,
            "team0Players": self.team0_players,
            "team1Players": self.team1_players,
        }


@dataclass
class MatchMetadata:
    """
    Match metadata extracted from combat log parsing.

    Built once from the parser state when a match ends; end-specific fields
    (duration, winner) are attached by the caller that built it.
    """

    timestamp: datetime
    zone_id: int
    bracket: str
    season: int
    is_ranked: bool
    players: List[PlayerMetadata] = field(default_factory=list)
    player_id: str = ""

    winning_team_id: Optional[int] = None
    match_duration: Optional[int] = None
    team0_mmr: int = 0
    team1_mmr: int = 0

    # Real player deaths seen in a 2v2/3v3 match
    player_death_count: int = 0

    shuffle_rounds: Optional[List[ShuffleRoundSummary]] = None

    def get_player(self, player_id: str) -> Optional[PlayerMetadata]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def match_hash(self) -> str:
        """
        Identifier shared by every participant's copy of the same match.

        SHA-256 over the start time and the sorted player GUIDs, encoded as
        JSON so that the two parts cannot run into each other.
        """
        hash_input = json.dumps(
            {
                "timestamp": to_epoch_millis(self.timestamp),
                "players": sorted(player.id for player in self.players),
            },
            separators=(",", ":"),
        )
        return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready representation for the persistence layer."""
        data: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "mapId": self.zone_id,
            "bracket": self.bracket,
            "season": self.season,
            "isRanked": self.is_ranked,
            "players": [player.to_dict() for player in self.players],
            "playerId": self.player_id,
            "team0MMR": self.team0_mmr,
            "team1MMR": self.team1_mmr,
            "playerDeathCount": self.player_death_count,
        }
        if self.winning_team_id is not None:
            data["winningTeamId"] = self.winning_team_id
        if self.match_duration is not None:
            data["matchDuration"] = self.match_duration
        if self.shuffle_rounds is not None:
            data["shuffleRounds"] = [summary.to_dict() for summary in self.shuffle_rounds]
        return data
