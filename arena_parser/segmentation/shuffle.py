"""
Round tracking for Solo Shuffle sessions.

A Solo Shuffle is one physical arena session made of up to six rounds. Every
round after the first begins with another ARENA_MATCH_START line, and a round
is decided by the first player death.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from ..parser.deaths import calculate_relative_timestamp, extract_death_event
from ..parser.tokenizer import LogLine

logger = logging.getLogger(__name__)


@dataclass
class RoundPlayer:
    """A player's seat in one round."""

    team_id: int
    name: Optional[str] = None


@dataclass
class RoundData:
    """
    A single Solo Shuffle round.

    End fields are written once, by whichever comes first: the deciding
    death, the next round starting, or the session ending.
    """

    round_number: int
    start_time: datetime
    start_timestamp: int  # ms relative to shuffle start
    players: Dict[str, RoundPlayer] = field(default_factory=dict)
    end_time: Optional[datetime] = None
    end_timestamp: Optional[int] = None  # ms relative to shuffle start
    winning_team_id: Optional[int] = None
    killed_player_id: Optional[str] = None
    duration: Optional[int] = None  # seconds

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None

    def teams_present(self) -> List[int]:
        """Team IDs seen in this round, in roster order."""
        teams: List[int] = []
        for player in self.players.values():
            if player.team_id not in teams:
                teams.append(player.team_id)
        return teams


@dataclass
class ShuffleState:
    """Snapshot of a Solo Shuffle session."""

    is_active: bool = False
    first_start_time: Optional[datetime] = None
    buffer_id: Optional[str] = None
    rounds: List[RoundData] = field(default_factory=list)
    current_round: Optional[RoundData] = None
    recording_player_id: Optional[str] = None


def calculate_duration(start_timestamp: int, end_timestamp: int) -> int:
    """Whole seconds between two relative millisecond timestamps, halves rounded up."""
    return math.floor((end_timestamp - start_timestamp) / 1000 + 0.5)


class ShuffleRoundTracker:
    """
    State machine for the rounds of one Solo Shuffle.

    Inactive until start_shuffle(); while active there is always exactly one
    round in progress whose number is len(rounds) + 1.
    """

    def __init__(self):
        self.state = ShuffleState()

    def start_shuffle(self, buffer_id: str, start_time: datetime) -> None:
        """Begin a new shuffle with round 1 starting at relative time 0."""
        self.state = ShuffleState(
            is_active=True,
            first_start_time=start_time,
            buffer_id=buffer_id,
            current_round=RoundData(
                round_number=1,
                start_time=start_time,
                start_timestamp=0,
            ),
        )
        logger.debug(f"Solo Shuffle {buffer_id} started")

    def start_new_round(self, start_time: datetime) -> None:
        """Close the round in progress and open the next one."""
        if not self.state.is_active or self.state.first_start_time is None:
            return

        if self.state.current_round is not None:
            self._close_round(self.state.current_round, start_time)
            self.state.rounds.append(self.state.current_round)

        self.state.current_round = RoundData(
            round_number=len(self.state.rounds) + 1,
            start_time=start_time,
            start_timestamp=calculate_relative_timestamp(
                start_time, self.state.first_start_time
            ),
        )

    def add_combatant(self, guid: str, team_id: int, name: Optional[str] = None) -> None:
        """Seat a player in the round in progress."""
        if self.state.current_round is None:
            return
        self.state.current_round.players[guid] = RoundPlayer(team_id=team_id, name=name)

    def set_recording_player(self, player_id: str) -> None:
        self.state.recording_player_id = player_id

    def handle_death(self, line: LogLine) -> bool:
        """
        Apply a UNIT_DIED line to the round in progress.

        The first death of a rostered player ends the round and decides it
        for the other team. With no other team on the roster the round ends
        undecided; later deaths never touch a finished round.

        Args:
            line: Tokenized UNIT_DIED line

        Returns:
            True if this death ended the round
        """
        current = self.state.current_round
        if not self.state.is_active or current is None:
            return False

        if current.is_finished or current.winning_team_id is not None:
            return False

        death = extract_death_event(line)
        if death is None:
            return False

        victim = current.players.get(death.killed_player_id)
        if victim is None:
            return False

        current.killed_player_id = death.killed_player_id
        for team_id in current.teams_present():
            if team_id != victim.team_id:
                current.winning_team_id = team_id
                break

        current.end_time = death.timestamp
        if self.state.first_start_time is not None:
            current.end_timestamp = calculate_relative_timestamp(
                death.timestamp, self.state.first_start_time
            )
            current.duration = calculate_duration(current.start_timestamp, current.end_timestamp)

        logger.debug(
            f"Round {current.round_number} decided by death of {death.killed_player_id}, "
            f"winner team {current.winning_team_id}"
        )
        return True

    def get_current_rounds(self) -> List[RoundData]:
        """Finalized rounds plus the round in progress, if any."""
        rounds = list(self.state.rounds)
        if self.state.current_round is not None:
            rounds.append(self.state.current_round)
        return rounds

    def finalize_shuffle(self, end_time: datetime) -> Optional[ShuffleState]:
        """
        Close the last round and deactivate the tracker.

        Returns:
            Snapshot of the finished shuffle, or None if no shuffle was active
        """
        if not self.state.is_active or self.state.first_start_time is None:
            return None

        if self.state.current_round is not None:
            self._close_round(self.state.current_round, end_time)
            self.state.rounds.append(self.state.current_round)
            self.state.current_round = None

        self.state.is_active = False
        return replace(self.state, rounds=list(self.state.rounds))

    def is_shuffle_active(self) -> bool:
        return self.state.is_active

    def get_buffer_id(self) -> Optional[str]:
        return self.state.buffer_id

    def get_current_round_number(self) -> int:
        return len(self.state.rounds) + 1

    def reset(self) -> None:
        """Drop all round data, e.g. after leaving the arena mid-shuffle."""
        self.state = ShuffleState()

    @staticmethod
    def get_team_compositions(round_data: RoundData) -> Tuple[List[str], List[str]]:
        """Player GUIDs on team 0 and team 1 for a round."""
        team0 = [guid for guid, player in round_data.players.items() if player.team_id == 0]
        team1 = [guid for guid, player in round_data.players.items() if player.team_id == 1]
        return team0, team1

    def _close_round(self, round_data: RoundData, end_time: datetime) -> None:
        """Stamp end time and duration unless a death already did."""
        if round_data.end_time is None:
            round_data.end_time = end_time
            round_data.end_timestamp = calculate_relative_timestamp(
                end_time, self.state.first_start_time
            )
        if round_data.duration is None and round_data.end_timestamp is not None:
            round_data.duration = calculate_duration(
                round_data.start_timestamp, round_data.end_timestamp
            )
