"""
Arena session parser that turns combat log lines into match events.

Coordinates tokenization, match session tracking, Solo Shuffle round tracking,
recording player identification and combatant name enrichment.
"""

import logging
from collections import Counter
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Optional

from .buffer import MatchLineBuffer
from .deaths import extract_death_event
from .events import (
    MatchEndedEvent,
    MatchEvent,
    MatchStartedEvent,
    ParseResult,
    SkipReason,
    ZoneChangeEvent,
)
from .tokenizer import LineTokenizer, LogLine, TimestampError, TokenizeError
from .units import is_unit_self
from ..config.settings import get_settings
from ..config.wow_data import (
    ArenaBracket,
    get_arena_name,
    get_class_id_from_spec,
    parse_bracket,
)
from ..models.character import parse_character_name
from ..models.match import (
    MatchContext,
    MatchMetadata,
    NonShuffleContext,
    PlayerMetadata,
    ShuffleContext,
    ShuffleRoundSummary,
    to_epoch_millis,
)
from ..segmentation.shuffle import RoundData, ShuffleRoundTracker


logger = logging.getLogger(__name__)


# Events whose base parameters carry source/destination GUIDs, names and flags
NAME_BEARING_PREFIXES = ("SPELL_", "SWING_", "RANGE_")

# Base parameter positions (field 0 is the event type)
SOURCE_GUID_FIELD = 1
SOURCE_NAME_FIELD = 2
SOURCE_FLAGS_FIELD = 3
DEST_GUID_FIELD = 5
DEST_NAME_FIELD = 6


class ArenaLogParser:
    """
    Extracts arena match events from WoW combat log lines.

    Feed lines in file order through parse_line(). The parser keeps at most
    one open match session and emits MatchStartedEvent, MatchEndedEvent or
    ZoneChangeEvent objects; every other line yields None.
    """

    def __init__(self, max_buffered_lines: Optional[int] = None):
        """
        Initialize the arena log parser.

        Args:
            max_buffered_lines: Cap for lines kept while identifying the
                recording player (defaults to the configured value)
        """
        if max_buffered_lines is None:
            max_buffered_lines = get_settings().max_buffered_lines

        self.tokenizer = LineTokenizer()
        self.shuffle_tracker = ShuffleRoundTracker()
        self.line_buffer = MatchLineBuffer(max_buffered_lines)

        self.current_match: Optional[MatchContext] = None
        self.combatants: Dict[str, PlayerMetadata] = {}
        self.player_id: Optional[str] = None
        self.team0_mmr = 0
        self.team1_mmr = 0

        # Real player deaths in 2v2/3v3, used downstream to invalidate no-kill matches
        self.player_death_count = 0

        self.lines_processed = 0
        self.events_emitted = 0
        self.skip_counts: Counter = Counter()

        self._handlers: Dict[str, Callable[[LogLine], ParseResult]] = {
            "ARENA_MATCH_START": self._handle_match_start,
            "ARENA_MATCH_END": self._handle_match_end,
            "COMBATANT_INFO": self._handle_combatant_info,
            "UNIT_DIED": self._handle_unit_died,
            "ZONE_CHANGE": self._handle_zone_change,
        }

    def parse_line(self, line: str) -> Optional[MatchEvent]:
        """
        Parse a combat log line and return a match event if it produced one.

        Never raises; lines that cannot be interpreted return None.
        """
        return self.parse_line_result(line).event

    def parse_line_result(self, line: str) -> ParseResult:
        """
        Parse a combat log line and report either the event or why there is none.

        Args:
            line: Raw line from combat log

        Returns:
            ParseResult with an event or a SkipReason
        """
        self.lines_processed += 1

        try:
            result = self._process_line(line)
        except Exception as e:
            logger.debug(f"Unexpected error on line {self.lines_processed}: {e}", exc_info=True)
            result = ParseResult.skipped(SkipReason.INTERNAL_ERROR)

        if result.has_event:
            self.events_emitted += 1
        elif result.skip is not None:
            self.skip_counts[result.skip] += 1

        return result

    def parse_lines(self, lines: Iterable[str]) -> List[MatchEvent]:
        """
        Parse lines in order and return the emitted events.

        Args:
            lines: Raw combat log lines

        Returns:
            List of match events
        """
        events = []
        for line in lines:
            event = self.parse_line(line)
            if event is not None:
                events.append(event)
        return events

    def get_current_match(self) -> Optional[MatchContext]:
        """Get the open match session, if any."""
        return self.current_match

    def clear_current_match(self) -> None:
        """
        Drop the open match context without a full reset.

        Used when a match ends through an early-end trigger (leaving the zone,
        the game closing) and ARENA_MATCH_END never arrives.
        """
        self.current_match = None

    def reset(self) -> None:
        """Reset parser state, including the Solo Shuffle round tracker."""
        self._clear_session()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get parsing statistics.

        Returns:
            Dictionary with parsing stats
        """
        return {
            "lines_processed": self.lines_processed,
            "events_emitted": self.events_emitted,
            "skipped": {reason.value: count for reason, count in self.skip_counts.items()},
            "buffered_lines": len(self.line_buffer),
            "tokenizer_stats": self.tokenizer.get_stats(),
        }

    def _process_line(self, line: str) -> ParseResult:
        try:
            log_line = self.tokenizer.tokenize(line)
        except TimestampError:
            return ParseResult.skipped(SkipReason.BAD_TIMESTAMP)
        except TokenizeError:
            return ParseResult.skipped(SkipReason.MALFORMED_LINE)

        if self.current_match is not None:
            self._gather_player_information(log_line)

        handler = self._handlers.get(log_line.event_type)
        if handler is None:
            return ParseResult.skipped(SkipReason.UNHANDLED_EVENT)
        return handler(log_line)

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _handle_match_start(self, line: LogLine) -> ParseResult:
        """Handle ARENA_MATCH_START,zoneId,seasonId,arenaType,isRanked."""
        arena_type = line.get_field(3)
        bracket = parse_bracket(arena_type)
        if bracket is None:
            logger.warning(f"Unknown arena type: {arena_type!r}")
            return ParseResult.skipped(SkipReason.UNKNOWN_BRACKET)

        zone_id = line.get_int(1)
        season_id = line.get_int(2)
        if zone_id is None or season_id is None:
            logger.warning(
                f"Invalid numeric values in ARENA_MATCH_START: "
                f"zone={line.get_field(1)!r}, season={line.get_field(2)!r}"
            )
            return ParseResult.skipped(SkipReason.INVALID_FIELDS)

        # Only "Rated Solo Shuffle" is recognised, so shuffles are always ranked
        if not bracket.is_solo_shuffle and line.get_int(4) != 1:
            logger.info(f"Skipping unranked arena match: {bracket.value}")
            return ParseResult.skipped(SkipReason.UNRANKED_MATCH)

        if bracket.is_solo_shuffle:
            return self._start_shuffle_round(line, zone_id, season_id)
        return self._start_arena_match(line, bracket, zone_id, season_id)

    def _start_shuffle_round(self, line: LogLine, zone_id: int, season_id: int) -> ParseResult:
        start_time = line.timestamp

        if self.shuffle_tracker.is_shuffle_active():
            self.shuffle_tracker.start_new_round(start_time)
            # Team assignments change every round
            self.combatants.clear()
            self.line_buffer.resume()
            logger.info(
                f"Solo Shuffle round {self.shuffle_tracker.get_current_round_number()} started"
            )
            return ParseResult.skipped(SkipReason.SHUFFLE_ROUND)

        buffer_id = self._new_buffer_id(line, zone_id)
        context = ShuffleContext(
            start_time=start_time,
            bracket=ArenaBracket.SOLO_SHUFFLE,
            zone_id=zone_id,
            buffer_id=buffer_id,
            season_id=season_id,
            is_ranked=True,
        )
        self._begin_session(context, line)
        self.shuffle_tracker.start_shuffle(buffer_id, start_time)

        logger.info(f"Solo Shuffle started in {get_arena_name(zone_id)} ({buffer_id})")
        return ParseResult.emitted(self._started_event(context))

    def _start_arena_match(
        self, line: LogLine, bracket: ArenaBracket, zone_id: int, season_id: int
    ) -> ParseResult:
        current = self.current_match

        if isinstance(current, NonShuffleContext) and current.buffer_id:
            # Duplicate start for the same physical match (e.g. /reload): still
            # emitted, but under the existing buffer id so downstream can correlate
            logger.info(f"Duplicate {bracket.value} start, reusing buffer id {current.buffer_id}")
            event = self._started_event(current)
            event.timestamp = line.timestamp
            event.zone_id = zone_id
            event.bracket = bracket.value
            event.season = season_id
            return ParseResult.emitted(event)

        if self.shuffle_tracker.is_shuffle_active():
            logger.info("Arena match started during an unfinished Solo Shuffle; discarding its rounds")
            self.shuffle_tracker.reset()

        context = NonShuffleContext(
            start_time=line.timestamp,
            bracket=bracket,
            zone_id=zone_id,
            buffer_id=self._new_buffer_id(line, zone_id),
            season_id=season_id,
            is_ranked=True,
        )
        self._begin_session(context, line)

        logger.info(f"{bracket.value} match started in {get_arena_name(zone_id)} ({context.buffer_id})")
        return ParseResult.emitted(self._started_event(context))

    def _handle_match_end(self, line: LogLine) -> ParseResult:
        """Handle ARENA_MATCH_END,winningTeamId,duration,team0MMR,team1MMR."""
        try:
            return self._finish_match(line)
        finally:
            # Whatever happened, the next match must start from a clean slate
            self._clear_session()

    def _finish_match(self, line: LogLine) -> ParseResult:
        context = self.current_match
        if context is None:
            logger.warning("Arena end without active match")
            return ParseResult.skipped(SkipReason.NO_ACTIVE_MATCH)

        winning_team_id = line.get_int(1)
        duration = line.get_int(2)  # server-authoritative, seconds
        if winning_team_id is None or duration is None:
            logger.warning(
                f"Invalid numeric values in ARENA_MATCH_END: "
                f"winner={line.get_field(1)!r}, duration={line.get_field(2)!r}"
            )
            return ParseResult.skipped(SkipReason.INVALID_FIELDS)

        team0_mmr = line.get_int(3)
        team1_mmr = line.get_int(4)
        self.team0_mmr = team0_mmr if team0_mmr is not None else 0
        self.team1_mmr = team1_mmr if team1_mmr is not None else 0

        if self.player_id is None:
            self.player_id = self._identify_player_from_buffer()

        if not context.buffer_id:
            logger.critical(
                f"Open match has no buffer id: bracket={context.bracket.value}, "
                f"zone={context.zone_id}, start={context.start_time}"
            )
            return ParseResult.skipped(SkipReason.INSUFFICIENT_METADATA)

        if self.shuffle_tracker.is_shuffle_active():
            if self.player_id:
                self.shuffle_tracker.set_recording_player(self.player_id)
            self.shuffle_tracker.finalize_shuffle(line.timestamp)

        metadata = self.build_match_metadata()
        if metadata is None:
            logger.warning("Cannot emit MATCH_ENDED: insufficient data")
            return ParseResult.skipped(SkipReason.INSUFFICIENT_METADATA)

        metadata.match_duration = duration
        if not context.is_shuffle:
            # Shuffles carry per-round winners instead
            metadata.winning_team_id = winning_team_id

        logger.info(
            f"{context.bracket.value} match {context.buffer_id} ended after {duration}s"
        )
        return ParseResult.emitted(
            MatchEndedEvent(
                timestamp=line.timestamp,
                buffer_id=context.buffer_id,
                metadata=metadata,
            )
        )

    def _handle_combatant_info(self, line: LogLine) -> ParseResult:
        """Handle COMBATANT_INFO: team at field 2, spec at 24, rating at 31, tier at 32."""
        player_guid = line.get_str(1)
        team_id = line.get_int(2)
        spec_id = line.get_int(24)

        if not player_guid or team_id is None or spec_id is None:
            logger.warning(
                f"Invalid critical values in COMBATANT_INFO: guid={player_guid!r}, "
                f"team={line.get_field(2)!r}, spec={line.get_field(24)!r}"
            )
            return ParseResult.skipped(SkipReason.INVALID_FIELDS)

        personal_rating = line.get_int(31)
        highest_pvp_tier = line.get_int(32)

        player = PlayerMetadata(
            id=player_guid,
            team_id=team_id,
            spec_id=spec_id,
            class_id=get_class_id_from_spec(spec_id),
            personal_rating=personal_rating if personal_rating is not None else 0,
            highest_pvp_tier=highest_pvp_tier if highest_pvp_tier is not None else 0,
        )

        existing = self.combatants.get(player_guid)
        if existing is not None:
            player.name = existing.name
            player.realm = existing.realm
            player.region = existing.region

        self.combatants[player_guid] = player
        if not player.has_name:
            self.line_buffer.resume()

        if self.shuffle_tracker.is_shuffle_active():
            self.shuffle_tracker.add_combatant(player_guid, team_id, player.name)

        logger.debug(
            f"Parsed combatant {player_guid}: team={team_id}, spec={spec_id}, "
            f"class={player.class_id}, rating={player.personal_rating}"
        )
        return ParseResult.skipped(SkipReason.NO_EVENT)

    def _handle_unit_died(self, line: LogLine) -> ParseResult:
        if self.shuffle_tracker.is_shuffle_active():
            if self.shuffle_tracker.handle_death(line):
                logger.info("Solo Shuffle round ended via player death")
        elif extract_death_event(line) is not None:
            self.player_death_count += 1
        return ParseResult.skipped(SkipReason.NO_EVENT)

    def _handle_zone_change(self, line: LogLine) -> ParseResult:
        """Handle ZONE_CHANGE,zoneId,"zoneName",difficultyId."""
        zone_id = line.get_int(1)
        if zone_id is None:
            logger.warning(f"Invalid zone ID in ZONE_CHANGE: {line.get_field(1)!r}")
            return ParseResult.skipped(SkipReason.INVALID_FIELDS)

        zone_name = line.get_str(2) or f"Zone {zone_id}"

        # Map transitions inside the same arena keep the shuffle going
        if self.shuffle_tracker.is_shuffle_active() and (
            self.current_match is None or self.current_match.zone_id != zone_id
        ):
            logger.info(
                f"Zone change to {zone_name} during Solo Shuffle - resetting round tracker"
            )
            self.shuffle_tracker.reset()

        logger.debug(f"Parsed zone change: {zone_id} ({zone_name})")
        return ParseResult.emitted(
            ZoneChangeEvent(
                timestamp=line.timestamp,
                zone_id=zone_id,
                zone_name=zone_name,
                source_id=self.player_id,
            )
        )

    # ------------------------------------------------------------------
    # Session state
    # ------------------------------------------------------------------

    def _begin_session(self, context: MatchContext, line: LogLine) -> None:
        self.current_match = context
        self.combatants.clear()
        self.line_buffer.reset(line.raw_line)
        self.player_id = None
        self.team0_mmr = 0
        self.team1_mmr = 0
        self.player_death_count = 0

    def _clear_session(self) -> None:
        self.current_match = None
        self.combatants.clear()
        self.line_buffer.reset()
        self.player_id = None
        self.team0_mmr = 0
        self.team1_mmr = 0
        self.player_death_count = 0
        self.shuffle_tracker.reset()

    @staticmethod
    def _new_buffer_id(line: LogLine, zone_id: int) -> str:
        return f"{to_epoch_millis(line.timestamp)}_{zone_id}"

    def _started_event(self, context: MatchContext) -> MatchStartedEvent:
        return MatchStartedEvent(
            timestamp=context.start_time,
            zone_id=context.zone_id,
            buffer_id=context.buffer_id,
            bracket=context.bracket.value,
            season=context.season_id,
            is_ranked=context.is_ranked,
            players=self._player_list(),
        )

    def _player_list(self) -> List[PlayerMetadata]:
        return [replace(player) for player in self.combatants.values()]

    # ------------------------------------------------------------------
    # Player identification and name enrichment
    # ------------------------------------------------------------------

    def _gather_player_information(self, line: LogLine) -> None:
        """Scan a line of the open match until the player and all names are known."""
        if not self.line_buffer.is_collecting:
            return

        if self.player_id is None:
            self.player_id = self._identify_player_from_line(line)
            if self.player_id is not None:
                logger.debug(f"Early player identification: {self.player_id}")
        else:
            self._enrich_combatants(line)

        if self._has_all_required_data():
            self.line_buffer.mark_satisfied()
        else:
            self.line_buffer.append(line.raw_line)

    def _identify_player_from_line(self, line: LogLine) -> Optional[str]:
        """
        Check whether the source of a line is the recording player.

        Also extracts names for combatants that still need them.
        """
        self._enrich_combatants(line)

        if not self._carries_unit_names(line):
            return None

        source_guid = line.get_str(SOURCE_GUID_FIELD)
        if source_guid and is_unit_self(line.get_hex(SOURCE_FLAGS_FIELD)):
            return source_guid
        return None

    def _identify_player_from_buffer(self) -> Optional[str]:
        """Scan buffered lines of the current match for the recording player."""
        scanner = LineTokenizer()
        for raw_line in self.line_buffer:
            line = scanner.parse_line(raw_line)
            if line is None:
                continue
            player_id = self._identify_player_from_line(line)
            if player_id is not None:
                logger.debug(f"Identified player from buffered lines: {player_id}")
                return player_id

        logger.warning("Could not identify recording player from combat events")
        return None

    def _enrich_combatants(self, line: LogLine) -> None:
        """Fill in name/realm/region of known combatants from a combat event."""
        if not self._carries_unit_names(line):
            return

        if not self._names_missing():
            return

        source_guid = line.get_str(SOURCE_GUID_FIELD)
        self._apply_display_name(source_guid, line.get_field(SOURCE_NAME_FIELD))

        dest_guid = line.get_str(DEST_GUID_FIELD)
        if dest_guid != source_guid:
            self._apply_display_name(dest_guid, line.get_field(DEST_NAME_FIELD))

    def _apply_display_name(self, guid: Optional[str], display_name: Any) -> None:
        if not guid:
            return
        player = self.combatants.get(guid)
        if player is None or player.has_name:
            return

        parsed = parse_character_name(display_name)
        if parsed is None:
            return

        player.name = parsed.name
        if player.realm is None:
            player.realm = parsed.realm
        if player.region is None:
            player.region = parsed.region

    @staticmethod
    def _carries_unit_names(line: LogLine) -> bool:
        return line.event_type.startswith(NAME_BEARING_PREFIXES)

    def _names_missing(self) -> bool:
        return any(not player.has_name for player in self.combatants.values())

    def _has_all_required_data(self) -> bool:
        return bool(self.player_id) and bool(self.combatants) and not self._names_missing()

    # ------------------------------------------------------------------
    # Metadata
    # ------------------------------------------------------------------

    def build_match_metadata(self) -> Optional[MatchMetadata]:
        """
        Create a match metadata snapshot from the current parser state.

        Used both for a normal match end and by early-end handlers that never
        see ARENA_MATCH_END.

        Returns:
            MatchMetadata, or None without an open match
        """
        context = self.current_match
        if context is None:
            logger.warning("Insufficient match context for metadata")
            return None

        players = self._player_list()
        metadata = MatchMetadata(
            timestamp=context.start_time,
            zone_id=context.zone_id,
            bracket=context.bracket.value,
            season=context.season_id,
            is_ranked=context.is_ranked,
            players=players,
            player_id=self.player_id or "",
            team0_mmr=self.team0_mmr,
            team1_mmr=self.team1_mmr,
            player_death_count=self.player_death_count,
        )

        rounds = self.shuffle_tracker.get_current_rounds()
        if rounds:
            metadata.shuffle_rounds = [self._summarize_round(round_data) for round_data in rounds]
            self._apply_round_records(players, metadata.shuffle_rounds)

        logger.debug(
            f"Created match metadata: {len(players)} players, player={metadata.player_id!r}, "
            f"bracket={metadata.bracket}, mmr={metadata.team0_mmr}/{metadata.team1_mmr}, "
            f"rounds={len(metadata.shuffle_rounds or [])}, deaths={metadata.player_death_count}"
        )
        return metadata

    def _summarize_round(self, round_data: RoundData) -> ShuffleRoundSummary:
        team0, team1 = self.shuffle_tracker.get_team_compositions(round_data)
        return ShuffleRoundSummary(
            round_number=round_data.round_number,
            start_timestamp=round_data.start_timestamp,
            winning_team_id=round_data.winning_team_id,
            killed_player_id=round_data.killed_player_id,
            duration=round_data.duration,
            end_timestamp=round_data.end_timestamp,
            team0_players=team0 or None,
            team1_players=team1 or None,
        )

    @staticmethod
    def _apply_round_records(
        players: List[PlayerMetadata], rounds: List[ShuffleRoundSummary]
    ) -> None:
        """Set wins and losses on each player from the decided rounds."""
        records = {player.id: [0, 0] for player in players}

        for summary in rounds:
            if summary.winning_team_id is None:
                continue
            for team_id, guids in ((0, summary.team0_players), (1, summary.team1_players)):
                for guid in guids or []:
                    record = records.get(guid)
                    if record is None:
                        continue
                    if summary.winning_team_id == team_id:
                        record[0] += 1
                    else:
                        record[1] += 1

        for player in players:
            player.wins, player.losses = records[player.id]
