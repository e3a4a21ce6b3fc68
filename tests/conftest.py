"""
Pytest configuration and shared fixtures for the test suite.

Provides a builder for realistic arena combat log lines so each test can
describe a match as a short script of events.
"""

import pytest
from datetime import datetime, timedelta
from pathlib import Path

import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from arena_parser.parser.parser import ArenaLogParser


BASE_TIME = datetime(2025, 9, 15, 21, 30, 21, 462000)

SELF_FLAGS = "0x511"
ENEMY_FLAGS = "0x548"


class LogBuilder:
    """Builds combat log lines at second offsets from a fixed start time."""

    def __init__(self, base_time: datetime = BASE_TIME):
        self.base_time = base_time

    def time_at(self, seconds: float) -> datetime:
        return self.base_time + timedelta(seconds=seconds)

    def at(self, seconds: float, payload: str) -> str:
        ts = self.time_at(seconds)
        return (
            f"{ts.month}/{ts.day}/{ts.year} {ts:%H:%M:%S}.{ts.microsecond // 100:04d}-4  {payload}"
        )

    def match_start(self, seconds, zone_id=2547, arena_type="3v3", ranked=1, season=33):
        return self.at(seconds, f"ARENA_MATCH_START,{zone_id},{season},{arena_type},{ranked}")

    def match_end(self, seconds, winner=0, duration=120, team0_mmr=1673, team1_mmr=1668):
        return self.at(seconds, f"ARENA_MATCH_END,{winner},{duration},{team0_mmr},{team1_mmr}")

    def combatant_info(self, seconds, guid, team_id, spec_id=62, rating=1800, tier=4):
        stats = ["0"] * 21  # fields 3..23
        fields = (
            ["COMBATANT_INFO", guid, str(team_id)]
            + stats
            + [
                str(spec_id),
                "[(62090,80143,1),(62091,80144,1)]",
                "(0,356962,353082,0)",
                "[(212065,619,(),(10839,1540),()),(215136,619,(),(),())]",
                "[Player-1-0000000A,1459,1]",
                "75",
                "0",
                str(rating),
                str(tier),
            ]
        )
        return self.at(seconds, ",".join(fields))

    def spell_damage(
        self,
        seconds,
        source_guid,
        source_name,
        dest_guid,
        dest_name,
        source_flags=SELF_FLAGS,
        dest_flags=ENEMY_FLAGS,
    ):
        return self.at(
            seconds,
            f'SPELL_DAMAGE,{source_guid},"{source_name}",{source_flags},0x0,'
            f'{dest_guid},"{dest_name}",{dest_flags},0x0,116,"Frostbolt",0x10,'
            f"{dest_guid},0000000000000000,90,100,0,0,0,-1,0,0,0,0,0,0,0,0,1234,1234,-1,16,0,0,0,nil,nil,nil",
        )

    def unit_died(self, seconds, guid, name="Victim-Realm-US", feign=0):
        return self.at(
            seconds,
            f'UNIT_DIED,0000000000000000,nil,0x80000000,0x80000000,{guid},"{name}",{ENEMY_FLAGS},0x0,{feign}',
        )

    def zone_change(self, seconds, zone_id, zone_name):
        return self.at(seconds, f'ZONE_CHANGE,{zone_id},"{zone_name}",0')


@pytest.fixture
def log():
    """Builder for combat log lines."""
    return LogBuilder()


@pytest.fixture
def parser():
    """Fresh arena log parser."""
    return ArenaLogParser(max_buffered_lines=1000)


@pytest.fixture
def shuffle_players():
    """Six Solo Shuffle participants; the first one records the log."""
    return [
        ("Player-1-0000000A", "Recorder-Tichondrius-US"),
        ("Player-1-0000000B", "Frostmage-Tichondrius-US"),
        ("Player-1-0000000C", "Holypal-Area52-US"),
        ("Player-1-0000000D", "Shadow-dan-Illidan-US"),
        ("Player-1-0000000E", "Treehugger-Stormrage-US"),
        ("Player-1-0000000F", "Backstab-Kazzak-EU"),
    ]


@pytest.fixture
def sample_log_lines():
    """Sample lines of a ranked 2v2 match."""
    return [
        "9/15/2025 21:30:21.4620-4  COMBAT_LOG_VERSION,22,ADVANCED_LOG_ENABLED,1,BUILD_VERSION,11.2.0,PROJECT_ID,1",
        '9/15/2025 21:30:21.4630-4  ZONE_CHANGE,2547,"Enigma Crucible",0',
        "9/15/2025 21:30:22.0000-4  ARENA_MATCH_START,2547,33,2v2,1",
        "9/15/2025 21:30:30.0000-4  ARENA_MATCH_END,0,8,1673,1668",
    ]
