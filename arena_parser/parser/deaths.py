"""
Extraction of player deaths from UNIT_DIED events.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .tokenizer import LogLine
from .units import is_player_guid


# UNIT_DIED layout: the victim is the destination unit
VICTIM_GUID_FIELD = 5
VICTIM_NAME_FIELD = 6
FEIGN_DEATH_FIELD = 9


@dataclass(frozen=True)
class DeathEvent:
    """A real player death extracted from a UNIT_DIED line."""

    killed_player_id: str
    timestamp: datetime
    killed_player_name: Optional[str] = None


def extract_death_event(line: LogLine) -> Optional[DeathEvent]:
    """
    Extract a player death from a UNIT_DIED log line.

    Hunter Feign Death is logged as UNIT_DIED with a 1 in the feign-death
    field; those units are not dead.

    Args:
        line: Tokenized UNIT_DIED line

    Returns:
        DeathEvent if a real player died, None otherwise
    """
    killed_guid = line.get_field(VICTIM_GUID_FIELD)
    if not is_player_guid(killed_guid):
        return None

    if line.get_int(FEIGN_DEATH_FIELD) == 1:
        return None

    return DeathEvent(
        killed_player_id=killed_guid,
        timestamp=line.timestamp,
        killed_player_name=line.get_str(VICTIM_NAME_FIELD) or None,
    )


def calculate_relative_timestamp(event_time: datetime, start_time: datetime) -> int:
    """Milliseconds elapsed from start_time to event_time."""
    return (event_time - start_time) // timedelta(milliseconds=1)
