"""
Unit GUID and unit flag helpers.

Combat log source/destination flags pack reaction, affiliation and unit type
into disjoint bit ranges of one integer.
"""

from enum import Enum
from typing import Any, Optional


PLAYER_GUID_PREFIX = "Player-"

AFFILIATION_MINE = 0x00000001
REACTION_FRIENDLY = 0x00000010
UNIT_TYPE_MASK = 0x0000FC00


class UnitType(Enum):
    """Unit type encoded in the combat log flag field."""

    PLAYER = "player"
    NPC = "npc"
    PET = "pet"
    GUARDIAN = "guardian"
    OBJECT = "object"
    NONE = "none"


_UNIT_TYPE_BITS = {
    0x00000400: UnitType.PLAYER,
    0x00000800: UnitType.NPC,
    0x00001000: UnitType.PET,
    0x00002000: UnitType.GUARDIAN,
    0x00004000: UnitType.OBJECT,
}


def is_player_guid(guid: Any) -> bool:
    """Check if a GUID string represents a player."""
    return bool(guid) and isinstance(guid, str) and guid.startswith(PLAYER_GUID_PREFIX)


def parse_unit_flags(value: Any) -> Optional[int]:
    """
    Convert a flag token like "0x511" to an integer.

    Returns:
        The flags, or None for missing or malformed input
    """
    if isinstance(value, int):
        return value
    if not isinstance(value, str) or not value:
        return None
    try:
        return int(value, 16)
    except ValueError:
        return None


def get_unit_type(flags: int) -> UnitType:
    """Extract the unit type from combat log flags."""
    return _UNIT_TYPE_BITS.get(flags & UNIT_TYPE_MASK, UnitType.NONE)


def is_unit_self(flags: Optional[int]) -> bool:
    """
    Check if unit flags describe the player who is writing the log.

    Pets and guardians owned by the player carry the same reaction and
    affiliation bits, so the unit type must be player as well.
    """
    if flags is None:
        return False
    friendly_mine = bool(flags & REACTION_FRIENDLY) and bool(flags & AFFILIATION_MINE)
    return friendly_mine and get_unit_type(flags) is UnitType.PLAYER
