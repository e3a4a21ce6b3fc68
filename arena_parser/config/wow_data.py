"""
World of Warcraft data mappings used for arena match detection.

This module contains configurable mappings for specializations, arena zones
and arena brackets. Entries can be extended at runtime through
arena_parser.config.loader.
"""

from typing import Dict, Optional
from enum import Enum, IntEnum


class WowClass(IntEnum):
    """Class IDs as reported by the game client."""

    WARRIOR = 1
    PALADIN = 2
    HUNTER = 3
    ROGUE = 4
    PRIEST = 5
    DEATH_KNIGHT = 6
    SHAMAN = 7
    MAGE = 8
    WARLOCK = 9
    MONK = 10
    DRUID = 11
    DEMON_HUNTER = 12
    EVOKER = 13


# Specialization ID -> class ID
SPEC_TO_CLASS: Dict[int, int] = {
    # Death Knight
    250: WowClass.DEATH_KNIGHT,  # Blood
    251: WowClass.DEATH_KNIGHT,  # Frost
    252: WowClass.DEATH_KNIGHT,  # Unholy

    # Demon Hunter
    577: WowClass.DEMON_HUNTER,  # Havoc
    581: WowClass.DEMON_HUNTER,  # Vengeance

    # Druid
    102: WowClass.DRUID,  # Balance
    103: WowClass.DRUID,  # Feral
    104: WowClass.DRUID,  # Guardian
    105: WowClass.DRUID,  # Restoration

    # Evoker
    1467: WowClass.EVOKER,  # Devastation
    1468: WowClass.EVOKER,  # Preservation
    1473: WowClass.EVOKER,  # Augmentation

    # Hunter
    253: WowClass.HUNTER,  # Beast Mastery
    254: WowClass.HUNTER,  # Marksmanship
    255: WowClass.HUNTER,  # Survival

    # Mage
    62: WowClass.MAGE,  # Arcane
    63: WowClass.MAGE,  # Fire
    64: WowClass.MAGE,  # Frost

    # Monk
    268: WowClass.MONK,  # Brewmaster
    269: WowClass.MONK,  # Windwalker
    270: WowClass.MONK,  # Mistweaver

    # Paladin
    65: WowClass.PALADIN,  # Holy
    66: WowClass.PALADIN,  # Protection
    70: WowClass.PALADIN,  # Retribution

    # Priest
    256: WowClass.PRIEST,  # Discipline
    257: WowClass.PRIEST,  # Holy
    258: WowClass.PRIEST,  # Shadow

    # Rogue
    259: WowClass.ROGUE,  # Assassination
    260: WowClass.ROGUE,  # Outlaw
    261: WowClass.ROGUE,  # Subtlety

    # Shaman
    262: WowClass.SHAMAN,  # Elemental
    263: WowClass.SHAMAN,  # Enhancement
    264: WowClass.SHAMAN,  # Restoration

    # Warlock
    265: WowClass.WARLOCK,  # Affliction
    266: WowClass.WARLOCK,  # Demonology
    267: WowClass.WARLOCK,  # Destruction

    # Warrior
    71: WowClass.WARRIOR,  # Arms
    72: WowClass.WARRIOR,  # Fury
    73: WowClass.WARRIOR,  # Protection
}


# Retail arena zone IDs
ARENA_ZONE_NAMES: Dict[int, str] = {
    1672: "Blade's Edge Arena",
    617: "Dalaran Sewers",
    1505: "Nagrand Arena",
    572: "Ruins of Lordaeron",
    2167: "Robodrome",
    1134: "Tiger's Peak",
    980: "Tol'viron Arena",
    1504: "Black Rook Hold Arena",
    2373: "Empyrean Domain",
    1552: "Ashamane's Fall",
    1911: "Mugambala",
    1825: "Hook Point",
    2509: "Maldraxxus Coliseum",
    2547: "Enigma Crucible",
    2563: "Nokhudon Proving Grounds",
    2759: "Cage of Carnage",
}


class ArenaBracket(str, Enum):
    """Arena brackets recognised from ARENA_MATCH_START."""

    TWO_V_TWO = "2v2"
    THREE_V_THREE = "3v3"
    SOLO_SHUFFLE = "Solo Shuffle"

    @property
    def is_solo_shuffle(self) -> bool:
        return self is ArenaBracket.SOLO_SHUFFLE


# Arena type string in the log -> bracket
ARENA_TYPES: Dict[str, ArenaBracket] = {
    "2v2": ArenaBracket.TWO_V_TWO,
    "3v3": ArenaBracket.THREE_V_THREE,
    "Rated Solo Shuffle": ArenaBracket.SOLO_SHUFFLE,
}


def get_class_id_from_spec(spec_id: int) -> int:
    """
    Get class ID from specialization ID.

    Args:
        spec_id: Specialization ID from COMBATANT_INFO

    Returns:
        Class ID, or 0 for an unknown specialization
    """
    return int(SPEC_TO_CLASS.get(spec_id, 0))


def parse_bracket(arena_type: Optional[str]) -> Optional[ArenaBracket]:
    """Map the arena type string from the log to a bracket, or None if unknown."""
    if not isinstance(arena_type, str):
        return None
    return ARENA_TYPES.get(arena_type)


def is_arena_zone(zone_id: int) -> bool:
    """Check if a zone ID is an arena."""
    return zone_id in ARENA_ZONE_NAMES


def get_arena_name(zone_id: int) -> str:
    """Get arena name from zone ID for logging and display."""
    return ARENA_ZONE_NAMES.get(zone_id, f"Unknown Arena ({zone_id})")
