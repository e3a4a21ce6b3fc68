"""
Data models for arena match detection.
"""

from .character import CharacterName, parse_character_name
from .match import (
    MatchContext,
    MatchMetadata,
    NonShuffleContext,
    PlayerMetadata,
    ShuffleContext,
    ShuffleRoundSummary,
)

__all__ = [
    "CharacterName",
    "parse_character_name",
    "MatchContext",
    "MatchMetadata",
    "NonShuffleContext",
    "PlayerMetadata",
    "ShuffleContext",
    "ShuffleRoundSummary",
]
