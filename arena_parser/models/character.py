"""
Character name parsing for combat log display names.
"""

from dataclasses import dataclass
from typing import Optional


# Placeholder names the client writes for units it cannot resolve
UNKNOWN_NAMES = {"", "nil", "Unknown"}


@dataclass(frozen=True)
class CharacterName:
    """
    A display name split into name, realm and region.

    Handles parsing of WoW character names in format:
    - "Name" (same realm)
    - "Name-Realm" (cross-realm, same region)
    - "Name-Realm-Region" (cross-realm, cross-region)
    """

    name: str
    realm: Optional[str] = None
    region: Optional[str] = None

    @property
    def full_name(self) -> str:
        """Reconstruct the combined display name."""
        return "-".join(part for part in (self.name, self.realm, self.region) if part)


def parse_character_name(full_name: Optional[str]) -> Optional[CharacterName]:
    """
    Parse a character display name into components.

    The split is taken from the right, so realm and region never absorb part
    of a hyphenated personal name.

    Args:
        full_name: Character name from combat log

    Returns:
        CharacterName, or None for empty and placeholder names

    Examples:
        >>> parse_character_name("Felica")
        CharacterName(name='Felica', realm=None, region=None)

        >>> parse_character_name("Felica-Duskwood")
        CharacterName(name='Felica', realm='Duskwood', region=None)

        >>> parse_character_name("Blue-dan-Tichondrius-US")
        CharacterName(name='Blue-dan', realm='Tichondrius', region='US')
    """
    if not isinstance(full_name, str):
        return None

    clean_name = full_name.strip().strip('"')
    if clean_name in UNKNOWN_NAMES:
        return None

    parts = clean_name.split("-")

    if len(parts) >= 3:
        name = "-".join(parts[:-2])
        realm, region = parts[-2], parts[-1]
    elif len(parts) == 2:
        name, realm, region = parts[0], parts[1], None
    else:
        name, realm, region = clean_name, None, None

    if not name:
        return None

    return CharacterName(name=name, realm=realm or None, region=region or None)
