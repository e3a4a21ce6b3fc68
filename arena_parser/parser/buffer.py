"""
Bounded line buffer used while a match still lacks player information.
"""

import logging
from enum import Enum
from typing import Iterator, List, Optional

from ..config.settings import DEFAULT_MAX_BUFFERED_LINES

logger = logging.getLogger(__name__)


class BufferPhase(Enum):
    """Whether the open match still needs lines kept for a scan-back."""

    COLLECTING = "collecting"
    SATISFIED = "satisfied"


class MatchLineBuffer:
    """
    Raw lines of the current match, kept until the recording player and all
    combatant names are known.

    Features:
    - Explicit collecting/satisfied phases
    - Hard cap with a one-time warning on overflow
    - Lines past the cap are dropped, never evicted from the front
    """

    def __init__(self, max_lines: int = DEFAULT_MAX_BUFFERED_LINES):
        """
        Initialize line buffer.

        Args:
            max_lines: Maximum number of lines kept for one match
        """
        self.max_lines = max_lines
        self._lines: List[str] = []
        self._phase = BufferPhase.COLLECTING
        self._warned_limit = False
        self._dropped = 0

    @property
    def phase(self) -> BufferPhase:
        return self._phase

    @property
    def is_collecting(self) -> bool:
        return self._phase is BufferPhase.COLLECTING

    @property
    def is_full(self) -> bool:
        return len(self._lines) >= self.max_lines

    @property
    def dropped(self) -> int:
        return self._dropped

    def append(self, line: str) -> bool:
        """
        Keep a line for later scanning.

        Returns:
            True if the line was stored, False if the buffer is full
        """
        if len(self._lines) < self.max_lines:
            self._lines.append(line)
            return True

        self._dropped += 1
        if not self._warned_limit:
            logger.warning(
                f"Match line buffer limit reached ({self.max_lines} lines). "
                "Player identification may fail."
            )
            self._warned_limit = True
        return False

    def mark_satisfied(self) -> None:
        """Stop collecting and release the stored lines."""
        if self._phase is BufferPhase.SATISFIED:
            return
        logger.debug(f"Player information complete after {len(self._lines)} buffered lines")
        self._phase = BufferPhase.SATISFIED
        self._lines = []

    def resume(self) -> None:
        """Go back to collecting, e.g. when a combatant without a name appears."""
        self._phase = BufferPhase.COLLECTING

    def reset(self, first_line: Optional[str] = None) -> None:
        """Start over for a new match, optionally seeded with its start line."""
        self._lines = [first_line] if first_line is not None else []
        self._phase = BufferPhase.COLLECTING
        self._warned_limit = False
        self._dropped = 0

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._lines))

    def __len__(self) -> int:
        return len(self._lines)
