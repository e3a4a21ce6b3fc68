"""
Arena Match Parser

Detects rated arena matches (2v2, 3v3 and Solo Shuffle) in World of Warcraft
combat logs and emits match start, match end and zone change events.
"""

from .parser.parser import ArenaLogParser

__version__ = "0.1.0"
__author__ = "Arena Parser Team"

__all__ = ["ArenaLogParser"]
