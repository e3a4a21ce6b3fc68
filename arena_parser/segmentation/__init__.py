"""
Segmentation module for splitting Solo Shuffle sessions into rounds.
"""

from .shuffle import RoundData, RoundPlayer, ShuffleRoundTracker, ShuffleState

__all__ = ["RoundData", "RoundPlayer", "ShuffleRoundTracker", "ShuffleState"]
