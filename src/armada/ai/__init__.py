"""Computer opponent."""

from .targeting import Difficulty, select_computer_shot

__all__ = ["Difficulty", "select_computer_shot"]
