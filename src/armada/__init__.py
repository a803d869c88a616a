"""Armada: a turn-based Battleship engine with a computer opponent."""

__version__ = "0.1.0"
