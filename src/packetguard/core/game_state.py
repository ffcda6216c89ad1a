"""Game state definitions for the simulation session."""

from enum import Enum


class GameState(str, Enum):
    BOOT = "boot"
    RUNNING = "running"
    PAUSED = "paused"
    GAME_OVER = "game_over"
