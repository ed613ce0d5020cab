"""
utils.py - Constants, enumerations and helpers for the Reversi engine

This module provides the board size limits, the player identity type, the
tagged game outcome, the eight compass directions used by capture scanning,
flat-index conversion helpers and ASCII rendering.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Dict, Iterable, Optional, Tuple

import numpy as np

# Board constants
MIN_BOARD_SIZE = 4
MAX_BOARD_SIZE = 12
DEFAULT_BOARD_SIZE = 8

# Values stored in the board grid
EMPTY_SLOT = 0
PLAYER_ONE_SLOT = 1
PLAYER_TWO_SLOT = 2
PLAYER_SLOTS = (PLAYER_ONE_SLOT, PLAYER_TWO_SLOT)

# Rendering symbols
SYMBOLS = {
    EMPTY_SLOT: ".",
    PLAYER_ONE_SLOT: "X",
    PLAYER_TWO_SLOT: "O",
}
HINT_SYMBOL = "*"


def other_slot(slot: int) -> int:
    """Get the slot of the opposing player."""
    if slot == PLAYER_ONE_SLOT:
        return PLAYER_TWO_SLOT
    if slot == PLAYER_TWO_SLOT:
        return PLAYER_ONE_SLOT
    return EMPTY_SLOT


@dataclass(eq=False)
class Identity:
    """
    A contestant in a game.

    Identities compare by object identity: two players who happen to share a
    display name are still different contestants.
    """
    name: str
    color: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "color": self.color}

    @classmethod
    def from_dict(cls, data: Dict) -> 'Identity':
        return cls(name=data["name"], color=data.get("color"))

    def __str__(self):
        return self.name


class GameStatus(Enum):
    """Enumeration representing the classification of a position."""
    ONGOING = auto()
    WINNER = auto()
    TIE = auto()

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self != GameStatus.ONGOING


@dataclass(frozen=True)
class Outcome:
    """Result of a victory check: ongoing, a winner, or a tie."""
    status: GameStatus
    winner: Optional[Identity] = None

    @classmethod
    def ongoing(cls) -> 'Outcome':
        return cls(GameStatus.ONGOING)

    @classmethod
    def tie(cls) -> 'Outcome':
        return cls(GameStatus.TIE)

    @classmethod
    def win(cls, identity: Identity) -> 'Outcome':
        return cls(GameStatus.WINNER, identity)

    @property
    def is_game_over(self) -> bool:
        return self.status.is_game_over()

    @property
    def is_tie(self) -> bool:
        return self.status == GameStatus.TIE

    def describe(self) -> str:
        """Human readable summary used by front ends and session status."""
        if self.status == GameStatus.WINNER:
            return f"{self.winner.name} wins"
        if self.status == GameStatus.TIE:
            return "Tie"
        return "In progress"


class Direction(Enum):
    """Enumeration of the eight compass directions for capture scanning."""
    N = auto()
    NE = auto()
    E = auto()
    SE = auto()
    S = auto()
    SW = auto()
    W = auto()
    NW = auto()


# Direction vectors (dx, dy); y grows downwards, so north is dy = -1
DIRECTION_VECTORS = {
    Direction.N: (0, -1),
    Direction.NE: (1, -1),
    Direction.E: (1, 0),
    Direction.SE: (1, 1),
    Direction.S: (0, 1),
    Direction.SW: (-1, 1),
    Direction.W: (-1, 0),
    Direction.NW: (-1, -1),
}


def is_valid_size(size) -> bool:
    """
    Check if a board size is supported.

    Args:
        size: Number of rows/columns

    Returns:
        True for even integers in [MIN_BOARD_SIZE, MAX_BOARD_SIZE]
    """
    if isinstance(size, bool) or not isinstance(size, (int, np.integer)):
        return False
    return MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE and size % 2 == 0


def is_valid_position(x: int, y: int, size: int) -> bool:
    """Check if a coordinate lies within a board of the given size."""
    return 0 <= x < size and 0 <= y < size


def to_list_position(x: int, y: int, size: int) -> int:
    """Convert an (x, y) coordinate to its flat index x + y*size."""
    return x + y * size


def from_list_position(list_position: int, size: int) -> Tuple[int, int]:
    """Convert a flat index back to its (x, y) coordinate."""
    y, x = divmod(list_position, size)
    return x, y


def render_board_ascii(grid: np.ndarray, hints: Iterable[int] = ()) -> str:
    """
    Render a slot grid as ASCII art.

    Args:
        grid: 2D array indexed [y, x] holding slot values
        hints: Flat indices to mark with HINT_SYMBOL (e.g. possible moves)

    Returns:
        ASCII representation with column numbers on top and row numbers on the left
    """
    size = grid.shape[0]
    hints = set(hints)
    width = len(str(size - 1))

    lines = [" " * (width + 1) + " ".join(str(x % 10) for x in range(size))]
    for y in range(size):
        cells = []
        for x in range(size):
            slot = int(grid[y, x])
            if slot == EMPTY_SLOT and to_list_position(x, y, size) in hints:
                cells.append(HINT_SYMBOL)
            else:
                cells.append(SYMBOLS[slot])
        lines.append(f"{y:>{width}} " + " ".join(cells))

    return "\n".join(lines)
