"""
board.py - Board representation and rules engine for Reversi

This module implements the Board class, which owns the grid of cell
ownership, the two identities and the current player. It validates and
applies moves with captures, enumerates possible moves, skips turns and
classifies finished positions.

The grid is a numpy array indexed [y, x] holding slot values (EMPTY_SLOT,
PLAYER_ONE_SLOT, PLAYER_TWO_SLOT). Cells are addressed either by (x, y) or
by the flat index x + y*size.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from reversi.debug import debug
from reversi.errors import (InvalidIdentityError, InvalidPositionError,
                            InvalidSizeError, InvalidStateError)
from reversi.utils import (DEFAULT_BOARD_SIZE, DIRECTION_VECTORS, EMPTY_SLOT,
                           MAX_BOARD_SIZE, MIN_BOARD_SIZE, PLAYER_ONE_SLOT,
                           PLAYER_SLOTS, PLAYER_TWO_SLOT, Identity, Outcome,
                           from_list_position, is_valid_position, is_valid_size,
                           other_slot, render_board_ascii, to_list_position)


@dataclass(frozen=True)
class Cell:
    """A read-only view of one board position."""
    x: int
    y: int
    list_position: int
    owner: Optional[Identity] = None

    @property
    def is_empty(self) -> bool:
        return self.owner is None


class Board:
    """
    Represents a Reversi game board.

    The board is mutated only by apply_move and skip_turn. Queries such as
    possible_moves and check_victory never change state.
    """

    def __init__(self, player_one: Identity, player_two: Identity,
                 size: int = DEFAULT_BOARD_SIZE):
        """
        Create a board with the standard opening.

        Args:
            player_one: Identity that moves first
            player_two: Identity that moves second
            size: Number of rows/columns, even and within [4, 12]

        Raises:
            InvalidSizeError: If size is odd or out of range
            InvalidIdentityError: If an identity is missing or both are the same object
        """
        self._init_fields(player_one, player_two, size)

        half = size // 2
        self.grid[half, half] = PLAYER_ONE_SLOT
        self.grid[half - 1, half - 1] = PLAYER_ONE_SLOT
        self.grid[half, half - 1] = PLAYER_TWO_SLOT     # (x=half-1, y=half)
        self.grid[half - 1, half] = PLAYER_TWO_SLOT     # (x=half, y=half-1)

        self._update_piece_counts()
        debug.debug(f"Created {size}x{size} board for {player_one} vs {player_two}", "board")

    def _init_fields(self, player_one: Identity, player_two: Identity, size: int):
        """Validate arguments and set up an empty grid with player one to move."""
        if not is_valid_size(size):
            raise InvalidSizeError(
                f"The size must be an even number between {MIN_BOARD_SIZE} and {MAX_BOARD_SIZE}",
                context={"size": size})
        for label, player in (("player_one", player_one), ("player_two", player_two)):
            if not isinstance(player, Identity):
                raise InvalidIdentityError(f"{label} must be an Identity",
                                           context={label: player})
        if player_one is player_two:
            raise InvalidIdentityError("Both players cannot be the same identity",
                                       context={"name": player_one.name})

        self.size = int(size)
        self.player_one = player_one
        self.player_two = player_two
        self._current_slot = PLAYER_ONE_SLOT
        self.grid = np.zeros((self.size, self.size), dtype=np.int8)
        self._piece_counts = {PLAYER_ONE_SLOT: 0, PLAYER_TWO_SLOT: 0}

    @classmethod
    def restore(cls, player_one: Identity, player_two: Identity, size: int,
                cells: Sequence[int], current_slot: int = PLAYER_ONE_SLOT) -> 'Board':
        """
        Rebuild a board from saved fields without replaying the opening.

        Args:
            player_one: First identity
            player_two: Second identity
            size: Board size
            cells: Slot values indexed by flat position (length size*size)
            current_slot: PLAYER_ONE_SLOT or PLAYER_TWO_SLOT

        Raises:
            InvalidSizeError, InvalidIdentityError: As for the constructor
            InvalidStateError: If cells or current_slot are inconsistent
        """
        board = cls.__new__(cls)
        board._init_fields(player_one, player_two, size)

        try:
            values = np.asarray(cells)
        except ValueError as e:
            raise InvalidStateError(f"Cell data is not a flat list: {e}") from e
        if values.shape != (board.size * board.size,):
            raise InvalidStateError("Cell data does not match the board size",
                                    context={"size": board.size, "cells": int(values.size)})
        if not np.isin(values, (EMPTY_SLOT,) + PLAYER_SLOTS).all():
            raise InvalidStateError("Cell data contains unknown slot values")
        if (isinstance(current_slot, bool) or not isinstance(current_slot, (int, np.integer))
                or current_slot not in PLAYER_SLOTS):
            raise InvalidStateError("Unknown current player slot",
                                    context={"current_player": current_slot})

        # flat index x + y*size is exactly row-major order of grid[y, x]
        board.grid = values.astype(np.int8).reshape(board.size, board.size)
        board._current_slot = int(current_slot)
        board._update_piece_counts()
        debug.debug(f"Restored {board.size}x{board.size} board, "
                    f"{board.current_player} to move", "board")
        return board

    def to_dict(self) -> Dict[str, Any]:
        """
        Export the fields an external serializer needs to rebuild this board.

        Returns:
            Dictionary with size, both identities, current player slot and
            the flat list of cell slots
        """
        return {
            "size": self.size,
            "player_one": self.player_one.to_dict(),
            "player_two": self.player_two.to_dict(),
            "current_player": self._current_slot,
            "cells": [int(v) for v in self.grid.reshape(-1)],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any],
                  player_one: Optional[Identity] = None,
                  player_two: Optional[Identity] = None) -> 'Board':
        """
        Inverse of to_dict.

        Existing identities can be passed in so that the restored board shares
        them with the caller; otherwise new ones are created from the data.
        """
        try:
            player_one = player_one or Identity.from_dict(data["player_one"])
            player_two = player_two or Identity.from_dict(data["player_two"])
            return cls.restore(player_one, player_two, data["size"],
                               data["cells"], data.get("current_player", PLAYER_ONE_SLOT))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidStateError(f"Malformed board data: {e}") from e

    def copy(self) -> 'Board':
        """
        Create a deep copy of the board.

        The copy shares the identity objects, which are handles rather than state.
        """
        new_board = Board.__new__(Board)
        new_board.size = self.size
        new_board.player_one = self.player_one
        new_board.player_two = self.player_two
        new_board._current_slot = self._current_slot
        new_board.grid = self.grid.copy()
        new_board._piece_counts = dict(self._piece_counts)
        return new_board

    # ------------------------------------------------------------------
    # Identities and counts
    # ------------------------------------------------------------------

    @property
    def identities(self) -> Tuple[Identity, Identity]:
        return self.player_one, self.player_two

    @property
    def current_player(self) -> Identity:
        return self._identity_for(self._current_slot)

    @property
    def opponent(self) -> Identity:
        return self._identity_for(other_slot(self._current_slot))

    @property
    def num_cells(self) -> int:
        return self.size * self.size

    @property
    def player_one_pieces(self) -> int:
        return self._piece_counts[PLAYER_ONE_SLOT]

    @property
    def player_two_pieces(self) -> int:
        return self._piece_counts[PLAYER_TWO_SLOT]

    def piece_count(self, player: Identity) -> int:
        """Get the cached number of pieces owned by an identity."""
        return self._piece_counts[self._slot_for(player)]

    def _identity_for(self, slot: int) -> Optional[Identity]:
        if slot == PLAYER_ONE_SLOT:
            return self.player_one
        if slot == PLAYER_TWO_SLOT:
            return self.player_two
        return None

    def _slot_for(self, player: Identity) -> int:
        if player is self.player_one:
            return PLAYER_ONE_SLOT
        if player is self.player_two:
            return PLAYER_TWO_SLOT
        raise InvalidIdentityError("Identity does not play on this board",
                                   context={"name": getattr(player, "name", player)})

    def _update_piece_counts(self):
        # Recount from the whole grid rather than adjusting by the flips
        for slot in PLAYER_SLOTS:
            self._piece_counts[slot] = int(np.count_nonzero(self.grid == slot))

    # ------------------------------------------------------------------
    # Cell lookup
    # ------------------------------------------------------------------

    def get_cell(self, x: int, y: int) -> Optional[Cell]:
        """
        Look up a cell by coordinate.

        Returns:
            The Cell, or None if (x, y) is off the board
        """
        if not is_valid_position(x, y, self.size):
            return None
        return Cell(x, y, to_list_position(x, y, self.size),
                    self._identity_for(int(self.grid[y, x])))

    def get_cell_at(self, list_position: int) -> Optional[Cell]:
        """
        Look up a cell by flat index.

        Returns:
            The Cell, or None if list_position >= size*size

        Raises:
            InvalidPositionError: If list_position is negative
        """
        if list_position < 0:
            raise InvalidPositionError("List position cannot be negative",
                                       context={"list_position": list_position})
        if list_position >= self.num_cells:
            return None
        return self.get_cell(*from_list_position(list_position, self.size))

    def is_full(self) -> bool:
        return not np.any(self.grid == EMPTY_SLOT)

    def _slot_at(self, x: int, y: int) -> Optional[int]:
        """Slot value at (x, y), or None past the edge of the board."""
        if not is_valid_position(x, y, self.size):
            return None
        return int(self.grid[y, x])

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _bracketed_run(self, x: int, y: int, dx: int, dy: int, slot: int) -> List[Tuple[int, int]]:
        """
        Scan from (x, y) in direction (dx, dy) on behalf of slot.

        The run must start with at least one opponent cell and end on a cell
        owned by slot. An empty cell or the board edge ends the scan without
        a capture.

        Returns:
            Coordinates of the opponent cells that would flip, or [] if none
        """
        opponent = other_slot(slot)
        run = []
        cx, cy = x + dx, y + dy
        value = self._slot_at(cx, cy)
        while value == opponent:
            run.append((cx, cy))
            cx, cy = cx + dx, cy + dy
            value = self._slot_at(cx, cy)

        if run and value == slot:
            return run
        return []

    def _captures(self, x: int, y: int, slot: int) -> List[Tuple[int, int]]:
        """All cells flipped if slot played at the empty cell (x, y)."""
        flips = []
        for dx, dy in DIRECTION_VECTORS.values():
            flips.extend(self._bracketed_run(x, y, dx, dy, slot))
        return flips

    def _can_place(self, x: int, y: int, slot: int) -> bool:
        if self.grid[y, x] != EMPTY_SLOT:
            return False
        return any(self._bracketed_run(x, y, dx, dy, slot)
                   for dx, dy in DIRECTION_VECTORS.values())

    def is_valid_move(self, list_position: int, player: Optional[Identity] = None) -> bool:
        """
        Check if a move is legal without applying it.

        Args:
            list_position: Flat index of the target cell
            player: Identity to test for (default: current player)

        Returns:
            True if the cell is empty and the placement captures something
        """
        if not 0 <= list_position < self.num_cells:
            return False
        slot = self._current_slot if player is None else self._slot_for(player)
        x, y = from_list_position(list_position, self.size)
        return self._can_place(x, y, slot)

    def possible_moves(self, player: Optional[Identity] = None) -> List[int]:
        """
        Get every legal move for a player.

        Cells are scanned row by row (y outer, x inner), so the list is in
        ascending flat-index order. Callers should rely on membership only.

        Args:
            player: Identity to enumerate for (default: current player)

        Returns:
            List of flat indices
        """
        slot = self._current_slot if player is None else self._slot_for(player)
        moves = []
        for y in range(self.size):
            for x in range(self.size):
                if self._can_place(x, y, slot):
                    moves.append(to_list_position(x, y, self.size))
        return moves

    def has_possible_move(self, player: Optional[Identity] = None) -> bool:
        """Check if a player has at least one legal move."""
        slot = self._current_slot if player is None else self._slot_for(player)
        return any(self._can_place(x, y, slot)
                   for y in range(self.size) for x in range(self.size))

    def apply_move(self, list_position: int) -> Optional[Set[int]]:
        """
        Place a piece for the current player and flip captured pieces.

        Args:
            list_position: Flat index of the target cell

        Returns:
            Set of flat indices that changed (the placed cell and every flip),
            or None if the cell is occupied or the placement captures nothing

        Raises:
            InvalidPositionError: If list_position is off the board
        """
        if not 0 <= list_position < self.num_cells:
            raise InvalidPositionError("List position is outside the board",
                                       context={"list_position": list_position,
                                                "size": self.size})

        x, y = from_list_position(list_position, self.size)
        slot = self._current_slot

        if self.grid[y, x] != EMPTY_SLOT:
            debug.debug(f"Rejected move at ({x}, {y}): cell occupied", "board")
            return None

        flips = self._captures(x, y, slot)
        if not flips:
            debug.debug(f"Rejected move at ({x}, {y}): nothing captured", "board")
            return None

        debug.start_timer("apply_move")
        self.grid[y, x] = slot
        changed = {list_position}
        for fx, fy in flips:
            self.grid[fy, fx] = slot
            changed.add(to_list_position(fx, fy, self.size))

        self._update_piece_counts()
        mover = self.current_player
        self._current_slot = other_slot(slot)
        debug.end_timer("apply_move", "board")

        debug.debug(f"{mover} played ({x}, {y}) flipping {len(flips)}; "
                    f"score {self.player_one_pieces}-{self.player_two_pieces}", "board")
        return changed

    def apply_move_at(self, x: int, y: int) -> Optional[Set[int]]:
        """Coordinate form of apply_move."""
        if not is_valid_position(x, y, self.size):
            raise InvalidPositionError("Coordinate is outside the board",
                                       context={"x": x, "y": y, "size": self.size})
        return self.apply_move(to_list_position(x, y, self.size))

    def skip_turn(self):
        """Pass the turn to the other player unconditionally."""
        debug.debug(f"{self.current_player} skips a turn", "board")
        self._current_slot = other_slot(self._current_slot)

    def check_victory(self) -> Outcome:
        """
        Classify the position.

        If either player can still move the game is ongoing, including the
        case where only the opponent can move (the caller must skip_turn).
        Otherwise the player with strictly more pieces wins, or it is a tie.
        This never changes the board.
        """
        if self.has_possible_move(self.current_player):
            return Outcome.ongoing()
        if self.has_possible_move(self.opponent):
            debug.trace(f"{self.current_player} has no moves, {self.opponent} does", "board")
            return Outcome.ongoing()

        ones, twos = self.player_one_pieces, self.player_two_pieces
        if ones == twos:
            return Outcome.tie()
        return Outcome.win(self.player_one if ones > twos else self.player_two)

    # ------------------------------------------------------------------
    # Presentation helpers
    # ------------------------------------------------------------------

    def get_state(self) -> np.ndarray:
        """
        Get the slot grid as a numpy array.

        Returns:
            Copy of the grid indexed [y, x]
        """
        return self.grid.copy()

    def render(self, show_moves: bool = False) -> str:
        """
        Render the board as a string.

        Args:
            show_moves: Mark the current player's possible moves

        Returns:
            String representation of the board
        """
        hints = self.possible_moves() if show_moves else ()
        return render_board_ascii(self.grid, hints)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return (f"Board(size={self.size}, current={self.current_player.name!r}, "
                f"score={self.player_one_pieces}-{self.player_two_pieces})")
