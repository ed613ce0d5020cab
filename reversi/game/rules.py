"""
rules.py - Turn management for a Reversi game

This module provides ReversiGame, the caller-side controller that drives a
Board the way a front end does: it applies moves, makes a stuck player pass,
and records the outcome once neither player can move.
"""

from typing import List, Optional, Set, Tuple

from reversi.debug import debug
from reversi.errors import InvalidPositionError
from reversi.game.board import Board
from reversi.utils import (DEFAULT_BOARD_SIZE, Identity, Outcome, is_valid_position,
                           to_list_position)


class ReversiGame:
    """
    High-level Reversi game manager.

    The Board never skips a turn by itself; this class does so whenever the
    player to move has no legal move but the opponent still has one.
    """

    def __init__(self, player_one: Identity, player_two: Identity,
                 size: int = DEFAULT_BOARD_SIZE):
        """
        Initialize a new Reversi game.

        Args:
            player_one: Identity that moves first
            player_two: Identity that moves second
            size: Board size
        """
        debug.debug("Initializing ReversiGame", "game")
        self.board = Board(player_one, player_two, size)
        self.result = Outcome.ongoing()
        self.moves_played = 0
        self.last_skipped: Optional[Identity] = None

    @classmethod
    def from_board(cls, board: Board) -> 'ReversiGame':
        """
        Continue a game from an existing (e.g. restored) board.

        Pending passes are resolved immediately, so a board saved in a
        finished position comes back as a finished game.
        """
        game = cls.__new__(cls)
        game.board = board
        game.result = Outcome.ongoing()
        game.moves_played = 0
        game.last_skipped = None
        game._advance()
        return game

    def reset(self, size: Optional[int] = None) -> None:
        """Start a new game with the same players, optionally on a new size."""
        size = self.board.size if size is None else size
        debug.debug(f"Resetting game on a {size}x{size} board", "game")
        self.board = Board(self.board.player_one, self.board.player_two, size)
        self.result = Outcome.ongoing()
        self.moves_played = 0
        self.last_skipped = None

    def make_move(self, list_position: int) -> Optional[Set[int]]:
        """
        Make a move for the current player.

        Args:
            list_position: Flat index of the target cell

        Returns:
            Set of changed flat indices, or None if the move was not legal or
            the game is already over
        """
        if self.is_game_over():
            debug.debug("Move ignored: game is over", "game")
            return None

        changed = self.board.apply_move(list_position)
        if changed is None:
            return None

        self.moves_played += 1
        self.last_skipped = None
        self._advance()
        return changed

    def make_move_at(self, x: int, y: int) -> Optional[Set[int]]:
        """Coordinate form of make_move."""
        if not is_valid_position(x, y, self.board.size):
            raise InvalidPositionError("Coordinate is outside the board",
                                       context={"x": x, "y": y, "size": self.board.size})
        return self.make_move(to_list_position(x, y, self.board.size))

    def _advance(self) -> None:
        """Resolve a pass or the end of the game after the board changed."""
        if self.board.has_possible_move():
            return

        outcome = self.board.check_victory()
        if outcome.is_game_over:
            self.result = outcome
            debug.info(f"Game over: {outcome.describe()} "
                       f"({self.board.player_one_pieces}-{self.board.player_two_pieces})", "game")
            return

        self.last_skipped = self.board.current_player
        debug.info(f"{self.last_skipped} has no possible moves and passes", "game")
        self.board.skip_turn()

    def is_game_over(self) -> bool:
        """Check if the game is over."""
        return self.result.is_game_over

    def get_winner(self) -> Optional[Identity]:
        """
        Get the winner of the game.

        Returns:
            The winning identity, or None if the game is ongoing or tied
        """
        return self.result.winner

    def get_current_player(self) -> Identity:
        return self.board.current_player

    def get_valid_moves(self) -> List[int]:
        """Possible moves of the current player, or [] once the game is over."""
        if self.is_game_over():
            return []
        return self.board.possible_moves()

    def get_score(self) -> Tuple[int, int]:
        """
        Get the current score.

        Returns:
            Tuple of (player_one_pieces, player_two_pieces)
        """
        return self.board.player_one_pieces, self.board.player_two_pieces

    def render(self, show_moves: bool = True) -> str:
        """
        Render the game as a string.

        Returns:
            Board followed by the score and whose turn it is
        """
        board = self.board
        lines = [board.render(show_moves=show_moves and not self.is_game_over())]
        lines.append(f"{board.player_one} (X): {board.player_one_pieces}   "
                     f"{board.player_two} (O): {board.player_two_pieces}")
        if self.is_game_over():
            lines.append(f"Game over: {self.result.describe()}")
        else:
            lines.append(f"{board.current_player} to move")
        return "\n".join(lines)
