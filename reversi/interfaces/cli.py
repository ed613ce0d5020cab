"""
cli.py - Command-line interface for Reversi

This module provides a terminal front end for the engine: a two-player
hot-seat game with save/load, plus commands to inspect saved sessions.
"""

import argparse
import sys
from typing import Callable, List, Optional, Tuple

from reversi.data import session_manager
from reversi.data.session_manager import Session, SessionPlayer
from reversi.debug import debug, DebugLevel
from reversi.errors import ReversiError, SessionError
from reversi.game.rules import ReversiGame
from reversi.utils import (DEFAULT_BOARD_SIZE, MAX_BOARD_SIZE, MIN_BOARD_SIZE,
                           from_list_position)

HELP_TEXT = """Enter a move as two numbers: column then row (e.g. "3 2").
Cells marked * are possible moves.
Commands: h = list possible moves, n = new game, s NAME = save,
          k = quick save, q = quit"""


class ReversiCLI:
    """Terminal front end for playing and inspecting Reversi sessions."""

    def __init__(self, input_func: Callable[[str], str] = input):
        """
        Initialize the CLI.

        Args:
            input_func: Function used to read a line from the user
        """
        self.input = input_func
        self.args = None
        self.session: Optional[Session] = None
        self.game: Optional[ReversiGame] = None

    def parse_args(self, argv: Optional[List[str]] = None) -> None:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(description='Reversi CLI')
        parser.add_argument('--debug', action='store_true', help='Enable debug logging')
        parser.add_argument('--debug-level', default=None,
                            choices=[level.name.lower() for level in DebugLevel],
                            help='Logging level')
        parser.add_argument('--saves-dir', default=None, help='Directory for save files')

        subparsers = parser.add_subparsers(dest='command', help='Command to run')

        play_parser = subparsers.add_parser('play', help='Play a two-player game')
        play_parser.add_argument('--size', type=int, default=DEFAULT_BOARD_SIZE,
                                 help=f'Board size, even, {MIN_BOARD_SIZE}-{MAX_BOARD_SIZE}')
        play_parser.add_argument('--player-one', default='Player 1', help='Name of the first player')
        play_parser.add_argument('--player-two', default='Player 2', help='Name of the second player')
        play_parser.add_argument('--load', default=None, help='Resume a saved session')
        play_parser.add_argument('--autosave', action='store_true',
                                 help='Save the session after every move played')

        show_parser = subparsers.add_parser('show', help='Show a saved session')
        show_parser.add_argument('name', help='Save name or path')

        subparsers.add_parser('saves', help='List saved sessions')

        self.args = parser.parse_args(argv)

        if self.args.debug:
            debug.configure(level=DebugLevel.DEBUG)
        elif self.args.debug_level:
            debug.set_from_string(self.args.debug_level)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Run the CLI based on the parsed arguments."""
        if not self.args:
            self.parse_args(argv)

        try:
            if self.args.command == 'play':
                self.play()
            elif self.args.command == 'show':
                self.show_session()
            elif self.args.command == 'saves':
                self.list_saves()
            else:
                print("Please specify a command. Use --help for options.")
                return 1
        except ReversiError as e:
            debug.error(str(e), "cli")
            print(f"Error: {e.message}")
            return 1
        return 0

    # ------------------------------------------------------------------
    # play
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        """Create a new session or resume the one named by --load."""
        if self.args.load:
            self.session = session_manager.load_session(self.args.load, self.args.saves_dir)
            print(f"Loaded session: {self.session.player_one.name} vs {self.session.player_two.name}")
        else:
            self.session = Session(SessionPlayer(self.args.player_one),
                                   SessionPlayer(self.args.player_two))

        if self.session.board is None:
            self.session.new_board(self.args.size)
        self.game = ReversiGame.from_board(self.session.board)

    def play(self) -> None:
        """Play games until the players quit."""
        self.start_session()
        print(HELP_TEXT)

        while True:
            print()
            print(self.game.render())
            if self.game.is_game_over():
                self.finish_game()
                if not self.ask_yes_no("Play again? (y/n): "):
                    return
                self.new_game()
                continue

            command = self.read_command()
            if command is None or not self.handle_command(command):
                return

    def read_command(self) -> Optional[str]:
        """Read one line, or None at end of input."""
        try:
            return self.input(f"{self.game.get_current_player()}> ").strip()
        except EOFError:
            return None

    def handle_command(self, command: str) -> bool:
        """
        Dispatch one line of user input during a game.

        Returns:
            False when the user asked to quit
        """
        if not command:
            return True
        verb, _, rest = command.partition(" ")
        verb = verb.lower()

        if verb == 'q':
            return False
        elif verb == 'h':
            print("Possible moves: " + ", ".join(
                f"{x} {y}" for x, y in self.possible_coordinates()))
        elif verb == 'n':
            self.new_game()
        elif verb == 's':
            self.save(rest.strip())
        elif verb == 'k':
            self.save(session_manager.QUICK_SAVE_NAME)
        else:
            self.play_move(command)
        return True

    def play_move(self, text: str) -> None:
        """Parse "x y" and play it for the current player."""
        coords = parse_coordinates(text)
        if coords is None:
            print('Invalid input. Enter "x y" or a command (h for help).')
            return

        x, y = coords
        size = self.game.board.size
        if not (0 <= x < size and 0 <= y < size):
            print(f"Coordinates must be between 0 and {size - 1}.")
            return

        mover = self.game.get_current_player()
        changed = self.game.make_move_at(x, y)
        if changed is None:
            print(f"Invalid move: {x} {y}")
            return

        debug.debug(f"{mover} changed {sorted(changed)}", "cli")
        if self.game.last_skipped is not None:
            print(f"{self.game.last_skipped} has no possible moves and must pass.")

        if self.args.autosave:
            self.save(None, auto=True)

    def possible_coordinates(self) -> List[Tuple[int, int]]:
        size = self.game.board.size
        return [from_list_position(p, size) for p in self.game.get_valid_moves()]

    def new_game(self) -> None:
        """Start a new game in the same session."""
        self.game.reset()
        self.session.board = self.game.board
        self.session.status = "New game"
        self.session.result_recorded = False
        print("New game started.")

    def finish_game(self) -> None:
        """Credit the result to the session once and autosave if requested."""
        result = self.game.result
        credited = self.session.record_outcome(result)
        if result.is_tie:
            print("It's a tie!")
        else:
            print(f"{result.winner} wins!")
        print(f"Wins: {self.session.player_one.name} {self.session.player_one.wins}, "
              f"{self.session.player_two.name} {self.session.player_two.wins}")

        if credited and self.args.autosave:
            self.save(None, auto=True)

    def save(self, name: Optional[str], auto: bool = False) -> None:
        """Save the session, reporting failures instead of aborting the game."""
        try:
            if auto:
                path = session_manager.auto_save(self.session, self.args.saves_dir)
            else:
                path = session_manager.save_session(self.session, name, self.args.saves_dir)
        except SessionError as e:
            print(f"Save failed: {e.message}")
            return
        print(f"Saved to {path}")

    def ask_yes_no(self, prompt: str) -> bool:
        try:
            return self.input(prompt).strip().lower().startswith('y')
        except EOFError:
            return False

    # ------------------------------------------------------------------
    # show / saves
    # ------------------------------------------------------------------

    def show_session(self) -> None:
        """Print a saved session's board, possible moves and outcome."""
        session = session_manager.load_session(self.args.name, self.args.saves_dir)
        print(f"{session.player_one.name} ({session.player_one.wins} wins) vs "
              f"{session.player_two.name} ({session.player_two.wins} wins)")
        if session.status:
            print(f"Status: {session.status}")
        if session.board is None:
            print("No board in progress.")
            return

        board = session.board
        print(board.render(show_moves=True))
        print(f"Score: {board.player_one_pieces}-{board.player_two_pieces}")
        print(f"{board.current_player} to move; possible moves: " + ", ".join(
            f"{x} {y}" for x, y in (from_list_position(p, board.size)
                                    for p in board.possible_moves())))
        print(f"Outcome: {board.check_victory().describe()}")

    def list_saves(self) -> None:
        saves = session_manager.list_saves(self.args.saves_dir)
        if not saves:
            print("No saved sessions.")
            return
        for name in saves:
            print(name)


def parse_coordinates(text: str) -> Optional[Tuple[int, int]]:
    """
    Parse "x y" or "x,y" into a coordinate pair.

    Returns:
        (x, y), or None if the text is not two integers
    """
    parts = text.replace(",", " ").split()
    if len(parts) != 2:
        return None
    try:
        return int(parts[0]), int(parts[1])
    except ValueError:
        return None


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point."""
    return ReversiCLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
