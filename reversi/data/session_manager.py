"""
session_manager.py - Session storage for Reversi

A session pairs two named players (with their running win totals) with the
board they are currently playing. Sessions are stored as JSON files in the
saves directory, guarded by a file lock and replaced atomically.
"""

import datetime
import json
import os
import shutil
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import filelock

from reversi.debug import debug
from reversi.errors import (InvalidIdentityError, LoadSessionError, ReversiError,
                            SaveSessionError)
from reversi.game.board import Board
from reversi.utils import DEFAULT_BOARD_SIZE, Identity, Outcome

# Save file settings
SAVES_DIR = os.environ.get("REVERSI_SAVES_DIR", os.path.join(os.getcwd(), "saves"))
SAVE_EXTENSION = ".rev"
SAVE_FORMAT_VERSION = 1
QUICK_SAVE_NAME = "QUICK"
LOCK_TIMEOUT = 10  # seconds


@dataclass
class SessionPlayer:
    """A named player and their record across the games of a session."""
    name: str
    wins: int = 0
    pieces: int = 0
    identity: Identity = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        if self.name is None or not str(self.name).strip():
            raise InvalidIdentityError("The name cannot be empty")
        self.name = str(self.name).strip()
        self.identity = Identity(self.name)

    def increment_wins(self):
        self.wins += 1

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "wins": self.wins, "pieces": self.pieces}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SessionPlayer':
        return cls(name=data["name"], wins=int(data.get("wins", 0)),
                   pieces=int(data.get("pieces", 0)))


@dataclass
class Session:
    """Two players, the board they are playing and a status line."""
    player_one: SessionPlayer
    player_two: SessionPlayer
    board: Optional[Board] = None
    status: str = ""
    result_recorded: bool = False

    def new_board(self, size: int = DEFAULT_BOARD_SIZE) -> Board:
        """Replace the current board with a fresh one for these players."""
        self.board = Board(self.player_one.identity, self.player_two.identity, size)
        self.status = "New game"
        self.result_recorded = False
        self.sync_pieces()
        return self.board

    def sync_pieces(self):
        """Copy the board's piece counts onto the players."""
        if self.board is None:
            return
        self.player_one.pieces = self.board.player_one_pieces
        self.player_two.pieces = self.board.player_two_pieces

    def record_outcome(self, outcome: Outcome) -> bool:
        """
        Credit a finished game to the winner, once per board.

        Ties and ongoing outcomes leave the win totals unchanged.

        Returns:
            False if this board's result was already recorded
        """
        self.sync_pieces()
        if self.result_recorded:
            return False
        self.status = outcome.describe()
        self.result_recorded = outcome.is_game_over
        if outcome.winner is self.player_one.identity:
            self.player_one.increment_wins()
        elif outcome.winner is self.player_two.identity:
            self.player_two.increment_wins()
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": SAVE_FORMAT_VERSION,
            "saved_at": datetime.datetime.now().isoformat(),
            "status": self.status,
            "result_recorded": self.result_recorded,
            "player_one": self.player_one.to_dict(),
            "player_two": self.player_two.to_dict(),
            "board": self.board.to_dict() if self.board is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Session':
        """
        Rebuild a session; the board reuses the players' identities.

        Raises:
            LoadSessionError: If the data is malformed
        """
        try:
            version = data.get("version", SAVE_FORMAT_VERSION)
            if version != SAVE_FORMAT_VERSION:
                raise LoadSessionError("Unsupported save format version",
                                       context={"version": version})

            session = cls(SessionPlayer.from_dict(data["player_one"]),
                          SessionPlayer.from_dict(data["player_two"]),
                          status=data.get("status", ""),
                          result_recorded=bool(data.get("result_recorded", False)))
            if data.get("board") is not None:
                session.board = Board.from_dict(data["board"],
                                                session.player_one.identity,
                                                session.player_two.identity)
            return session
        except LoadSessionError:
            raise
        except (ReversiError, KeyError, TypeError, ValueError, AttributeError) as e:
            raise LoadSessionError(f"Malformed session data: {e}") from e


# File utility functions
def ensure_saves_dir(saves_dir: Optional[str] = None) -> str:
    """Create the saves directory if needed and return its path."""
    saves_dir = saves_dir or SAVES_DIR
    os.makedirs(saves_dir, exist_ok=True)
    return saves_dir


def save_path(name: str, saves_dir: Optional[str] = None) -> str:
    """Path of the save file for a session name."""
    if not name.endswith(SAVE_EXTENSION):
        name += SAVE_EXTENSION
    return os.path.join(saves_dir or SAVES_DIR, name)


def safe_read_json(file_path: str) -> Any:
    """
    Read a JSON file under its lock.

    Raises:
        LoadSessionError: If the file is missing or cannot be decoded
    """
    if not os.path.exists(file_path):
        raise LoadSessionError("Save file not found", context={"path": file_path})

    try:
        with filelock.FileLock(f"{file_path}.lock", timeout=LOCK_TIMEOUT):
            with open(file_path, 'r') as f:
                return json.load(f)
    except (OSError, json.JSONDecodeError, filelock.Timeout) as e:
        debug.error(f"Error reading {file_path}: {e}", "session")
        raise LoadSessionError("Could not load the file", context={"path": file_path}) from e


def safe_write_json(file_path: str, data: Any) -> bool:
    """
    Write data to a JSON file with atomic replacement.

    Args:
        file_path: Path to JSON file
        data: Data to write

    Returns:
        True if successful, False otherwise
    """
    lock_path = f"{file_path}.lock"
    try:
        with filelock.FileLock(lock_path, timeout=LOCK_TIMEOUT):
            temp_file = f"{file_path}.tmp"
            with open(temp_file, 'w') as f:
                json.dump(data, f, indent=2)
            shutil.move(temp_file, file_path)
            return True
    except (OSError, TypeError, filelock.Timeout) as e:
        debug.error(f"Error writing to {file_path}: {e}", "session")
        return False


# Session persistence
def save_session(session: Session, name: str, saves_dir: Optional[str] = None) -> str:
    """
    Save a session under the given name, overwriting any previous save.

    Returns:
        Path of the written file

    Raises:
        SaveSessionError: If the name is empty or the file cannot be written
    """
    name = (name or "").strip()
    if not name:
        raise SaveSessionError("The save name cannot be empty")

    session.sync_pieces()
    try:
        path = save_path(name, ensure_saves_dir(saves_dir))
    except OSError as e:
        debug.error(f"Cannot create saves directory: {e}", "session")
        raise SaveSessionError("Could not save to file.") from e

    if not safe_write_json(path, session.to_dict()):
        raise SaveSessionError("Could not save to file.", context={"path": path})

    debug.info(f"Saved session to {path}", "session")
    return path


def auto_save(session: Session, saves_dir: Optional[str] = None) -> str:
    """Save under a name derived from the two players."""
    return save_session(session, f"AUTO {session.player_one.name}-{session.player_two.name}",
                        saves_dir)


def quick_save(session: Session, saves_dir: Optional[str] = None) -> str:
    """Save to the single quick-save slot, replacing the previous one."""
    return save_session(session, QUICK_SAVE_NAME, saves_dir)


def load_session(name_or_path: str, saves_dir: Optional[str] = None) -> Session:
    """
    Load a session from a file path or from a save name in the saves directory.

    Raises:
        LoadSessionError: If the file is missing or malformed
    """
    path = name_or_path
    if not os.path.isfile(path):
        path = save_path(name_or_path, saves_dir)

    session = Session.from_dict(safe_read_json(path))
    debug.info(f"Loaded session from {path}", "session")
    return session


def quick_load(saves_dir: Optional[str] = None) -> Session:
    """Load the quick-save slot."""
    return load_session(QUICK_SAVE_NAME, saves_dir)


def list_saves(saves_dir: Optional[str] = None) -> List[str]:
    """
    List save names in the saves directory, most recently modified first.

    Returns:
        Names without the file extension
    """
    saves_dir = saves_dir or SAVES_DIR
    if not os.path.isdir(saves_dir):
        return []

    entries = [e for e in os.scandir(saves_dir)
               if e.is_file() and e.name.endswith(SAVE_EXTENSION)]
    entries.sort(key=lambda e: e.stat().st_mtime, reverse=True)
    return [e.name[:-len(SAVE_EXTENSION)] for e in entries]
