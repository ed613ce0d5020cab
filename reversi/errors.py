"""
errors.py - Exception hierarchy for the Reversi package

Every exception raised on purpose by the package derives from ReversiError,
so a front end can catch the whole family in one place.

Usage:
    from reversi.errors import InvalidPositionError

    try:
        board.apply_move(position)
    except InvalidPositionError as e:
        debug.warning(f"Rejected move: {e.message}", "cli")

Gameplay outcomes such as an occupied cell, a placement that captures
nothing, or a player without moves are not errors; the engine reports those
through ordinary return values.
"""

from typing import Any, Dict, Optional

__all__ = [
    "ReversiError",
    # Board errors
    "InvalidSizeError",
    "InvalidIdentityError",
    "InvalidPositionError",
    "InvalidStateError",
    # Session errors
    "SessionError",
    "SaveSessionError",
    "LoadSessionError",
]


class ReversiError(Exception):
    """Base exception for all Reversi errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "REVERSI_ERROR"

    def __init__(self, message: str, code: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a dictionary for JSON output."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Board Errors
# =============================================================================


class InvalidSizeError(ReversiError):
    """Board size is odd or outside the supported range."""
    code: str = "INVALID_SIZE"


class InvalidIdentityError(ReversiError):
    """A player identity is missing, duplicated or has no usable name."""
    code: str = "INVALID_IDENTITY"


class InvalidPositionError(ReversiError):
    """A flat index or coordinate lies outside the board.

    This is a caller bug: a front end that only offers possible moves
    never triggers it.
    """
    code: str = "INVALID_POSITION"


class InvalidStateError(ReversiError):
    """Board data handed to the restoration constructor is inconsistent."""
    code: str = "INVALID_STATE"


# =============================================================================
# Session Errors
# =============================================================================


class SessionError(ReversiError):
    """Base for session persistence failures."""
    code: str = "SESSION_ERROR"


class SaveSessionError(SessionError):
    """A session could not be written to disk."""
    code: str = "SAVE_FAILED"


class LoadSessionError(SessionError):
    """A session file is missing, unreadable or malformed."""
    code: str = "LOAD_FAILED"
