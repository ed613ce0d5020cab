"""
reversi.data - Session persistence for Reversi

This package stores sessions (two players, their win totals and the board in
play) as JSON save files.
"""

from reversi.data.session_manager import Session, SessionPlayer

__all__ = ['Session', 'SessionPlayer']
