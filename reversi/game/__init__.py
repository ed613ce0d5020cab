"""
reversi.game - Core game mechanics for Reversi

This package contains the board engine and the turn controller that drives it.
"""

from reversi.game.board import Board, Cell
from reversi.game.rules import ReversiGame

__all__ = ['Board', 'Cell', 'ReversiGame']
