"""
reversi - Reversi (Othello) rules engine

This package provides the board engine for Reversi: board state, move
validation and application with captures, turn order, and detection of
finished and tied games. It also ships session persistence and a small
terminal front end that drive the engine.
"""

# Version number
__version__ = '0.1.0'
