"""
reversi.interfaces - User interfaces for Reversi

This package contains front ends that drive the engine, currently a
terminal CLI.
"""

# Don't import anything here to avoid circular imports
__all__ = []
