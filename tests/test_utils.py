"""
Tests for shared helpers: coordinates, outcomes, errors and the debug manager.
"""

import numpy as np
import pytest

from reversi.debug import DebugLevel, DebugManager
from reversi.errors import InvalidPositionError, ReversiError, SaveSessionError, SessionError
from reversi.utils import (DIRECTION_VECTORS, PLAYER_ONE_SLOT, PLAYER_TWO_SLOT,
                           EMPTY_SLOT, GameStatus, Identity, Outcome,
                           from_list_position, is_valid_size, other_slot,
                           render_board_ascii, to_list_position)


class TestCoordinates:
    def test_flat_index(self):
        assert to_list_position(3, 2, 8) == 19
        assert from_list_position(19, 8) == (3, 2)

    def test_bijection(self):
        size = 10
        seen = {to_list_position(x, y, size) for y in range(size) for x in range(size)}
        assert seen == set(range(size * size))
        for position in seen:
            assert to_list_position(*from_list_position(position, size), size) == position

    @pytest.mark.parametrize("size,expected", [
        (4, True), (8, True), (12, True),
        (2, False), (5, False), (14, False), (True, False), (8.0, False),
    ])
    def test_is_valid_size(self, size, expected):
        assert is_valid_size(size) is expected

    def test_eight_distinct_directions(self):
        vectors = set(DIRECTION_VECTORS.values())
        assert len(vectors) == 8
        assert (0, 0) not in vectors

    def test_other_slot(self):
        assert other_slot(PLAYER_ONE_SLOT) == PLAYER_TWO_SLOT
        assert other_slot(PLAYER_TWO_SLOT) == PLAYER_ONE_SLOT
        assert other_slot(EMPTY_SLOT) == EMPTY_SLOT

    def test_render_wide_board(self):
        text = render_board_ascii(np.zeros((12, 12), dtype=int))
        lines = text.splitlines()
        assert len(lines) == 13
        assert lines[-1].startswith("11 ")


class TestOutcome:
    def test_ongoing(self):
        outcome = Outcome.ongoing()
        assert outcome.status == GameStatus.ONGOING
        assert not outcome.is_game_over
        assert outcome.describe() == "In progress"

    def test_win(self):
        alice = Identity("Alice")
        outcome = Outcome.win(alice)
        assert outcome.is_game_over
        assert outcome.winner is alice
        assert outcome.describe() == "Alice wins"

    def test_tie_is_not_an_identity(self):
        outcome = Outcome.tie()
        assert outcome.is_tie
        assert outcome.winner is None

    def test_identity_equality_is_by_object(self):
        assert Identity("Sam") != Identity("Sam")
        alice = Identity("Alice", color="black")
        assert Identity.from_dict(alice.to_dict()).color == "black"


class TestErrors:
    def test_str_with_context(self):
        error = InvalidPositionError("Outside", context={"list_position": 70})
        assert str(error) == "[INVALID_POSITION] Outside (list_position=70)"
        assert error.to_dict()["code"] == "INVALID_POSITION"

    def test_hierarchy(self):
        assert issubclass(SaveSessionError, SessionError)
        assert issubclass(SessionError, ReversiError)
        assert str(ReversiError("plain")) == "[REVERSI_ERROR] plain"


class TestDebugManager:
    def test_level_from_string(self):
        assert DebugLevel.from_string("Trace") == DebugLevel.TRACE
        assert DebugLevel.from_string("loud") is None

    def test_level_filtering(self):
        manager = DebugManager("reversi.test.levels")
        manager.configure(level=DebugLevel.WARNING)
        assert manager.is_enabled_for(DebugLevel.ERROR)
        assert not manager.is_enabled_for(DebugLevel.INFO)
        assert not manager.is_enabled_for(DebugLevel.NONE)

    def test_component_filtering(self):
        manager = DebugManager("reversi.test.components")
        manager.configure(level=DebugLevel.DEBUG, components=["board"])
        assert manager.is_enabled_for(DebugLevel.DEBUG, "board")
        assert not manager.is_enabled_for(DebugLevel.DEBUG, "session")

    def test_disabled(self):
        manager = DebugManager("reversi.test.disabled")
        manager.configure(enabled=False)
        assert not manager.is_enabled_for(DebugLevel.ERROR)

    def test_set_from_string(self):
        manager = DebugManager("reversi.test.strings")
        assert manager.set_from_string("debug")
        assert manager.level == DebugLevel.DEBUG
        assert not manager.set_from_string("nonsense")
        assert manager.level == DebugLevel.DEBUG

    def test_timer(self):
        manager = DebugManager("reversi.test.timer")
        manager.start_timer("work")
        assert manager.end_timer("work") >= 0
        assert manager.end_timer("work") is None

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "reversi.log"
        manager = DebugManager("reversi.test.file")
        manager.configure(log_file=str(log_file))
        manager.error("something broke", "session")
        manager.configure(log_file="")
        assert "[session] something broke" in log_file.read_text()

    def test_env_configuration(self, monkeypatch):
        monkeypatch.setenv("REVERSI_DEBUG_LEVEL", "error")
        manager = DebugManager("reversi.test.env")
        manager.configure_from_env()
        assert manager.level == DebugLevel.ERROR
