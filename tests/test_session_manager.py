"""
Tests for session persistence.
"""

import json
import os

import filelock
import pytest

from reversi.data import session_manager
from reversi.data.session_manager import Session, SessionPlayer
from reversi.errors import InvalidIdentityError, LoadSessionError, SaveSessionError
from reversi.utils import Outcome


@pytest.fixture
def session():
    session = Session(SessionPlayer("Alice"), SessionPlayer("Bob"))
    session.new_board(8)
    return session


class TestSessionPlayer:
    def test_name_is_trimmed(self):
        assert SessionPlayer("  Alice ").name == "Alice"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_blank_name(self, name):
        with pytest.raises(InvalidIdentityError):
            SessionPlayer(name)

    def test_increment_wins(self):
        player = SessionPlayer("Alice")
        player.increment_wins()
        assert player.wins == 1


class TestSession:
    def test_new_board_uses_player_identities(self, session):
        assert session.board.player_one is session.player_one.identity
        assert session.board.player_two is session.player_two.identity
        assert session.player_one.pieces == 2

    def test_record_outcome(self, session):
        session.record_outcome(Outcome.win(session.player_two.identity))
        assert session.player_two.wins == 1
        assert session.player_one.wins == 0
        assert session.status == "Bob wins"

    def test_tie_records_no_win(self, session):
        session.record_outcome(Outcome.tie())
        assert (session.player_one.wins, session.player_two.wins) == (0, 0)
        assert session.status == "Tie"

    def test_outcome_is_recorded_once(self, session):
        assert session.record_outcome(Outcome.win(session.player_one.identity))
        assert not session.record_outcome(Outcome.win(session.player_one.identity))
        assert session.player_one.wins == 1
        assert session.result_recorded

    def test_recorded_flag_survives_save(self, session):
        session.record_outcome(Outcome.win(session.player_one.identity))
        restored = Session.from_dict(json.loads(json.dumps(session.to_dict())))
        assert restored.result_recorded
        assert not restored.record_outcome(Outcome.win(restored.player_one.identity))
        assert restored.player_one.wins == 1

    def test_ongoing_outcome_is_not_recorded(self, session):
        session.record_outcome(Outcome.ongoing())
        assert not session.result_recorded

    def test_new_board_clears_recorded_flag(self, session):
        session.record_outcome(Outcome.tie())
        session.new_board(4)
        assert not session.result_recorded

    def test_dict_round_trip(self, session):
        session.board.apply_move(20)
        session.player_one.wins = 3
        session.sync_pieces()
        restored = Session.from_dict(json.loads(json.dumps(session.to_dict())))

        assert restored.player_one == session.player_one
        assert restored.player_two.name == "Bob"
        assert restored.board.current_player is restored.player_two.identity
        assert restored.board.possible_moves() == session.board.possible_moves()
        assert restored.player_one.pieces == 4

    def test_session_without_board(self):
        session = Session(SessionPlayer("Alice"), SessionPlayer("Bob"), status="Idle")
        restored = Session.from_dict(session.to_dict())
        assert restored.board is None
        assert restored.status == "Idle"

    def test_unsupported_version(self, session):
        data = session.to_dict()
        data["version"] = 99
        with pytest.raises(LoadSessionError):
            Session.from_dict(data)

    def test_malformed_board(self, session):
        data = session.to_dict()
        data["board"]["cells"] = [0, 1]
        with pytest.raises(LoadSessionError):
            Session.from_dict(data)


class TestPersistence:
    def test_save_and_load(self, session, tmp_path):
        session.board.apply_move(20)
        path = session_manager.save_session(session, "my game", str(tmp_path))
        assert os.path.isfile(path)
        assert path.endswith("my game.rev")

        loaded = session_manager.load_session("my game", str(tmp_path))
        assert loaded.board.player_one_pieces == 4
        assert loaded.board.current_player.name == "Bob"

    def test_load_by_path(self, session, tmp_path):
        path = session_manager.save_session(session, "by_path", str(tmp_path))
        assert session_manager.load_session(path).player_one.name == "Alice"

    def test_save_overwrites(self, session, tmp_path):
        session_manager.save_session(session, "slot", str(tmp_path))
        session.board.apply_move(20)
        session_manager.save_session(session, "slot", str(tmp_path))
        loaded = session_manager.load_session("slot", str(tmp_path))
        assert loaded.board.player_one_pieces == 4

    def test_quick_save_and_load(self, session, tmp_path):
        session_manager.quick_save(session, str(tmp_path))
        assert session_manager.quick_load(str(tmp_path)).player_two.name == "Bob"

    def test_auto_save_name(self, session, tmp_path):
        path = session_manager.auto_save(session, str(tmp_path))
        assert os.path.basename(path) == "AUTO Alice-Bob.rev"

    def test_empty_save_name(self, session, tmp_path):
        with pytest.raises(SaveSessionError):
            session_manager.save_session(session, "  ", str(tmp_path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(LoadSessionError):
            session_manager.load_session("nothing here", str(tmp_path))

    def test_corrupt_file(self, tmp_path):
        (tmp_path / "broken.rev").write_text("{not json")
        with pytest.raises(LoadSessionError):
            session_manager.load_session("broken", str(tmp_path))

    def test_wrong_shape_file(self, tmp_path):
        (tmp_path / "list.rev").write_text("[1, 2, 3]")
        with pytest.raises(LoadSessionError):
            session_manager.load_session("list", str(tmp_path))

    @pytest.mark.parametrize("error", [filelock.Timeout("busy.rev.lock"), PermissionError("denied")])
    def test_lock_failure_is_a_load_error(self, session, tmp_path, monkeypatch, error):
        session_manager.save_session(session, "busy", str(tmp_path))

        class FailingLock:
            def __init__(self, *args, **kwargs):
                pass

            def __enter__(self):
                raise error

            def __exit__(self, *exc):
                return False

        monkeypatch.setattr(session_manager.filelock, "FileLock", FailingLock)
        with pytest.raises(LoadSessionError):
            session_manager.load_session("busy", str(tmp_path))

    def test_list_saves(self, session, tmp_path):
        assert session_manager.list_saves(str(tmp_path)) == []
        session_manager.save_session(session, "first", str(tmp_path))
        session_manager.save_session(session, "second", str(tmp_path))
        (tmp_path / "notes.txt").write_text("ignored")
        assert sorted(session_manager.list_saves(str(tmp_path))) == ["first", "second"]

    def test_list_saves_missing_dir(self, tmp_path):
        assert session_manager.list_saves(str(tmp_path / "absent")) == []

    def test_saves_dir_created(self, session, tmp_path):
        target = tmp_path / "nested" / "saves"
        session_manager.save_session(session, "game", str(target))
        assert (target / "game.rev").is_file()
