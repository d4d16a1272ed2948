"""
Unit Tests for the UCI Front End

Tests for command handling, focusing on:
    - Identification and synchronization replies
    - Position setup and the Level option
    - bestmove output
"""

from unittest.mock import AsyncMock, patch

import chess
import pytest

from magnus_engine.board.types import Color
from magnus_engine.engine import MoveEngine
from magnus_engine.uci import interface
from magnus_engine.uci.interface import UCIEngine


@pytest.fixture
def engine(tmp_path, monkeypatch):
    monkeypatch.setattr(interface, "LOG_DIR", tmp_path)
    uci = UCIEngine(engine=MoveEngine(), debug=False)
    yield uci
    uci.close()
    for handler in list(uci.logger.handlers):
        handler.close()
        uci.logger.removeHandler(handler)


def output_lines(capsys):
    return capsys.readouterr().out.strip().splitlines()


class TestUCICommands:
    """Tests for UCIEngine.handle_command()."""

    def test_uci_identifies_engine(self, engine, capsys):
        engine.handle_command("uci")

        lines = output_lines(capsys)
        assert lines[0].startswith("id name Magnus")
        assert any(line.startswith("option name Level type spin") for line in lines)
        assert lines[-1] == "uciok"

    def test_isready(self, engine, capsys):
        engine.handle_command("isready")

        assert output_lines(capsys) == ["readyok"]

    def test_log_file_written_to_log_dir(self, engine, tmp_path):
        assert (tmp_path / "engine.log").exists()

    @pytest.mark.parametrize("value, expected", [("3", 3), ("15", 10), ("-2", 0)])
    def test_setoption_level(self, engine, value, expected):
        engine.handle_command(f"setoption name Level value {value}")

        assert engine.level == expected

    def test_setoption_ignores_unknown_and_malformed(self, engine):
        engine.handle_command("setoption name Hash value 64")
        engine.handle_command("setoption name Level")
        engine.handle_command("setoption name Level value high")

        assert engine.level == interface.DEFAULT_LEVEL

    def test_position_startpos_with_moves(self, engine):
        engine.handle_command("position startpos moves e2e4 e7e5")

        expected = chess.Board()
        expected.push_uci("e2e4")
        expected.push_uci("e7e5")
        assert engine.board == expected

    def test_position_fen(self, engine):
        fen = "4k3/8/8/3q4/4P3/8/8/4K3 w - - 0 1"

        engine.handle_command(f"position fen {fen}")

        assert engine.board.fen() == fen

    def test_illegal_move_stops_replay(self, engine):
        engine.handle_command("position startpos moves e2e4 e2e4")

        expected = chess.Board()
        expected.push_uci("e2e4")
        assert engine.board == expected

    def test_ucinewgame_resets_board(self, engine):
        engine.handle_command("position startpos moves e2e4")
        engine.handle_command("ucinewgame")

        assert engine.board == chess.Board()

    def test_go_outputs_legal_move(self, engine, capsys):
        engine.handle_command("position startpos moves d2d4")
        engine.handle_command("go wtime 1000 btime 1000")

        line = output_lines(capsys)[-1]
        assert line.startswith("bestmove ")
        assert chess.Move.from_uci(line.split()[1]) in engine.board.legal_moves

    def test_go_in_checkmate(self, engine, capsys):
        engine.handle_command("position fen rnb1kbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3")
        engine.handle_command("go")

        assert output_lines(capsys)[-1] == "bestmove 0000"

    def test_unknown_command_is_ignored(self, engine, capsys):
        assert engine.handle_command("xyzzy") is True
        assert output_lines(capsys) == []

    def test_quit(self, engine):
        assert engine.handle_command("quit") is False

    def test_go_passes_position_and_level_to_engine(self, engine, capsys):
        engine.handle_command("setoption name Level value 3")
        engine.handle_command("position startpos moves e2e4")

        with patch.object(engine.engine, "select_move", new=AsyncMock(return_value=None)) as select:
            engine.handle_command("go")

        _, moves, side, level = select.call_args.args
        assert side is Color.BLACK
        assert level == 3
        assert len(moves) == 20
        assert output_lines(capsys)[-1] == "bestmove 0000"

    def test_close_releases_event_loop(self, engine):
        engine.close()
        engine.close()

        assert engine.loop.is_closed()

    def test_run_closes_event_loop_on_eof(self, engine, monkeypatch):
        def no_input():
            raise EOFError

        monkeypatch.setattr("builtins.input", no_input)

        engine.run()

        assert engine.loop.is_closed()
