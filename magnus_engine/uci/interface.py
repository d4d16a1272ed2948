"""
UCI Protocol Implementation

This module lets chess GUIs play against the move engine through the
Universal Chess Interface. python-chess keeps the game state and supplies
the legal moves; MoveEngine picks one.

UCI Commands Supported:
    - uci: Identify engine
    - isready: Synchronization check
    - ucinewgame: Start new game
    - setoption name Level value N: Set the difficulty (0-10)
    - position: Set board position
    - go: Pick a move (search parameters are accepted and ignored)
    - quit: Shutdown engine

Move selection is single-ply and fast, so it runs inline on the command
loop's event loop rather than in a search thread.

References:
    - UCI Protocol: https://www.chessprogramming.org/UCI
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

import chess

from magnus_engine import __version__
from magnus_engine.board.conversion import board_from_chess, move_from_chess, move_to_chess
from magnus_engine.board.types import Color
from magnus_engine.engine.config import EngineConfig
from magnus_engine.engine.orchestrator import MoveEngine
from magnus_engine.selection.policy import MAX_LEVEL

LOG_DIR = Path.home() / ".magnus_engine"
DEFAULT_LEVEL = 8


def setup_logger(debug=True):
    """
    Setup file-based logger for UCI debugging.

    stdout carries the protocol, so log records go to
    ~/.magnus_engine/engine.log. The handler is attached to the package
    logger so engine modules log there too.

    Args:
        debug: If True, log at DEBUG level; otherwise INFO level

    Returns:
        Configured logger instance
    """
    LOG_DIR.mkdir(exist_ok=True)
    log_file = LOG_DIR / "engine.log"

    logger = logging.getLogger("magnus_engine")
    logger.setLevel(logging.DEBUG if debug else logging.INFO)

    logger.handlers.clear()

    handler = logging.FileHandler(log_file, mode='w')
    formatter = logging.Formatter(
        '%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    return logger


class UCIEngine:
    """
    UCI-compliant front end for MoveEngine.

    Attributes:
        board: Current chess position
        engine: Move engine making the decisions
        level: Difficulty passed to the engine (0-10)
    """

    def __init__(self, engine: Optional[MoveEngine] = None, level: int = DEFAULT_LEVEL, debug=True):
        """
        Initialize UCI engine.

        Args:
            engine: Move engine (default: configured from MAGNUS_* variables)
            level: Initial difficulty level
            debug: Enable debug logging (default: True)
        """
        self.board = chess.Board()
        self.engine = engine or MoveEngine(EngineConfig.from_env())
        self.level = level
        self.loop = asyncio.new_event_loop()

        self.name = "Magnus"
        self.version = __version__
        self.author = "Magnus AI Demo"

        self.logger = setup_logger(debug=debug)
        self.logger.info("=== Magnus Engine Started ===")

    def run(self):
        """
        Main UCI command loop.

        Listens for UCI commands on stdin and responds on stdout.
        Runs until 'quit' command is received or stdin closes.
        """
        try:
            while True:
                try:
                    command = input().strip()
                except EOFError:
                    self.logger.info("EOF received, shutting down")
                    break

                if not command:
                    continue

                self.logger.debug(f">>> {command}")

                try:
                    if not self.handle_command(command):
                        break
                except Exception as e:
                    self.logger.error(f"Command error: {e}", exc_info=True)
                    print(f"# Error: {e}", file=sys.stderr)
        finally:
            self.close()

    def close(self):
        """Close the event loop used for move selection. Safe to call twice."""
        if not self.loop.is_closed():
            self.loop.close()

    def handle_command(self, command: str) -> bool:
        """
        Dispatch one command line.

        Returns:
            False when the loop should stop
        """
        tokens = command.split()
        cmd = tokens[0].lower()

        if cmd == "uci":
            self.handle_uci()
        elif cmd == "isready":
            self.handle_isready()
        elif cmd == "ucinewgame":
            self.handle_ucinewgame()
        elif cmd == "setoption":
            self.handle_setoption(tokens)
        elif cmd == "position":
            self.handle_position(tokens)
        elif cmd == "go":
            self.handle_go(tokens)
        elif cmd == "stop":
            # Moves are picked synchronously; nothing to interrupt
            pass
        elif cmd == "quit":
            self.logger.info("=== Magnus Engine Stopped ===")
            return False
        else:
            # Unknown command - the protocol says to ignore it
            self.logger.debug(f"Unknown command ignored: {command}")

        return True

    def _send(self, line: str):
        print(line)
        sys.stdout.flush()
        self.logger.debug(f"<<< {line}")

    def handle_uci(self):
        """Handle 'uci' command - identify engine and list options."""
        self._send(f"id name {self.name} {self.version}")
        self._send(f"id author {self.author}")
        self._send(f"option name Level type spin default {DEFAULT_LEVEL} min 0 max {MAX_LEVEL}")
        self._send("uciok")

    def handle_isready(self):
        """Handle 'isready' command - synchronization."""
        self._send("readyok")

    def handle_ucinewgame(self):
        """Handle 'ucinewgame' command - reset the board."""
        self.logger.info("Handling: ucinewgame - resetting board")
        self.board = chess.Board()

    def handle_setoption(self, tokens: List[str]):
        """
        Handle 'setoption name <name> value <value>'.

        Only 'Level' is recognised; out-of-range values are clamped.
        """
        try:
            name = " ".join(tokens[tokens.index("name") + 1:tokens.index("value")])
            value = tokens[tokens.index("value") + 1]
        except (ValueError, IndexError):
            self.logger.warning(f"Malformed setoption: {' '.join(tokens)}")
            return

        if name.lower() != "level":
            self.logger.debug(f"Unknown option ignored: {name}")
            return

        try:
            self.level = max(0, min(int(value), MAX_LEVEL))
        except ValueError:
            self.logger.warning(f"Invalid Level value: {value}")
            return
        self.logger.info(f"Level set to {self.level}")

    def handle_position(self, tokens: List[str]):
        """
        Handle 'position' command - set board position.

        Formats:
            position startpos
            position startpos moves e2e4 e7e5
            position fen <FEN string>
            position fen <FEN string> moves e2e4
        """
        if len(tokens) < 2:
            self.logger.warning("Position command with insufficient arguments")
            return

        if "moves" in tokens:
            moves_index = tokens.index("moves")
        else:
            moves_index = len(tokens)

        if tokens[1] == "startpos":
            board = chess.Board()
        elif tokens[1] == "fen":
            fen = " ".join(tokens[2:moves_index])
            try:
                board = chess.Board(fen)
            except ValueError as e:
                self.logger.error(f"Invalid FEN: {e}")
                print(f"# Invalid FEN: {e}", file=sys.stderr)
                return
        else:
            self.logger.warning(f"Unknown position type: {tokens[1]}")
            return

        for move_str in tokens[moves_index + 1:]:
            try:
                move = chess.Move.from_uci(move_str)
            except ValueError as e:
                self.logger.error(f"Invalid move format: {move_str} - {e}")
                print(f"# Invalid move format: {move_str}", file=sys.stderr)
                break
            if move not in board.legal_moves:
                self.logger.error(f"Illegal move: {move_str}")
                print(f"# Illegal move: {move_str}", file=sys.stderr)
                break
            board.push(move)

        self.board = board
        self.logger.info(f"Position updated: {board.fen()}")

    def choose_move(self) -> Optional[chess.Move]:
        """Ask the move engine for a move in the current position."""
        side = Color.WHITE if self.board.turn == chess.WHITE else Color.BLACK
        moves = [move_from_chess(move) for move in self.board.legal_moves]

        move = self.loop.run_until_complete(
            self.engine.select_move(board_from_chess(self.board), moves, side, self.level)
        )
        return move_to_chess(move) if move is not None else None

    def handle_go(self, tokens: List[str]):
        """
        Handle 'go' command - output the chosen move.

        Output:
            bestmove <move>      (or 'bestmove 0000' when there is none)
        """
        self.logger.info(f"Handling: go {' '.join(tokens[1:])} at level {self.level}")

        move = self.choose_move()
        if move is None:
            self.logger.warning("No legal moves in current position")
            self._send("bestmove 0000")
            return

        self._send(f"bestmove {move.uci()}")


def main():
    """Console entry point."""
    UCIEngine().run()
