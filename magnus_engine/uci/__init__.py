"""
UCI Protocol Interface

Lets chess GUIs (Arena, CuteChess, ...) play against the move engine.

Protocol Flow:
    GUI → "uci"
    Engine → "id name Magnus 0.1.0"
    Engine → "option name Level type spin default 8 min 0 max 10"
    Engine → "uciok"
    GUI → "setoption name Level value 4"
    GUI → "position startpos moves e2e4"
    GUI → "go"
    Engine → "bestmove e7e5"
"""

from magnus_engine.uci.interface import UCIEngine

__all__ = ['UCIEngine']
