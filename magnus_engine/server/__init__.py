"""
HTTP Move Service

The server tier of the fallback chain: POST /api/chess-ai/move returns a
heuristic move for a grid board.
"""

from magnus_engine.server.app import create_app

__all__ = ['create_app']
