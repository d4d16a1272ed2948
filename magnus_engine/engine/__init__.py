"""
Engine Module

Orchestration around the evaluators and the selection policy.

Key Components:
    - MoveEngine: Fallback chain and duplicate-request suppression
    - EngineConfig: Tunables, optionally read from MAGNUS_* variables
    - SessionProvider / TorchSession: Lazy neural session loading
    - RemoteMoveClient / RateLimiter: Throttled move-service fallback
"""

from magnus_engine.engine.config import EngineConfig
from magnus_engine.engine.orchestrator import MoveEngine
from magnus_engine.engine.remote import RateLimiter, RemoteMoveClient, RemoteMoveError
from magnus_engine.engine.session import SessionProvider, TorchSession, load_torch_session

__all__ = [
    'MoveEngine',
    'EngineConfig',
    'SessionProvider',
    'TorchSession',
    'load_torch_session',
    'RemoteMoveClient',
    'RemoteMoveError',
    'RateLimiter',
]
