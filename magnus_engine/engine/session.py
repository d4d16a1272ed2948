"""
Inference Sessions

The neural tier talks to an opaque session: ``run({"input": tensor})``
returning ``{"output": scores}``. This module provides the torch-backed
session used in production and the provider that loads it lazily.

Lifecycle:
    - The session is loaded on the first request that needs it
    - Concurrent requests during the load all await the same load
    - A successful load is kept for the lifetime of the provider
    - A failed load returns None; the next request tries again
"""

import asyncio
import inspect
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Protocol

import numpy as np
import torch
import torch.nn as nn

from magnus_engine.evaluation.network import ValueNet
from magnus_engine.evaluation.neural import INPUT_NAME, OUTPUT_NAME

logger = logging.getLogger(__name__)


class InferenceSession(Protocol):
    def run(self, feeds: Dict[str, np.ndarray]) -> Any:
        ...


class TorchSession:
    """Runs a torch module behind the session interface.

    run() is a coroutine that performs the forward pass in a worker thread;
    infer() is the same pass, synchronous.
    """

    def __init__(self, model: nn.Module, device: str = "cpu"):
        self.model = model.to(device)
        self.model.eval()  # Set to evaluation mode
        self.device = device

    def infer(self, feeds: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        tensor = torch.from_numpy(np.ascontiguousarray(feeds[INPUT_NAME])).to(self.device)

        with torch.no_grad():
            output = self.model(tensor)

        return {OUTPUT_NAME: output.detach().cpu().numpy().reshape(-1)}

    async def run(self, feeds: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        return await asyncio.to_thread(self.infer, feeds)


def load_torch_session(path, device: str = "cpu") -> TorchSession:
    """Load a value network checkpoint.

    Accepted formats:
        - TorchScript archive (torch.jit.save)
        - ``{"model_state_dict": ..., "config": {...}}`` dictionary
        - bare ValueNet state dict

    Raises:
        FileNotFoundError: If the checkpoint does not exist
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model checkpoint not found: {path}")

    try:
        scripted = torch.jit.load(str(path), map_location=device)
    except Exception as e:
        logger.debug(f"{path} is not a TorchScript archive: {e}")
    else:
        logger.info(f"Loaded TorchScript model from {path}")
        return TorchSession(scripted, device)

    checkpoint = torch.load(path, map_location=device)
    if "model_state_dict" in checkpoint:
        model = ValueNet(**checkpoint.get("config", {}))
        model.load_state_dict(checkpoint["model_state_dict"])
    else:
        model = ValueNet()
        model.load_state_dict(checkpoint)

    logger.info(f"Loaded value network from {path} ({model.count_parameters():,} parameters)")
    return TorchSession(model, device)


class SessionProvider:
    """Lazy, memoized access to an inference session.

    Args:
        loader: Callable returning a session, or a coroutine function.
            Synchronous loaders run in a worker thread.
    """

    def __init__(self, loader: Callable[[], Any]):
        self._loader = loader
        self._session: Optional[InferenceSession] = None
        self._loading: Optional[asyncio.Future] = None
        self.load_attempts = 0
        self.last_error: Optional[BaseException] = None

    @property
    def ready(self) -> bool:
        return self._session is not None

    async def get(self) -> Optional[InferenceSession]:
        """Return the session, loading it on first use.

        Returns:
            The session, or None if loading failed
        """
        if self._session is not None:
            return self._session

        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())

        return await asyncio.shield(self._loading)

    async def _load(self) -> Optional[InferenceSession]:
        self.load_attempts += 1
        logger.info("Initializing neural network session...")
        try:
            if inspect.iscoroutinefunction(self._loader):
                session = await self._loader()
            else:
                session = await asyncio.to_thread(self._loader)
        except Exception as e:
            self.last_error = e
            logger.warning(f"Error initializing neural network session: {e}")
            return None
        finally:
            self._loading = None

        if session is None:
            logger.warning("Session loader returned no session")
            return None

        self._session = session
        self.last_error = None
        logger.info("Neural network session initialized successfully")
        return session
