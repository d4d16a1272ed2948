"""
Engine configuration.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from magnus_engine.evaluation.neural import DEFAULT_SCORE_MULTIPLIER
from magnus_engine.selection.policy import (
    HIGH_LEVEL_THRESHOLD,
    MAX_LEVEL,
    TOP_CHOICE_PROBABILITY,
    WEIGHT_DECAY,
)

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class EngineConfig:
    """Configuration for move selection.

    Every tunable of the fallback chain and the selection policy lives
    here so two engines with different settings can coexist in one process.
    """

    # Evaluation tiers
    neural_min_level: int = 6
    """Lowest level that tries the neural tier before the heuristic one"""

    score_multiplier: float = DEFAULT_SCORE_MULTIPLIER
    """Scale applied to the raw network output"""

    score_jitter: float = 0.0
    """Heuristic-tier noise at level 0, shrinking linearly to 0 at level 10"""

    # Selection policy
    high_level_threshold: int = HIGH_LEVEL_THRESHOLD
    """First level that uses the top-choice policy"""

    top_choice_probability: float = TOP_CHOICE_PROBABILITY
    """Chance of playing the best move at high levels"""

    weight_decay: float = WEIGHT_DECAY
    """Geometric weight base for the low-level pool"""

    # Model
    model_path: Optional[Path] = None
    """Checkpoint for the value network (None disables the neural tier)"""

    device: str = "cpu"
    """Device for inference: "cpu" or "cuda" """

    # Server fallback
    server_url: Optional[str] = None
    """Move-service endpoint (None disables the server tier)"""

    prefer_client_side: bool = True
    """Try local evaluation before the server"""

    min_request_interval: float = 0.5
    """Seconds between two server calls"""

    request_timeout: Optional[float] = None
    """Total seconds allowed for one server call (None = no timeout)"""

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.model_path is not None:
            self.model_path = Path(self.model_path)

        if not 0 <= self.neural_min_level <= MAX_LEVEL + 1:
            raise ValueError(
                f"neural_min_level must be between 0 and {MAX_LEVEL + 1}, got {self.neural_min_level}"
            )

        if not 0 <= self.high_level_threshold <= MAX_LEVEL + 1:
            raise ValueError(
                f"high_level_threshold must be between 0 and {MAX_LEVEL + 1}, "
                f"got {self.high_level_threshold}"
            )

        if not 0.0 <= self.top_choice_probability <= 1.0:
            raise ValueError(
                f"top_choice_probability must be in [0, 1], got {self.top_choice_probability}"
            )

        if not 0.0 < self.weight_decay <= 1.0:
            raise ValueError(f"weight_decay must be in (0, 1], got {self.weight_decay}")

        if self.score_multiplier <= 0:
            raise ValueError(f"score_multiplier must be positive, got {self.score_multiplier}")

        if self.score_jitter < 0:
            raise ValueError(f"score_jitter must not be negative, got {self.score_jitter}")

        if self.min_request_interval < 0:
            raise ValueError(
                f"min_request_interval must not be negative, got {self.min_request_interval}"
            )

        if self.request_timeout is not None and self.request_timeout <= 0:
            raise ValueError(f"request_timeout must be positive, got {self.request_timeout}")

    @classmethod
    def from_env(cls, environ=None, **overrides) -> "EngineConfig":
        """Build a config from MAGNUS_* environment variables.

        Recognised variables: MAGNUS_MODEL_PATH, MAGNUS_SERVER_URL,
        MAGNUS_PREFER_CLIENT, MAGNUS_DEVICE. Keyword arguments win over
        the environment.
        """
        environ = os.environ if environ is None else environ
        values = {}

        if environ.get("MAGNUS_MODEL_PATH"):
            values["model_path"] = Path(environ["MAGNUS_MODEL_PATH"])
        if environ.get("MAGNUS_SERVER_URL"):
            values["server_url"] = environ["MAGNUS_SERVER_URL"]
        if environ.get("MAGNUS_DEVICE"):
            values["device"] = environ["MAGNUS_DEVICE"]

        prefer = environ.get("MAGNUS_PREFER_CLIENT")
        if prefer:
            if prefer.lower() in _TRUE_VALUES:
                values["prefer_client_side"] = True
            elif prefer.lower() in _FALSE_VALUES:
                values["prefer_client_side"] = False
            else:
                raise ValueError(f"MAGNUS_PREFER_CLIENT must be a boolean, got {prefer!r}")

        values.update(overrides)
        return cls(**values)

    def __repr__(self) -> str:
        return (
            f"EngineConfig(\n"
            f"  Levels: neural>={self.neural_min_level}, top-choice>={self.high_level_threshold}\n"
            f"  Model: {self.model_path or 'none'} on {self.device}\n"
            f"  Server: {self.server_url or 'none'} (prefer client: {self.prefer_client_side})\n"
            f")"
        )
