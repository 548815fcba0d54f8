# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Configuration for Monte Carlo yield forecasts."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from dotenv import dotenv_values

from .errors import InvalidParameterError


DEFAULT_MARKET_DATA_URL = "https://s1.ripple.com:51234/"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class ForecasterConfig:
    """Fixed configuration for a forecaster instance.

    Attributes:
        iterations: Default number of Monte Carlo samples per forecast. Default 1000.
        confidence_level: Default confidence level for the percentile interval. Default 0.95.
        random_seed: Optional seed for reproducible results. Default None.
        use_real_data: Whether to call the market data provider at all. Default True.
        market_data_url: JSON-RPC endpoint used by the order book provider.
        market_data_timeout_seconds: HTTP timeout for the order book provider.
    """
    iterations: int = 1000
    confidence_level: float = 0.95
    random_seed: Optional[int] = None
    use_real_data: bool = True
    market_data_url: str = DEFAULT_MARKET_DATA_URL
    market_data_timeout_seconds: float = 10.0

    def __post_init__(self):
        if self.iterations < 1:
            raise InvalidParameterError("iterations must be at least 1")
        if not 0.0 < self.confidence_level < 1.0:
            raise InvalidParameterError(
                f"confidence_level must be in (0, 1), got {self.confidence_level}"
            )
        if self.market_data_timeout_seconds <= 0:
            raise InvalidParameterError("market_data_timeout_seconds must be positive")

    @classmethod
    def from_env(cls, env_path: Optional[Union[str, Path]] = None) -> "ForecasterConfig":
        """Build configuration from a .env file and the process environment.

        Process environment variables take precedence over the file.
        """
        file_env: Dict[str, str] = {}
        if env_path is not None and Path(env_path).exists():
            parsed = dotenv_values(env_path)
            file_env = {str(k): str(v or "") for k, v in parsed.items()}

        def _get(name: str, default: str) -> str:
            value = os.getenv(name)
            if value is None or not value.strip():
                value = file_env.get(name, "")
            return value.strip() or default

        seed_raw = _get("YIELD_MODEL_RANDOM_SEED", "")
        try:
            iterations = int(_get("YIELD_MODEL_ITERATIONS", "1000"))
            confidence_level = float(_get("YIELD_MODEL_CONFIDENCE_LEVEL", "0.95"))
            random_seed = int(seed_raw) if seed_raw else None
            timeout = float(_get("YIELD_MODEL_MARKET_DATA_TIMEOUT", "10"))
        except ValueError as e:
            raise InvalidParameterError(f"Invalid forecaster environment setting: {e}") from e

        return cls(
            iterations=iterations,
            confidence_level=confidence_level,
            random_seed=random_seed,
            use_real_data=_get("YIELD_MODEL_USE_REAL_DATA", "true").lower() in _TRUE_VALUES,
            market_data_url=_get("YIELD_MODEL_MARKET_DATA_URL", DEFAULT_MARKET_DATA_URL),
            market_data_timeout_seconds=timeout,
        )
