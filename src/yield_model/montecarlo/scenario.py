# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Scenario parameters and strategy profiles for yield forecasts.

A scenario describes one forecast request: the market volatility driving the
sampled movements, the strategy class selecting base-yield and dispersion
ranges, the hedge settings and the optional bias terms applied after the
statistics are computed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple, Union

from .errors import InvalidParameterError


class StrategyClass(str, Enum):
    """Discrete scenario tag selecting yield ranges and bias constants."""

    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    DEFENSIVE = "defensive"
    ECO_WEIGHTED = "eco-weighted"

    @classmethod
    def parse(cls, value: Union["StrategyClass", str, None]) -> "StrategyClass":
        """Parse a strategy name, accepting the common spellings.

        Raises:
            InvalidParameterError: If the name is not a known strategy class
        """
        if value is None:
            return cls.BALANCED
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().replace("_", "-")
        if key == "ecoweighted":
            key = cls.ECO_WEIGHTED.value
        for member in cls:
            if member.value == key:
                return member
        raise InvalidParameterError(f"Unknown strategy class: {value!r}")


@dataclass(frozen=True)
class StrategyProfile:
    """Half-open sampling ranges for one strategy class.

    Attributes:
        base_yield: (low, high) range for the per-forecast base yield, in percent
        yield_volatility: (low, high) range for the per-forecast relative noise scale
    """
    base_yield: Tuple[float, float]
    yield_volatility: Tuple[float, float]


STRATEGY_PROFILES: Dict[StrategyClass, StrategyProfile] = {
    StrategyClass.AGGRESSIVE: StrategyProfile((35.0, 50.0), (0.4, 0.7)),
    StrategyClass.DEFENSIVE: StrategyProfile((15.0, 25.0), (0.1, 0.25)),
    StrategyClass.ECO_WEIGHTED: StrategyProfile((25.0, 40.0), (0.2, 0.4)),
    StrategyClass.BALANCED: StrategyProfile((20.0, 35.0), (0.2, 0.4)),
}


@dataclass
class ScenarioParameters:
    """Input record for a single forecast.

    Attributes:
        volatility: Dispersion driver for sampled market movements (>= 0). Default 0.13.
        strategy_class: Strategy class; strings are parsed. Default balanced.
        hedge_ratio: Fraction of sampled impact offset by the hedge asset, in [0, 1]. Default 0.4.
        hedge_asset: Hedge asset identifier (e.g. "RLUSD"). No hedge is applied when None.
        sentiment_boost: Sentiment score; contributes (score - 0.5) * 20 when set.
        eco_boost_multiplier: Eco weighting multiplier used by the eco terms.
        eco_focus: Whether the eco boost applies.
        ai_boost: Model score; contributes score * 20 when set.
        iteration_count: Sample count. None uses the forecaster default.
        confidence_level: Percentile interval level in (0, 1). None uses the forecaster default.
        use_real_data: Per-forecast override of ForecasterConfig.use_real_data. None keeps the config value.
    """
    volatility: float = 0.13
    strategy_class: StrategyClass = StrategyClass.BALANCED
    hedge_ratio: float = 0.4
    hedge_asset: Optional[str] = None
    sentiment_boost: Optional[float] = None
    eco_boost_multiplier: Optional[float] = None
    eco_focus: bool = False
    ai_boost: Optional[float] = None
    iteration_count: Optional[int] = None
    confidence_level: Optional[float] = None
    use_real_data: Optional[bool] = None

    def __post_init__(self):
        self.validate()

    def validate(self):
        """Check field ranges, parsing the strategy class if it was set as a string.

        Called on construction and again before each forecast.

        Raises:
            InvalidParameterError: If a field is out of range
        """
        self.strategy_class = StrategyClass.parse(self.strategy_class)
        if self.volatility < 0:
            raise InvalidParameterError(f"Volatility cannot be negative: {self.volatility}")
        if not 0.0 <= self.hedge_ratio <= 1.0:
            raise InvalidParameterError(f"hedge_ratio must be in [0, 1], got {self.hedge_ratio}")
        if self.iteration_count is not None and self.iteration_count <= 0:
            raise InvalidParameterError(
                f"iteration_count must be positive, got {self.iteration_count}"
            )
        if self.confidence_level is not None and not 0.0 < self.confidence_level < 1.0:
            raise InvalidParameterError(
                f"confidence_level must be in (0, 1), got {self.confidence_level}"
            )

    @property
    def profile(self) -> StrategyProfile:
        """Sampling ranges for this scenario's strategy class."""
        return STRATEGY_PROFILES[self.strategy_class]

    @property
    def hedged(self) -> bool:
        """True when a hedge asset is named and the hedge ratio is positive."""
        return bool(self.hedge_asset) and self.hedge_ratio > 0
