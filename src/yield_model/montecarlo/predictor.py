# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Score predictors used to resolve the AI boost term.

A predictor turns a small feature mapping into a score. The forecaster asks
an injected predictor for the AI boost only when the scenario does not carry
one explicitly.
"""

from typing import Dict, Mapping, Optional, Protocol, runtime_checkable

from .market_data import MarketData
from .scenario import ScenarioParameters


@runtime_checkable
class Predictor(Protocol):
    """Protocol for anything that scores a scenario."""

    def predict(self, features: Mapping[str, float]) -> float:
        """Return a score for the given features."""
        ...


class WeightedSumPredictor:
    """Deterministic linear scorer: bias + sum(weight * feature).

    Features missing from the mapping count as zero; features without a
    weight are ignored.

    Example:
        >>> predictor = WeightedSumPredictor({"sentiment": 0.5}, bias=0.25)
        >>> predictor.predict({"sentiment": 0.5})
        0.5
    """

    DEFAULT_WEIGHTS: Dict[str, float] = {
        "sentiment": 0.10,
        "volatility": -0.20,
        "hedge_ratio": 0.05,
        "eco_multiplier": 0.05,
    }

    def __init__(self, weights: Optional[Mapping[str, float]] = None, bias: float = 0.0):
        self.weights = dict(self.DEFAULT_WEIGHTS if weights is None else weights)
        self.bias = bias

    def predict(self, features: Mapping[str, float]) -> float:
        score = self.bias
        for name, weight in self.weights.items():
            score += weight * float(features.get(name, 0.0))
        return score

    def __repr__(self) -> str:
        return f"WeightedSumPredictor(weights={self.weights}, bias={self.bias})"


def scenario_features(params: ScenarioParameters, market_data: MarketData) -> Dict[str, float]:
    """Feature mapping handed to predictors."""
    volatility = market_data.base_volatility
    if volatility is None:
        volatility = params.volatility
    return {
        "volatility": float(volatility),
        "hedge_ratio": float(params.hedge_ratio) if params.hedged else 0.0,
        "sentiment": float(params.sentiment_boost) if params.sentiment_boost is not None else 0.5,
        "eco_multiplier": (
            float(params.eco_boost_multiplier) if params.eco_boost_multiplier is not None else 1.0
        ),
        "eco_focus": 1.0 if params.eco_focus else 0.0,
        "base_spread": float(market_data.base_spread or 0.0),
    }
