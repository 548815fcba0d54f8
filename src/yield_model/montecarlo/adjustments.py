# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Scenario adjustment terms.

After the raw sample statistics are computed, four bias terms are resolved
from the scenario and added to the mean; the maximum is scaled by their sum
read as a percentage. Minimum, standard deviation and the percentile bounds
are left untouched.
"""

from dataclasses import dataclass
from typing import Optional

from .random_source import RandomSource, uniform_between
from .scenario import ScenarioParameters, StrategyClass


@dataclass(frozen=True)
class AdjustmentTerms:
    """Resolved bias terms for one forecast.

    Attributes:
        strategy_adjustment: Per strategy class bonus or penalty
        eco_boost: Eco focus bonus
        sentiment_boost: Sentiment term, (score - 0.5) * 20
        ai_boost: Model score term, score * 20
    """
    strategy_adjustment: float = 0.0
    eco_boost: float = 0.0
    sentiment_boost: float = 0.0
    ai_boost: float = 0.0

    @property
    def total(self) -> float:
        """Sum of all terms."""
        return self.strategy_adjustment + self.eco_boost + self.sentiment_boost + self.ai_boost

    def apply_to_mean(self, mean_yield: float) -> float:
        return mean_yield + self.total

    def apply_to_max(self, max_yield: float) -> float:
        # total is read as a percentage of the max
        return max_yield * (1.0 + self.total / 100.0)


def strategy_adjustment(params: ScenarioParameters, random_source: RandomSource) -> float:
    """Per class policy. Only the eco-weighted class draws nothing."""
    strategy = params.strategy_class
    if strategy is StrategyClass.AGGRESSIVE:
        return uniform_between(random_source, 5.0, 15.0)
    if strategy is StrategyClass.DEFENSIVE:
        return uniform_between(random_source, -10.0, -5.0)
    if strategy is StrategyClass.ECO_WEIGHTED:
        if params.eco_boost_multiplier is not None:
            return (params.eco_boost_multiplier - 1.0) * 10.0
        return 3.0
    return uniform_between(random_source, 0.0, 5.0)


def eco_boost(params: ScenarioParameters) -> float:
    if not params.eco_focus:
        return 0.0
    if params.eco_boost_multiplier is not None:
        return (params.eco_boost_multiplier - 1.0) * 15.0
    return 7.5


def sentiment_boost(params: ScenarioParameters) -> float:
    if params.sentiment_boost is None:
        return 0.0
    return (params.sentiment_boost - 0.5) * 20.0


def ai_boost(score: Optional[float]) -> float:
    if score is None:
        return 0.0
    return score * 20.0


def resolve_adjustments(params: ScenarioParameters,
                        random_source: RandomSource,
                        ai_score: Optional[float] = None) -> AdjustmentTerms:
    """Resolve all four terms for a scenario.

    Args:
        params: Scenario parameters
        random_source: Source for the strategy adjustment draw
        ai_score: AI score to use. Defaults to params.ai_boost when None.

    Returns:
        AdjustmentTerms for the forecast
    """
    if ai_score is None:
        ai_score = params.ai_boost
    return AdjustmentTerms(
        strategy_adjustment=strategy_adjustment(params, random_source),
        eco_boost=eco_boost(params),
        sentiment_boost=sentiment_boost(params),
        ai_boost=ai_boost(ai_score),
    )
