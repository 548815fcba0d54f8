# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Yield sample generator.

This module draws individual Monte Carlo yield samples. Each sample takes one
standard normal deviate from the Box-Muller transform, scales it by the market
volatility into a market movement, squashes the movement into a bounded
impact and combines it with the strategy's base yield and a uniform noise
term. The base yield and noise scale are drawn once per forecast as a
YieldRegime shared by all samples of that forecast.
"""

import math
from dataclasses import dataclass

from .market_data import MarketData
from .random_source import RandomSource, standard_normal, uniform_between
from .scenario import ScenarioParameters, StrategyClass, STRATEGY_PROFILES


IMPACT_YIELD_SCALE = 20.0
HEDGE_YIELD_SCALE = 15.0


@dataclass(frozen=True)
class SimulationSample:
    """One Monte Carlo draw.

    Attributes:
        yield_value: Simulated yield in percent
        market_movement: Normal deviate scaled by the base volatility
        impact: tanh(2 * market_movement), bounded to (-1, 1)
        noise_term: Uniform noise added to the yield
    """
    yield_value: float
    market_movement: float
    impact: float
    noise_term: float


@dataclass(frozen=True)
class YieldRegime:
    """Base values drawn once per forecast and shared by all its samples."""
    base_yield: float
    yield_volatility: float


class YieldSampleGenerator:
    """Draws yield samples from an explicit random source.

    Example:
        >>> gen = YieldSampleGenerator(NumpyRandomSource(seed=7))
        >>> regime = gen.draw_regime(StrategyClass.BALANCED)
        >>> sample = gen.generate(synthetic_market_data(0.13), ScenarioParameters(), regime)
    """

    def __init__(self, random_source: RandomSource):
        self.random_source = random_source

    def draw_regime(self, strategy_class: StrategyClass) -> YieldRegime:
        """Draw the base yield, then the yield volatility, for a strategy class."""
        profile = STRATEGY_PROFILES[strategy_class]
        base_yield = uniform_between(self.random_source, *profile.base_yield)
        yield_volatility = uniform_between(self.random_source, *profile.yield_volatility)
        return YieldRegime(base_yield, yield_volatility)

    def standard_normal(self) -> float:
        """Box-Muller standard normal deviate drawn from this generator's source."""
        return standard_normal(self.random_source)

    def generate(self,
                 market_data: MarketData,
                 params: ScenarioParameters,
                 regime: YieldRegime) -> SimulationSample:
        """Generate one sample.

        Args:
            market_data: Market context; its base_volatility wins over the scenario's
            params: Scenario parameters (volatility, hedge settings)
            regime: Base yield and noise scale for the current forecast

        Returns:
            The simulated sample
        """
        base_volatility = market_data.base_volatility
        if base_volatility is None:
            base_volatility = params.volatility

        movement = self.standard_normal() * base_volatility
        impact = math.tanh(2.0 * movement)

        noise = (self.random_source.uniform() * 2.0 - 1.0) * regime.base_yield * regime.yield_volatility
        simulated_yield = regime.base_yield + impact * IMPACT_YIELD_SCALE + noise

        if params.hedged:
            simulated_yield -= impact * params.hedge_ratio * HEDGE_YIELD_SCALE

        return SimulationSample(
            yield_value=simulated_yield,
            market_movement=movement,
            impact=impact,
            noise_term=noise,
        )
