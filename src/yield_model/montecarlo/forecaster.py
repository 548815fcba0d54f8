# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo yield forecast orchestrator.

This module provides the MonteCarloForecaster class which runs the sampling,
reduces the samples to statistics and applies the scenario adjustment terms.
"""

import logging
import math
import time
from typing import Callable, Optional, Tuple

import numpy as np

from .adjustments import resolve_adjustments
from .config import ForecasterConfig
from .errors import InvalidParameterError
from .market_data import MarketData, MarketDataProvider, coerce_market_data, synthetic_market_data
from .predictor import Predictor, scenario_features
from .random_source import NumpyRandomSource, RandomSource
from .results import ForecastResult, YieldDistribution
from .sample_generator import YieldSampleGenerator
from .scenario import ScenarioParameters


logger = logging.getLogger(__name__)


def confidence_indices(num_samples: int, confidence_level: float) -> Tuple[int, int]:
    """Indices into the sorted samples bounding the confidence interval.

    Both indices are clamped to [0, num_samples - 1].
    """
    tail = (1.0 - confidence_level) / 2.0
    lower = int(math.floor(num_samples * tail))
    upper = int(math.floor(num_samples * (1.0 - tail))) - 1
    last = num_samples - 1
    return min(max(lower, 0), last), min(max(upper, 0), last)


class MonteCarloForecaster:
    """Runs Monte Carlo yield forecasts for scenarios.

    The forecaster holds only fixed configuration, so one instance can serve
    concurrent forecasts. Each call:
    1. Resolves market data from the provider, or synthetic data
    2. Draws the yield regime and the samples
    3. Computes raw statistics and the percentile confidence interval
    4. Adds the scenario adjustment terms to the mean and max

    Example:
        >>> forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=42))
        >>> result = forecaster.forecast(ScenarioParameters(strategy_class="aggressive"))
        >>> print(f"Mean yield: {result.mean_yield:.2f}%")
    """

    def __init__(self,
                 config: Optional[ForecasterConfig] = None,
                 market_data_provider: Optional[MarketDataProvider] = None,
                 predictor: Optional[Predictor] = None,
                 sample_generator_factory: Callable[[RandomSource], YieldSampleGenerator] = YieldSampleGenerator):
        """Initialize the forecaster.

        Args:
            config: Forecaster configuration. If None, uses defaults.
            market_data_provider: Default provider used when forecast() gets none.
            predictor: Resolves the AI boost for scenarios that do not set one.
            sample_generator_factory: Builds the sample generator for a random source.
        """
        self.config = config or ForecasterConfig()
        self.market_data_provider = market_data_provider
        self.predictor = predictor
        self.sample_generator_factory = sample_generator_factory

    def _random_source(self) -> RandomSource:
        return NumpyRandomSource(self.config.random_seed)

    def _resolve_market_data(self,
                             params: ScenarioParameters,
                             provider: Optional[MarketDataProvider]) -> Tuple[MarketData, bool]:
        """Get market data, falling back to synthetic data on any provider failure.

        Returns:
            Tuple of (market data, degraded flag)
        """
        use_real_data = params.use_real_data if params.use_real_data is not None else self.config.use_real_data
        if provider is None or not use_real_data:
            return synthetic_market_data(params.volatility), False

        try:
            return coerce_market_data(provider()), False
        except Exception as exc:
            logger.warning("Market data source degraded, using synthetic data: %s", exc)
            return synthetic_market_data(params.volatility), True

    def forecast(self,
                 params: Optional[ScenarioParameters] = None,
                 market_data_provider: Optional[MarketDataProvider] = None,
                 random_source: Optional[RandomSource] = None) -> ForecastResult:
        """Run a forecast.

        Args:
            params: Scenario parameters. If None, uses defaults.
            market_data_provider: Provider for this call; overrides the instance default.
            random_source: Random source for this call. If None, a numpy source
                           seeded from the configuration is created.

        Returns:
            ForecastResult with adjusted mean/max and raw statistics

        Raises:
            InvalidParameterError: If a scenario field, iterations or confidence level is invalid
        """
        params = params or ScenarioParameters()
        params.validate()
        iterations = params.iteration_count if params.iteration_count is not None else self.config.iterations
        confidence_level = (params.confidence_level if params.confidence_level is not None
                            else self.config.confidence_level)
        if iterations <= 0:
            raise InvalidParameterError(f"iteration_count must be positive, got {iterations}")
        if not 0.0 < confidence_level < 1.0:
            raise InvalidParameterError(f"confidence_level must be in (0, 1), got {confidence_level}")

        provider = market_data_provider or self.market_data_provider
        source = random_source or self._random_source()

        logger.info("Running Monte Carlo forecast: %d iterations, strategy=%s",
                    iterations, params.strategy_class.value)

        market_data, degraded = self._resolve_market_data(params, provider)

        generator = self.sample_generator_factory(source)
        regime = generator.draw_regime(params.strategy_class)
        yields = np.empty(iterations, dtype=float)
        for i in range(iterations):
            yields[i] = generator.generate(market_data, params, regime).yield_value

        distribution = YieldDistribution(yields)
        sorted_yields = distribution.sorted_yields

        mean_yield = float(np.mean(yields))
        std_dev = float(np.std(yields))
        min_yield = float(sorted_yields[0])
        max_yield = float(sorted_yields[-1])

        lower_idx, upper_idx = confidence_indices(iterations, confidence_level)
        volatility_ratio = std_dev / mean_yield if mean_yield != 0 else 0.0
        success_probability = float(np.count_nonzero(yields > 0)) / iterations

        ai_score = params.ai_boost
        if ai_score is None and self.predictor is not None:
            ai_score = self.predictor.predict(scenario_features(params, market_data))
        terms = resolve_adjustments(params, source, ai_score=ai_score)

        result = ForecastResult(
            mean_yield=terms.apply_to_mean(mean_yield),
            max_yield=terms.apply_to_max(max_yield),
            min_yield=min_yield,
            yield_std_dev=std_dev,
            confidence_lower=float(sorted_yields[lower_idx]),
            confidence_upper=float(sorted_yields[upper_idx]),
            volatility_ratio=volatility_ratio,
            success_probability=success_probability,
            strategy_adjustment=terms.strategy_adjustment,
            eco_boost=terms.eco_boost,
            sentiment_boost=terms.sentiment_boost,
            ai_boost=terms.ai_boost,
            raw_mean_yield=mean_yield,
            raw_max_yield=max_yield,
            iterations=iterations,
            strategy_class=params.strategy_class.value,
            confidence_level=confidence_level,
            eco_focus=params.eco_focus,
            base_yield=regime.base_yield,
            yield_volatility=regime.yield_volatility,
            used_synthetic_data=market_data.synthetic,
            data_source_degraded=degraded,
            market_data_source=market_data.source,
            timestamp=time.time(),
            distribution=distribution,
        )

        logger.info("Forecast complete: mean yield %.2f%% (raw %.2f%%), CI [%.2f, %.2f]",
                    result.mean_yield, mean_yield, result.confidence_lower, result.confidence_upper)
        return result
