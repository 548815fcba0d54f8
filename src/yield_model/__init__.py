# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Yield Forecast Engine

A Monte Carlo yield distribution simulator: draws stochastic yield samples
for a scenario, summarizes them and applies scenario bias terms.

Example usage:
    from yield_model import MonteCarloForecaster, ScenarioParameters, ForecasterConfig

    forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=42))
    result = forecaster.forecast(ScenarioParameters(strategy_class='balanced', volatility=0.13))
    print(result.mean_yield, result.confidence_lower, result.confidence_upper)
"""

from .montecarlo import (
    ForecasterConfig,
    ForecastResult,
    InvalidParameterError,
    DataSourceDegraded,
    MarketData,
    MonteCarloForecaster,
    OrderBookProvider,
    ScenarioParameters,
    StrategyClass,
    MarketPathSimulator,
    PathSimulationConfig,
    YieldDistribution,
    validate_distribution,
    validate_market_paths,
)

__version__ = "0.1.0"

__all__ = [
    'ForecasterConfig',
    'ForecastResult',
    'InvalidParameterError',
    'DataSourceDegraded',
    'MarketData',
    'MonteCarloForecaster',
    'OrderBookProvider',
    'ScenarioParameters',
    'StrategyClass',
    'MarketPathSimulator',
    'PathSimulationConfig',
    'YieldDistribution',
    'validate_distribution',
    'validate_market_paths',
]
