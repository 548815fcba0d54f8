# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Monte Carlo simulation module for yield forecasting.

This module samples a stochastic yield with Box-Muller normal deviates,
reduces the samples to summary statistics and a percentile confidence
interval, and applies per-scenario adjustment terms. Daily market paths
(correlated geometric Brownian motion plus a mean-reverting sentiment score)
back the yield validation checks.
"""

from .config import ForecasterConfig
from .errors import InvalidParameterError, DataSourceDegraded
from .scenario import ScenarioParameters, StrategyClass, StrategyProfile, STRATEGY_PROFILES
from .random_source import RandomSource, NumpyRandomSource
from .market_data import MarketData, OrderBookProvider, synthetic_market_data
from .sample_generator import SimulationSample, YieldRegime, YieldSampleGenerator
from .adjustments import AdjustmentTerms, resolve_adjustments
from .predictor import Predictor, WeightedSumPredictor, scenario_features
from .results import ForecastResult, YieldDistribution
from .forecaster import MonteCarloForecaster
from .paths import (
    AssetDynamics, SentimentDynamics, PathSimulationConfig, HypeYieldModel,
    MarketPath, PathSimulationResult, MarketPathSimulator, max_drawdown
)
from .validation import YieldValidationCriteria, ValidationReport, validate_distribution, validate_market_paths

__all__ = [
    'ForecasterConfig',
    'InvalidParameterError',
    'DataSourceDegraded',
    'ScenarioParameters',
    'StrategyClass',
    'StrategyProfile',
    'STRATEGY_PROFILES',
    'RandomSource',
    'NumpyRandomSource',
    'MarketData',
    'OrderBookProvider',
    'synthetic_market_data',
    'SimulationSample',
    'YieldRegime',
    'YieldSampleGenerator',
    'AdjustmentTerms',
    'resolve_adjustments',
    'Predictor',
    'WeightedSumPredictor',
    'scenario_features',
    'ForecastResult',
    'YieldDistribution',
    'MonteCarloForecaster',
    'YieldValidationCriteria',
    'ValidationReport',
    'validate_distribution',
    'validate_market_paths',
    'AssetDynamics',
    'SentimentDynamics',
    'PathSimulationConfig',
    'HypeYieldModel',
    'MarketPath',
    'PathSimulationResult',
    'MarketPathSimulator',
    'max_drawdown',
]
