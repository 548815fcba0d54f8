# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Integration tests for Monte Carlo yield forecasts.

These tests verify:
1. Raw statistics honor the percentile interval and probability bounds
2. Forecasts replay exactly under a fixed random sequence
3. Adjustment terms only move the mean and max
4. Market data failures degrade to synthetic data without raising
"""

import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import numpy as np

from ..montecarlo.config import ForecasterConfig
from ..montecarlo.errors import DataSourceDegraded, InvalidParameterError
from ..montecarlo.forecaster import MonteCarloForecaster, confidence_indices
from ..montecarlo.market_data import MarketData
from ..montecarlo.predictor import WeightedSumPredictor
from ..montecarlo.random_source import NumpyRandomSource
from ..montecarlo.results import ForecastResult
from ..montecarlo.sample_generator import SimulationSample, YieldRegime, YieldSampleGenerator
from ..montecarlo.scenario import ScenarioParameters, StrategyClass
from ..montecarlo.validation import YieldValidationCriteria, validate_distribution
from .test_montecarlo import SequenceRandomSource


class RecordingGenerator(YieldSampleGenerator):
    """Sample generator that keeps every sample it produces."""

    def __init__(self, random_source):
        super().__init__(random_source)
        self.regimes = []
        self.samples = []

    def draw_regime(self, strategy_class):
        regime = super().draw_regime(strategy_class)
        self.regimes.append(regime)
        return regime

    def generate(self, market_data, params, regime):
        sample = super().generate(market_data, params, regime)
        self.samples.append(sample)
        return sample


class AlternatingGenerator:
    """Generator stand-in producing +1, -1, +1, ... yields."""

    def __init__(self, random_source):
        self.random_source = random_source
        self.count = 0

    def draw_regime(self, strategy_class):
        return YieldRegime(base_yield=10.0, yield_volatility=0.1)

    def generate(self, market_data, params, regime):
        value = 1.0 if self.count % 2 == 0 else -1.0
        self.count += 1
        return SimulationSample(yield_value=value, market_movement=0.0, impact=0.0, noise_term=0.0)


class TestConfidenceIndices(unittest.TestCase):
    """Tests for percentile index computation."""

    def test_standard_case(self):
        self.assertEqual(confidence_indices(1000, 0.95), (25, 974))

    def test_single_sample_clamps(self):
        self.assertEqual(confidence_indices(1, 0.95), (0, 0))

    def test_high_confidence_small_n(self):
        self.assertEqual(confidence_indices(10, 0.999), (0, 8))
        self.assertEqual(confidence_indices(2, 0.5), (0, 0))


class TestForecastStatistics(unittest.TestCase):
    """Statistical properties of forecasts."""

    def test_confidence_interval_brackets_raw_mean(self):
        """Test lower <= raw mean <= upper across strategies and seeds."""
        for strategy in StrategyClass:
            for seed in (1, 2, 3):
                forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=seed))
                result = forecaster.forecast(ScenarioParameters(strategy_class=strategy))
                self.assertLessEqual(result.confidence_lower, result.raw_mean_yield)
                self.assertLessEqual(result.raw_mean_yield, result.confidence_upper)
                self.assertLessEqual(result.min_yield, result.confidence_lower)
                self.assertLessEqual(result.confidence_upper, result.raw_max_yield)

    def test_success_probability_bounds(self):
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=9))
        for volatility in (0.0, 0.13, 1.0, 5.0):
            result = forecaster.forecast(ScenarioParameters(volatility=volatility, iteration_count=300))
            self.assertGreaterEqual(result.success_probability, 0.0)
            self.assertLessEqual(result.success_probability, 1.0)

    def test_statistics_match_distribution(self):
        """Test raw statistics use the population standard deviation."""
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=21))
        result = forecaster.forecast(ScenarioParameters(iteration_count=500))
        yields = result.distribution.yields

        self.assertEqual(len(yields), 500)
        self.assertAlmostEqual(result.raw_mean_yield, float(np.mean(yields)))
        self.assertAlmostEqual(result.yield_std_dev, float(np.std(yields, ddof=0)))
        self.assertEqual(result.min_yield, float(np.min(yields)))
        self.assertEqual(result.raw_max_yield, float(np.max(yields)))
        self.assertAlmostEqual(result.volatility_ratio, result.yield_std_dev / result.raw_mean_yield)

    def test_sample_count_matches_iterations(self):
        """Test exactly iteration_count samples are generated."""
        spies = []

        def factory(source):
            spy = Mock(wraps=YieldSampleGenerator(source))
            spies.append(spy)
            return spy

        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=4), sample_generator_factory=factory)
        result = forecaster.forecast(ScenarioParameters(iteration_count=137))

        self.assertEqual(len(spies), 1)
        self.assertEqual(spies[0].generate.call_count, 137)
        self.assertEqual(spies[0].draw_regime.call_count, 1)
        self.assertEqual(result.iterations, 137)

    def test_zero_mean_volatility_ratio(self):
        forecaster = MonteCarloForecaster(sample_generator_factory=AlternatingGenerator)
        result = forecaster.forecast(ScenarioParameters(iteration_count=10))
        self.assertEqual(result.raw_mean_yield, 0.0)
        self.assertEqual(result.volatility_ratio, 0.0)
        self.assertEqual(result.success_probability, 0.5)

    def test_zero_volatility(self):
        """Test zero volatility removes market movement, leaving bounded noise."""
        generators = []

        def factory(source):
            gen = RecordingGenerator(source)
            generators.append(gen)
            return gen

        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=13), sample_generator_factory=factory)
        result = forecaster.forecast(ScenarioParameters(volatility=0.0, iteration_count=400))

        gen = generators[0]
        regime = gen.regimes[0]
        bound = regime.base_yield * regime.yield_volatility
        self.assertEqual(len(gen.samples), 400)
        for sample in gen.samples:
            self.assertEqual(sample.market_movement, 0.0)
            self.assertEqual(sample.impact, 0.0)
            self.assertLessEqual(abs(sample.noise_term), bound)
            self.assertAlmostEqual(sample.yield_value, regime.base_yield + sample.noise_term)
        self.assertLessEqual(abs(result.raw_mean_yield - regime.base_yield), bound)
        self.assertEqual(result.base_yield, regime.base_yield)

    def test_single_iteration(self):
        """Test one sample collapses the interval onto the sample."""
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=8))
        params = ScenarioParameters(strategy_class="eco-weighted", eco_boost_multiplier=1.0,
                                    iteration_count=1)

        result = forecaster.forecast(params)

        self.assertEqual(result.confidence_lower, result.confidence_upper)
        self.assertEqual(result.confidence_lower, result.min_yield)
        self.assertEqual(result.min_yield, result.max_yield)
        self.assertEqual(result.yield_std_dev, 0.0)


class TestForecastDeterminism(unittest.TestCase):
    """Tests for replaying forecasts."""

    def test_fixed_sequence_replays_exactly(self):
        values = [0.37, 0.81, 0.12, 0.64, 0.5, 0.93, 0.08]
        forecaster = MonteCarloForecaster()
        params = ScenarioParameters(strategy_class="aggressive", hedge_asset="RLUSD",
                                    sentiment_boost=0.7, iteration_count=250)

        first = forecaster.forecast(params, random_source=SequenceRandomSource(values))
        second = forecaster.forecast(params, random_source=SequenceRandomSource(values))

        self.assertEqual(first, second)
        self.assertEqual(first.distribution.yields.tolist(), second.distribution.yields.tolist())

    def test_config_seed_replays_exactly(self):
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=42))
        params = ScenarioParameters(iteration_count=300)
        self.assertEqual(forecaster.forecast(params), forecaster.forecast(params))

    def test_different_seeds_differ(self):
        params = ScenarioParameters(iteration_count=300)
        first = MonteCarloForecaster().forecast(params, random_source=NumpyRandomSource(1))
        second = MonteCarloForecaster().forecast(params, random_source=NumpyRandomSource(2))
        self.assertNotEqual(first.raw_mean_yield, second.raw_mean_yield)

    def test_concurrent_forecasts_are_independent(self):
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=17))
        params = ScenarioParameters(strategy_class="defensive", iteration_count=200)
        with ThreadPoolExecutor(max_workers=4) as pool:
            results = list(pool.map(lambda _: forecaster.forecast(params), range(8)))
        for result in results[1:]:
            self.assertEqual(result, results[0])


class TestForecastAdjustments(unittest.TestCase):
    """Tests for how adjustment terms are applied."""

    def test_adjustments_only_touch_mean_and_max(self):
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=5))
        params = ScenarioParameters(strategy_class="aggressive", eco_focus=True,
                                    eco_boost_multiplier=1.35, sentiment_boost=0.9, ai_boost=0.1)

        result = forecaster.forecast(params)
        stats = result.distribution.statistics()
        total = result.total_adjustment

        self.assertAlmostEqual(result.eco_boost, 5.25)
        self.assertAlmostEqual(result.sentiment_boost, 8.0)
        self.assertAlmostEqual(result.ai_boost, 2.0)
        self.assertGreaterEqual(result.strategy_adjustment, 5.0)
        self.assertLess(result.strategy_adjustment, 15.0)
        self.assertAlmostEqual(result.mean_yield, result.raw_mean_yield + total)
        self.assertAlmostEqual(result.max_yield, result.raw_max_yield * (1 + total / 100))
        self.assertEqual(result.min_yield, stats["min"])
        self.assertAlmostEqual(result.yield_std_dev, stats["std"])

    def test_defensive_adjustment_range(self):
        forecaster = MonteCarloForecaster()
        for seed in range(20):
            result = forecaster.forecast(ScenarioParameters(strategy_class="defensive", iteration_count=20),
                                         random_source=NumpyRandomSource(seed))
            self.assertGreaterEqual(result.strategy_adjustment, -10.0)
            self.assertLess(result.strategy_adjustment, -5.0)

    def test_predictor_resolves_missing_ai_boost(self):
        predictor = WeightedSumPredictor({"volatility": 1.0})
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=3), predictor=predictor)

        result = forecaster.forecast(ScenarioParameters(volatility=0.2, iteration_count=50))

        self.assertAlmostEqual(result.ai_boost, 4.0)

    def test_explicit_ai_boost_skips_predictor(self):
        predictor = Mock()
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=3), predictor=predictor)

        result = forecaster.forecast(ScenarioParameters(ai_boost=0.5, iteration_count=50))

        predictor.predict.assert_not_called()
        self.assertAlmostEqual(result.ai_boost, 10.0)


class TestForecastMarketData(unittest.TestCase):
    """Tests for market data resolution."""

    def test_balanced_end_to_end(self):
        """Test a balanced scenario with mocked market data lands in a plausible band."""
        provider = Mock(return_value={"baseVolatility": 0.13})
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=2024))
        params = ScenarioParameters(strategy_class="balanced", volatility=0.13,
                                    iteration_count=1000, confidence_level=0.95)

        result = forecaster.forecast(params, market_data_provider=provider)

        provider.assert_called_once_with()
        self.assertGreaterEqual(result.mean_yield, 15.0)
        self.assertLessEqual(result.mean_yield, 45.0)
        self.assertFalse(result.used_synthetic_data)
        self.assertFalse(result.data_source_degraded)
        self.assertEqual(result.iterations, 1000)
        self.assertEqual(result.strategy_class, "balanced")
        self.assertEqual(result.confidence_level, 0.95)

    def test_provider_failure_falls_back_to_synthetic(self):
        provider = Mock(side_effect=DataSourceDegraded("timeout"))
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=6))

        with self.assertLogs("yield_model.montecarlo.forecaster", level="WARNING") as logs:
            result = forecaster.forecast(ScenarioParameters(iteration_count=100),
                                         market_data_provider=provider)

        self.assertTrue(result.used_synthetic_data)
        self.assertTrue(result.data_source_degraded)
        self.assertEqual(result.market_data_source, "synthetic")
        self.assertIn("timeout", logs.output[0])

    def test_unexpected_provider_error_is_not_propagated(self):
        provider = Mock(side_effect=TimeoutError("slow node"))
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=6), market_data_provider=provider)

        with self.assertLogs("yield_model.montecarlo.forecaster", level="WARNING"):
            result = forecaster.forecast(ScenarioParameters(iteration_count=100))

        provider.assert_called_once_with()
        self.assertTrue(result.data_source_degraded)

    def test_provider_market_data_object(self):
        provider = Mock(return_value=MarketData(base_volatility=0.0, source="xrpl"))
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=6))

        result = forecaster.forecast(ScenarioParameters(volatility=0.5, iteration_count=100),
                                     market_data_provider=provider)

        self.assertEqual(result.market_data_source, "xrpl")
        self.assertFalse(result.used_synthetic_data)
        # provider volatility of zero wins over the scenario volatility
        bound = result.base_yield * result.yield_volatility
        self.assertLessEqual(result.raw_max_yield, result.base_yield + bound)

    def test_real_data_disabled_skips_provider(self):
        provider = Mock()
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=6, use_real_data=False),
                                          market_data_provider=provider)

        result = forecaster.forecast(ScenarioParameters(iteration_count=50))

        provider.assert_not_called()
        self.assertTrue(result.used_synthetic_data)
        self.assertFalse(result.data_source_degraded)

    def test_scenario_can_disable_real_data(self):
        provider = Mock()
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=6), market_data_provider=provider)

        result = forecaster.forecast(ScenarioParameters(iteration_count=50, use_real_data=False))

        provider.assert_not_called()
        self.assertTrue(result.used_synthetic_data)

    def test_scenario_can_enable_real_data(self):
        provider = Mock(return_value={"baseVolatility": 0.2, "source": "xrpl"})
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=6, use_real_data=False),
                                          market_data_provider=provider)

        result = forecaster.forecast(ScenarioParameters(iteration_count=50, use_real_data=True))

        provider.assert_called_once_with()
        self.assertFalse(result.used_synthetic_data)
        self.assertEqual(result.market_data_source, "xrpl")


class TestForecastErrors(unittest.TestCase):
    """Tests for invalid input handling."""

    def test_invalid_iterations_fail_before_sampling(self):
        factory = Mock()
        forecaster = MonteCarloForecaster(sample_generator_factory=factory)
        params = ScenarioParameters()
        params.iteration_count = -5

        with self.assertRaises(InvalidParameterError):
            forecaster.forecast(params)
        factory.assert_not_called()

    def test_invalid_confidence_fails(self):
        forecaster = MonteCarloForecaster()
        params = ScenarioParameters()
        params.confidence_level = 1.0
        with self.assertRaises(InvalidParameterError):
            forecaster.forecast(params)

    def test_reassigned_negative_volatility_fails_before_sampling(self):
        factory = Mock()
        forecaster = MonteCarloForecaster(sample_generator_factory=factory)
        params = ScenarioParameters()
        params.volatility = -0.2

        with self.assertRaises(InvalidParameterError):
            forecaster.forecast(params)
        factory.assert_not_called()

    def test_reassigned_hedge_ratio_fails(self):
        forecaster = MonteCarloForecaster()
        params = ScenarioParameters(hedge_asset="RLUSD")
        params.hedge_ratio = 1.5
        with self.assertRaises(InvalidParameterError):
            forecaster.forecast(params)

    def test_reassigned_strategy_name_is_parsed(self):
        forecaster = MonteCarloForecaster(ForecasterConfig(random_seed=2))
        params = ScenarioParameters(iteration_count=20)
        params.strategy_class = "defensive"

        result = forecaster.forecast(params)

        self.assertEqual(result.strategy_class, "defensive")


class TestForecastResultOutput(unittest.TestCase):
    """Tests for result serialization and downstream use."""

    def test_to_dict(self):
        result = MonteCarloForecaster(ForecasterConfig(random_seed=1)).forecast(
            ScenarioParameters(iteration_count=50))
        payload = result.to_dict()

        for key in ("meanYield", "maxYield", "minYield", "yieldStdDev", "confidenceLower",
                    "confidenceUpper", "volatilityRatio", "successProbability",
                    "strategyAdjustment", "ecoBoost", "sentimentBoost", "aiBoost",
                    "iterations", "strategyClass", "timestamp", "usedSyntheticData"):
            self.assertIn(key, payload)
        self.assertEqual(payload["iterations"], 50)
        self.assertIsInstance(result, ForecastResult)

    def test_validate_forecast_result(self):
        result = MonteCarloForecaster(ForecasterConfig(random_seed=12)).forecast(
            ScenarioParameters(strategy_class="defensive", iteration_count=500))
        criteria = YieldValidationCriteria(required_yield=0.0, min_success_rate=0.5, min_sharpe_ratio=0.0)

        report = validate_distribution(result, criteria)

        self.assertTrue(report.passed)
        self.assertAlmostEqual(report.metrics["success_rate"], result.success_probability)


if __name__ == '__main__':
    unittest.main()
