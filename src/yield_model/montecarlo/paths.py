# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Daily market path simulation for yield validation.

Each path walks one trading year day by day:
- an equity index and XRP follow geometric Brownian motion, with the XRP shock
  correlated to the index shock
- a sentiment score reverts toward its mean and is clamped to a fixed band
- a HypeYieldModel turns the day's market state into an annual yield, which is
  accrued as a daily yield

The paths feed the yield validation checks, including the maximum drawdown of
the cumulative daily yield.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from .errors import InvalidParameterError
from .random_source import NumpyRandomSource, RandomSource, standard_normal
from .results import YieldDistribution


logger = logging.getLogger(__name__)

TRADING_DAYS = 252


def gbm_step(price: float, drift: float, volatility: float, shock: float) -> float:
    """Advance a price one day: price * exp(drift + volatility * shock)."""
    return price * math.exp(drift + volatility * shock)


def correlated_shock(primary: float, independent: float, correlation: float) -> float:
    """Combine two independent normal shocks into one correlated with ``primary``."""
    return correlation * primary + math.sqrt(1.0 - correlation * correlation) * independent


def max_drawdown(daily_yields: Sequence[float]) -> float:
    """Largest relative fall of the cumulative yield from its running peak.

    The peak starts at zero, so days before the cumulative yield first turns
    positive do not count as a drawdown.

    Example:
        >>> max_drawdown([50.0, 50.0, -40.0, 30.0])
        0.4
    """
    cumulative = np.cumsum(np.asarray(daily_yields, dtype=float))
    if cumulative.size == 0:
        return 0.0
    peaks = np.maximum.accumulate(np.maximum(cumulative, 0.0))
    with np.errstate(divide='ignore', invalid='ignore'):
        drawdowns = np.where(peaks > 0, (peaks - cumulative) / peaks, 0.0)
    return float(drawdowns.max())


@dataclass
class AssetDynamics:
    """Geometric Brownian motion parameters for one asset.

    Attributes:
        initial_price: Price at the start of every path
        daily_drift: Log drift per day
        daily_volatility: Log volatility per day
    """
    initial_price: float
    daily_drift: float
    daily_volatility: float

    def __post_init__(self):
        if self.initial_price <= 0:
            raise InvalidParameterError(f"initial_price must be positive, got {self.initial_price}")
        if self.daily_volatility < 0:
            raise InvalidParameterError(
                f"daily_volatility cannot be negative: {self.daily_volatility}"
            )

    def step(self, price: float, shock: float) -> float:
        return gbm_step(price, self.daily_drift, self.daily_volatility, shock)


@dataclass
class SentimentDynamics:
    """Mean-reverting sentiment score clamped to [floor, ceiling]."""
    initial: float = 0.75
    mean: float = 0.7
    reversion: float = 0.05
    volatility: float = 0.15
    floor: float = 0.1
    ceiling: float = 0.99

    def __post_init__(self):
        if not self.floor <= self.ceiling:
            raise InvalidParameterError("sentiment floor must not exceed ceiling")

    def step(self, sentiment: float, shock: float) -> float:
        sentiment += self.reversion * (self.mean - sentiment) + self.volatility * shock
        return max(self.floor, min(self.ceiling, sentiment))


def _default_index() -> AssetDynamics:
    return AssetDynamics(initial_price=23040.25, daily_drift=0.0008, daily_volatility=0.0174)


def _default_xrp() -> AssetDynamics:
    return AssetDynamics(initial_price=0.62, daily_drift=0.0012, daily_volatility=0.035)


@dataclass
class PathSimulationConfig:
    """Configuration for market path simulation.

    Attributes:
        num_paths: Number of simulated paths. Default 1000.
        horizon_days: Trading days per path. Default 252.
        index: Equity index dynamics (Nasdaq E-mini levels by default)
        xrp: XRP dynamics
        correlation: Correlation of the XRP shock with the index shock. Default 0.3.
        sentiment: Sentiment dynamics
        random_seed: Optional seed for reproducible paths. Default None.
    """
    num_paths: int = 1000
    horizon_days: int = TRADING_DAYS
    index: AssetDynamics = field(default_factory=_default_index)
    xrp: AssetDynamics = field(default_factory=_default_xrp)
    correlation: float = 0.3
    sentiment: SentimentDynamics = field(default_factory=SentimentDynamics)
    random_seed: Optional[int] = None

    def __post_init__(self):
        if self.num_paths < 1:
            raise InvalidParameterError("num_paths must be at least 1")
        if self.horizon_days < 1:
            raise InvalidParameterError("horizon_days must be at least 1")
        if not -1.0 <= self.correlation <= 1.0:
            raise InvalidParameterError(f"correlation must be in [-1, 1], got {self.correlation}")


class HypeYieldModel:
    """Annual yield, in percent, of a three-sleeve allocation for one market state.

    The base allocation is 70% RLUSD, 20% high-volatility arbitrage and 10%
    solar RWA. Sentiment above the threshold shifts weight to arbitrage and
    multiplies the weighted yield; an ETF surge (XRP price spike, heavy volume
    and very high sentiment) switches to a 50/40/10 split and multiplies it
    again. An index move beyond the hedge trigger moves weight back to RLUSD.
    """

    BASE_YIELDS = {'rlusd': 8.0, 'high_vol_arb': 45.0, 'eco_rwa': 24.0}
    BASE_ALLOCATION = {'rlusd': 0.70, 'high_vol_arb': 0.20, 'eco_rwa': 0.10}
    SURGE_ALLOCATION = {'rlusd': 0.50, 'high_vol_arb': 0.40, 'eco_rwa': 0.10}

    def __init__(self,
                 sentiment_threshold: float = 0.7,
                 boost_multiplier: float = 1.15,
                 surge_multiplier: float = 1.5,
                 eco_bonus: float = 24.0,
                 baseline_xrp_price: float = 0.62,
                 surge_price_jump: float = 0.25,
                 surge_volume: float = 3.0,
                 surge_sentiment: float = 0.85,
                 hedge_trigger_pct: float = 0.1):
        self.sentiment_threshold = sentiment_threshold
        self.boost_multiplier = boost_multiplier
        self.surge_multiplier = surge_multiplier
        self.eco_bonus = eco_bonus
        self.baseline_xrp_price = baseline_xrp_price
        self.surge_price_jump = surge_price_jump
        self.surge_volume = surge_volume
        self.surge_sentiment = surge_sentiment
        self.hedge_trigger_pct = hedge_trigger_pct

    def is_surge(self, xrp_price: float, volume: float, sentiment: float) -> bool:
        price_jump = (xrp_price - self.baseline_xrp_price) / self.baseline_xrp_price
        return (price_jump > self.surge_price_jump
                and volume > self.surge_volume
                and sentiment > self.surge_sentiment)

    def allocation(self, index_change_pct: float, xrp_price: float,
                   volume: float, sentiment: float) -> Dict[str, float]:
        weights = dict(self.BASE_ALLOCATION)
        if sentiment > self.sentiment_threshold:
            weights['high_vol_arb'] *= self.boost_multiplier
            weights['rlusd'] *= 0.95
            if self.is_surge(xrp_price, volume, sentiment):
                weights = dict(self.SURGE_ALLOCATION)

        if abs(index_change_pct) > self.hedge_trigger_pct:
            weights['rlusd'] = min(0.80, weights['rlusd'] + 0.10)
            weights['high_vol_arb'] = max(0.10, weights['high_vol_arb'] - 0.05)
        return weights

    def annual_yield(self, index_change_pct: float, xrp_price: float,
                     volume: float, sentiment: float) -> float:
        weights = self.allocation(index_change_pct, xrp_price, volume, sentiment)
        weighted = sum(weight * self.BASE_YIELDS[name] for name, weight in weights.items())
        if sentiment > self.sentiment_threshold:
            weighted *= self.boost_multiplier
        if self.is_surge(xrp_price, volume, sentiment):
            weighted *= self.surge_multiplier
        return weighted + weights['eco_rwa'] * self.eco_bonus


@dataclass(eq=False)
class MarketPath:
    """Daily series of one simulated path; yields are daily, in percent."""
    index: np.ndarray
    xrp: np.ndarray
    sentiment: np.ndarray
    yields: np.ndarray

    def __post_init__(self):
        self.index = np.asarray(self.index, dtype=float)
        self.xrp = np.asarray(self.xrp, dtype=float)
        self.sentiment = np.asarray(self.sentiment, dtype=float)
        self.yields = np.asarray(self.yields, dtype=float)

    @property
    def annual_yield(self) -> float:
        return float(np.sum(self.yields))

    @property
    def max_drawdown(self) -> float:
        return max_drawdown(self.yields)


@dataclass
class PathSimulationResult:
    """Simulated market paths and their yield summaries."""
    paths: List[MarketPath]

    def annual_yields(self) -> np.ndarray:
        return np.array([path.annual_yield for path in self.paths], dtype=float)

    @property
    def distribution(self) -> YieldDistribution:
        """Distribution of cumulative (annual) yields across paths."""
        return YieldDistribution(self.annual_yields())

    @property
    def max_drawdown(self) -> float:
        """Worst drawdown over all paths."""
        if not self.paths:
            return 0.0
        return max(path.max_drawdown for path in self.paths)

    def to_frame(self) -> pd.DataFrame:
        """One row per path with its annual yield, drawdown and final prices."""
        return pd.DataFrame({
            'annual_yield': self.annual_yields(),
            'max_drawdown': [path.max_drawdown for path in self.paths],
            'final_index': [float(path.index[-1]) for path in self.paths],
            'final_xrp': [float(path.xrp[-1]) for path in self.paths],
        })

    def __len__(self) -> int:
        return len(self.paths)


class MarketPathSimulator:
    """Simulates daily market paths and their accrued yields.

    Every draw goes through one RandomSource, in this order per day: index
    shock, XRP shock, sentiment shock (two uniforms each), then the volume
    multiplier.

    Example:
        >>> simulator = MarketPathSimulator(PathSimulationConfig(num_paths=200, random_seed=7))
        >>> result = simulator.simulate()
        >>> print(f"Mean annual yield: {result.distribution.statistics()['mean']:.2f}%")
    """

    def __init__(self,
                 config: Optional[PathSimulationConfig] = None,
                 yield_model: Optional[HypeYieldModel] = None):
        self.config = config or PathSimulationConfig()
        self.yield_model = yield_model or HypeYieldModel()

    def simulate_path(self, random_source: RandomSource) -> MarketPath:
        config = self.config
        days = config.horizon_days
        index_prices = np.empty(days)
        xrp_prices = np.empty(days)
        sentiments = np.empty(days)
        yields = np.empty(days)

        index_price = config.index.initial_price
        xrp_price = config.xrp.initial_price
        sentiment = config.sentiment.initial

        for day in range(days):
            index_shock = standard_normal(random_source)
            index_price = config.index.step(index_price, index_shock)

            xrp_shock = correlated_shock(index_shock, standard_normal(random_source), config.correlation)
            xrp_price = config.xrp.step(xrp_price, xrp_shock)

            sentiment = config.sentiment.step(sentiment, standard_normal(random_source))

            volume = 1.0 + 2.0 * random_source.uniform()
            index_change_pct = (index_price / config.index.initial_price - 1.0) * 100.0
            annual = self.yield_model.annual_yield(index_change_pct, xrp_price, volume, sentiment)

            index_prices[day] = index_price
            xrp_prices[day] = xrp_price
            sentiments[day] = sentiment
            yields[day] = annual / TRADING_DAYS

        return MarketPath(index=index_prices, xrp=xrp_prices, sentiment=sentiments, yields=yields)

    def simulate(self, random_source: Optional[RandomSource] = None) -> PathSimulationResult:
        """Simulate all configured paths.

        Args:
            random_source: Random source for this run. If None, a numpy source
                           seeded from the configuration is created.
        """
        source = random_source or NumpyRandomSource(self.config.random_seed)
        logger.info("Simulating %d market paths of %d days",
                    self.config.num_paths, self.config.horizon_days)
        paths = [self.simulate_path(source) for _ in range(self.config.num_paths)]
        result = PathSimulationResult(paths)
        logger.info("Path simulation complete: max drawdown %.4f", result.max_drawdown)
        return result
