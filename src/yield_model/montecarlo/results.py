# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""
Forecast results and yield distribution analysis.

This module provides the ForecastResult record returned by the forecaster and
the YieldDistribution class for analyzing the raw sample yields behind it,
including percentile tables, histograms and risk metrics.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np
import pandas as pd


class YieldDistribution:
    """Analyzes the raw (unadjusted) yields of one forecast.

    Percentiles are read from the sorted sample set by index, not
    interpolated, so they are always actual sample values.

    Example:
        >>> dist = YieldDistribution([12.0, 30.5, 28.1, 25.0])
        >>> dist.percentiles()['p50']
        28.1
    """

    # Percentile levels reported by percentiles()
    PERCENTILES = {
        "p5": 0.05,
        "p25": 0.25,
        "p50": 0.50,
        "p75": 0.75,
        "p95": 0.95,
    }

    def __init__(self, yields: Sequence[float]):
        """Initialize with raw sample yields.

        Args:
            yields: Simulated yields in percent, in any order
        """
        self._yields = np.asarray(yields, dtype=float)
        self._sorted = np.sort(self._yields)
        self.num_samples = len(self._yields)

    @property
    def yields(self) -> np.ndarray:
        """Copy of the yields in draw order."""
        return self._yields.copy()

    @property
    def sorted_yields(self) -> np.ndarray:
        """Copy of the yields sorted ascending."""
        return self._sorted.copy()

    def value_at(self, fraction: float) -> float:
        """Sorted sample at index floor(fraction * N), clamped to the last sample."""
        if self.num_samples == 0:
            raise ValueError("Distribution has no samples")
        idx = int(math.floor(self.num_samples * fraction))
        idx = min(max(idx, 0), self.num_samples - 1)
        return float(self._sorted[idx])

    def percentiles(self) -> Dict[str, float]:
        """Get the standard percentile levels.

        Returns:
            Dict mapping p5, p25, p50, p75, p95 to sample values. Empty if
            there are no samples.
        """
        if self.num_samples == 0:
            return {}
        return {name: self.value_at(pct) for name, pct in self.PERCENTILES.items()}

    def percentile_frame(self) -> pd.DataFrame:
        """Get percentiles as a one-column DataFrame indexed by level name."""
        data = self.percentiles()
        return pd.DataFrame({"yield": list(data.values())}, index=pd.Index(list(data.keys()), name="percentile"))

    def histogram(self, bins: int = 20) -> Dict[str, List[float]]:
        """Bucket yields between floor(p5) and ceil(p95).

        Yields below the range are dropped; yields above it are counted in
        the last bin.

        Args:
            bins: Number of equal-width bins

        Returns:
            Dict with 'bins' (left edges), 'counts' and 'normalized'
            (counts divided by the largest count)
        """
        if bins < 1:
            raise ValueError("bins must be at least 1")
        if self.num_samples == 0:
            return {"bins": [], "counts": [], "normalized": []}

        low = math.floor(self.value_at(0.05))
        high = math.ceil(self.value_at(0.95))
        if high <= low:
            high = low + 1
        bin_size = (high - low) / bins

        counts = [0] * bins
        for value in self._yields:
            idx = min(int(math.floor((value - low) / bin_size)), bins - 1)
            if idx >= 0:
                counts[idx] += 1

        peak = max(counts)
        normalized = [c / peak if peak > 0 else 0.0 for c in counts]
        return {
            "bins": [low + i * bin_size for i in range(bins)],
            "counts": counts,
            "normalized": normalized,
        }

    def statistics(self) -> Dict[str, float]:
        """Summary statistics using the population standard deviation.

        Returns:
            Dict with mean, std, min, max and p50. Empty if there are no samples.
        """
        if self.num_samples == 0:
            return {}
        return {
            'mean': float(np.mean(self._yields)),
            'std': float(np.std(self._yields)),
            'min': float(self._sorted[0]),
            'max': float(self._sorted[-1]),
            'p50': self.value_at(0.5),
        }

    def success_rate(self, threshold: float = 0.0) -> float:
        """Fraction of samples strictly above threshold (0.0 when empty)."""
        if self.num_samples == 0:
            return 0.0
        return float(np.count_nonzero(self._yields > threshold)) / self.num_samples

    def risk_metrics(self, threshold: float = 0.0) -> Dict[str, float]:
        """Tail and risk-adjusted metrics.

        Args:
            threshold: Yield a sample must exceed to count as a success

        Returns:
            Dict with mean, std, median, var95, var99, sharpe_ratio and
            success_rate
        """
        if self.num_samples == 0:
            return {}
        stats = self.statistics()
        sharpe = stats['mean'] / stats['std'] if stats['std'] > 0 else 0.0
        return {
            'mean': stats['mean'],
            'std': stats['std'],
            'median': float(self._sorted[self.num_samples // 2]),
            'var95': self.value_at(0.05),
            'var99': self.value_at(0.01),
            'sharpe_ratio': sharpe,
            'success_rate': self.success_rate(threshold),
        }

    def to_frame(self) -> pd.DataFrame:
        """Yields in draw order as a DataFrame with a 'yield' column."""
        return pd.DataFrame({"yield": self._yields})

    def __len__(self) -> int:
        return self.num_samples

    def __repr__(self) -> str:
        return f"YieldDistribution(num_samples={self.num_samples})"


@dataclass
class ForecastResult:
    """Statistical summary of one forecast.

    mean_yield and max_yield include the adjustment terms; every other
    statistic is computed from the raw samples. The raw mean and max are kept
    alongside so callers can tell the two apart.
    """
    mean_yield: float
    max_yield: float
    min_yield: float
    yield_std_dev: float
    confidence_lower: float
    confidence_upper: float
    volatility_ratio: float
    success_probability: float
    strategy_adjustment: float
    eco_boost: float
    sentiment_boost: float
    ai_boost: float
    raw_mean_yield: float
    raw_max_yield: float
    iterations: int
    strategy_class: str
    confidence_level: float
    eco_focus: bool
    base_yield: float
    yield_volatility: float
    used_synthetic_data: bool
    data_source_degraded: bool
    market_data_source: str
    timestamp: float = field(compare=False)
    distribution: Optional[YieldDistribution] = field(default=None, compare=False, repr=False)

    @property
    def total_adjustment(self) -> float:
        return self.strategy_adjustment + self.eco_boost + self.sentiment_boost + self.ai_boost

    def to_dict(self) -> Dict[str, Any]:
        """JSON friendly view with camelCase keys."""
        return {
            "meanYield": self.mean_yield,
            "maxYield": self.max_yield,
            "minYield": self.min_yield,
            "yieldStdDev": self.yield_std_dev,
            "confidenceLower": self.confidence_lower,
            "confidenceUpper": self.confidence_upper,
            "volatilityRatio": self.volatility_ratio,
            "successProbability": self.success_probability,
            "strategyAdjustment": self.strategy_adjustment,
            "ecoBoost": self.eco_boost,
            "sentimentBoost": self.sentiment_boost,
            "aiBoost": self.ai_boost,
            "rawMeanYield": self.raw_mean_yield,
            "rawMaxYield": self.raw_max_yield,
            "iterations": self.iterations,
            "strategyClass": self.strategy_class,
            "confidenceLevel": self.confidence_level,
            "ecoFocus": self.eco_focus,
            "baseYield": self.base_yield,
            "yieldVolatility": self.yield_volatility,
            "usedSyntheticData": self.used_synthetic_data,
            "dataSourceDegraded": self.data_source_degraded,
            "marketDataSource": self.market_data_source,
            "timestamp": self.timestamp,
        }
