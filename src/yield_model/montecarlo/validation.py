# Copyright 2025 Spencer Williams
#
# Use of this source code is governed by an MIT license:
# https://github.com/sw23/life-model/blob/main/LICENSE

"""Yield requirement checks against a forecast's raw distribution or simulated market paths."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .errors import InvalidParameterError
from .paths import MarketPathSimulator, PathSimulationResult
from .random_source import RandomSource
from .results import ForecastResult, YieldDistribution


logger = logging.getLogger(__name__)


@dataclass
class YieldValidationCriteria:
    """Thresholds a distribution must beat.

    Attributes:
        required_yield: Mean yield (percent) the distribution must exceed. Default 60.
        min_success_rate: Share of samples that must exceed required_yield. Default 0.8.
        min_sharpe_ratio: Minimum mean / std ratio. Default 1.5.
        max_drawdown: Drawdown of the cumulative path yield must stay below this.
                      Only checked for simulated paths. Default 0.15.
    """
    required_yield: float = 60.0
    min_success_rate: float = 0.8
    min_sharpe_ratio: float = 1.5
    max_drawdown: float = 0.15

    def __post_init__(self):
        if not 0.0 <= self.min_success_rate <= 1.0:
            raise InvalidParameterError(
                f"min_success_rate must be in [0, 1], got {self.min_success_rate}"
            )
        if self.max_drawdown <= 0:
            raise InvalidParameterError(f"max_drawdown must be positive, got {self.max_drawdown}")


@dataclass
class ValidationCheck:
    name: str
    passed: bool
    value: float
    threshold: float


@dataclass
class ValidationReport:
    checks: List[ValidationCheck]
    metrics: Dict[str, float] = field(default_factory=dict)

    @property
    def passed(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def failed_checks(self) -> List[str]:
        return [check.name for check in self.checks if not check.passed]


def validate_distribution(distribution: Union[YieldDistribution, ForecastResult, PathSimulationResult],
                          criteria: Optional[YieldValidationCriteria] = None) -> ValidationReport:
    """Check a distribution against yield, success rate and Sharpe thresholds.

    Simulated market paths are checked on their annual yields and also get a
    max_drawdown check.

    Args:
        distribution: A YieldDistribution, a ForecastResult carrying one, or a
                      PathSimulationResult
        criteria: Thresholds to apply. If None, uses defaults.

    Returns:
        ValidationReport with one check per criterion

    Raises:
        InvalidParameterError: If there are no samples to validate
    """
    criteria = criteria or YieldValidationCriteria()
    drawdown = None
    if isinstance(distribution, PathSimulationResult):
        if len(distribution) == 0:
            raise InvalidParameterError("Cannot validate an empty set of market paths")
        drawdown = distribution.max_drawdown
        distribution = distribution.distribution
    elif isinstance(distribution, ForecastResult):
        distribution = distribution.distribution
    if distribution is None or len(distribution) == 0:
        raise InvalidParameterError("Cannot validate an empty yield distribution")

    metrics = distribution.risk_metrics(threshold=criteria.required_yield)
    checks = [
        ValidationCheck("mean_yield", metrics['mean'] > criteria.required_yield,
                        metrics['mean'], criteria.required_yield),
        ValidationCheck("success_rate", metrics['success_rate'] > criteria.min_success_rate,
                        metrics['success_rate'], criteria.min_success_rate),
        ValidationCheck("sharpe_ratio", metrics['sharpe_ratio'] > criteria.min_sharpe_ratio,
                        metrics['sharpe_ratio'], criteria.min_sharpe_ratio),
    ]
    if drawdown is not None:
        metrics['max_drawdown'] = drawdown
        checks.append(ValidationCheck("max_drawdown", drawdown < criteria.max_drawdown,
                                      drawdown, criteria.max_drawdown))

    report = ValidationReport(checks=checks, metrics=metrics)
    if not report.passed:
        logger.info("Yield validation failed: %s", ", ".join(report.failed_checks))
    return report


def validate_market_paths(simulator: Optional[MarketPathSimulator] = None,
                          criteria: Optional[YieldValidationCriteria] = None,
                          random_source: Optional[RandomSource] = None) -> ValidationReport:
    """Simulate market paths and validate their annual yields and drawdown."""
    simulator = simulator or MarketPathSimulator()
    return validate_distribution(simulator.simulate(random_source), criteria)
