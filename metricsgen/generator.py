"""
Synthetic value generation.

Counters grow linearly with process uptime. Gauges are drawn from a Beta
distribution whose shape parameters scale with uptime, so the values get less
noisy the longer the process runs.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Optional

from .models import DEFAULT_VALUE, MetricKind, MetricModel

logger = logging.getLogger(__name__)

BetaSampler = Callable[[float, float], float]


@dataclass(frozen=True)
class ProcessClock:
    """Start time of the serving process, captured once on a monotonic clock."""

    started_at: float
    source: Callable[[], float] = time.monotonic

    @classmethod
    def start(cls, source: Callable[[], float] = time.monotonic) -> "ProcessClock":
        return cls(started_at=source(), source=source)

    def elapsed(self, now: Optional[float] = None) -> float:
        if now is None:
            now = self.source()
        return now - self.started_at


def random_beta_sampler(seed: Optional[int] = None) -> BetaSampler:
    rng = random.Random(seed)
    return rng.betavariate


def generate(metric: MetricModel, elapsed: float, sampler: BetaSampler = random.betavariate) -> float:
    if metric.kind is MetricKind.COUNTER:
        return elapsed * metric.rate

    if metric.kind is MetricKind.GAUGE:
        if not metric.usable:
            logger.warning(f"Gauge metric needs positive alpha and beta, got {metric.alpha} and {metric.beta}")
            return DEFAULT_VALUE
        logger.info(f"metricinfo... {metric}")
        sample = sampler((elapsed + 1.0) * metric.alpha, (elapsed + 1.0) * metric.beta)
        return metric.shift + sample * metric.multiplier

    logger.warning(f"Unknown metric type {metric.type_name!r}, returning {DEFAULT_VALUE}")
    return DEFAULT_VALUE
