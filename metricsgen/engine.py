"""Per-request pipeline: authorize, pick a version, generate its value."""

import logging
import random
from dataclasses import dataclass
from typing import Mapping, Sequence, Union

from .generator import BetaSampler, ProcessClock, generate
from .models import EndpointConfig
from .resolver import authorized, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Unauthorized:
    pass


@dataclass(frozen=True)
class NoMatch:
    pass


@dataclass(frozen=True)
class Value:
    value: float


Outcome = Union[Unauthorized, NoMatch, Value]


def evaluate(
    endpoint: EndpointConfig,
    query: Mapping[str, Sequence[str]],
    headers: Mapping[str, str],
    clock: ProcessClock,
    sampler: BetaSampler = random.betavariate,
) -> Outcome:
    if not authorized(endpoint, headers):
        logger.warning(f"Rejected request to {endpoint.uri}: headers are not matching")
        return Unauthorized()

    variant = resolve(endpoint, query)
    if variant is None:
        logger.warning(f"No matching version for request to {endpoint.uri}")
        return NoMatch()

    value = generate(variant.metric, clock.elapsed(), sampler)
    logger.info(f"Serving {value} for {endpoint.uri} from {variant.metric.kind.value} metric")
    return Value(value)
