"""Request matching: header authorization and version selection."""

import logging
from typing import Mapping, Optional, Sequence

from .models import EndpointConfig, QueryConstraint, Variant

logger = logging.getLogger(__name__)


def authorized(endpoint: EndpointConfig, headers: Mapping[str, str]) -> bool:
    """Check that every configured header is present with exactly the configured value.

    Header names are compared case-insensitively. A missing header counts as an
    empty value, so it only passes when the configured value is empty too.
    """
    # First occurrence wins for repeated headers
    received = {}
    for name, value in headers.items():
        received.setdefault(name.lower(), value)
    for name, expected in endpoint.headers:
        if received.get(name.lower(), "") != expected:
            return False
    return True


def _first_value(query: Mapping[str, Sequence[str]], name: str) -> str:
    values = query.get(name)
    if not values:
        return ""
    return values[0]


def constraint_satisfied(constraint: QueryConstraint, query: Mapping[str, Sequence[str]]) -> bool:
    value = _first_value(query, constraint.name)
    if not value:
        return False

    if constraint.compiled is None or constraint.compiled.search(value) is None:
        logger.warning(f"found no match for ... {constraint.name}: pattern={constraint.pattern!r} value={value!r}")
        return False

    logger.info(f"found match for ... {constraint.name}: pattern={constraint.pattern!r} value={value!r}")
    return True


def resolve(endpoint: EndpointConfig, query: Mapping[str, Sequence[str]]) -> Optional[Variant]:
    """Return the first version whose query constraints all hold, or None."""
    for variant in endpoint.variants:
        if all(constraint_satisfied(c, query) for c in variant.constraints):
            return variant
    return None
