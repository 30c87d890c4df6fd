"""
Response framing per metrics provider.

Example Prometheus instant query response:

    {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [{"value": [1556823494.744, "21.7639"]}]
        }
    }
"""

import math
from decimal import Decimal
from typing import Any

from .models import Provider

# Sample timestamp reported with every value
SAMPLE_TIMESTAMP = 1556823494.744


def format_sample_value(value: float) -> str:
    """Shortest round-trip string for a float in %g style.

    Uses exponent notation when the decimal exponent is below -4 or at least 6,
    so 20.0 is "20" and 1e6 is "1e+06".
    """
    value = float(value)
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"

    sign, digits, exponent = Decimal(repr(value)).normalize().as_tuple()
    text = "".join(str(d) for d in digits)
    point = exponent + len(digits) - 1

    if point < -4 or point >= 6:
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        result = f"{mantissa}e{'-' if point < 0 else '+'}{abs(point):02d}"
    elif point < 0:
        result = "0." + "0" * (-point - 1) + text
    elif point >= len(text) - 1:
        result = text + "0" * (point - len(text) + 1)
    else:
        result = text[:point + 1] + "." + text[point + 1:]
    return ("-" if sign else "") + result


def prometheus_response(value: float) -> dict[str, Any]:
    return {
        "status": "success",
        "data": {
            "resultType": "vector",
            "result": [
                {"value": [SAMPLE_TIMESTAMP, format_sample_value(value)]},
            ],
        },
    }


def render(provider: Provider, value: float) -> dict[str, Any]:
    if provider is Provider.PROMETHEUS:
        return prometheus_response(value)
    raise ValueError(f"unknown provider: {provider}")
