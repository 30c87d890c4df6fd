"""Shared fixtures for the mock metrics server tests."""
import pytest

from metricsgen.config import parse_config

CANARY_CONFIG = """
- uri: /api/v1/query
  provider: Prometheus
  headers:
    X-Api-Key: secret
  versions:
    - params:
        - name: version
          value: canary
      metric:
        type: counter
        rate: 2.0
    - params: []
      metric:
        type: gauge
        alpha: 1
        beta: 1
        shift: 5
        multiplier: 10
- uri: /open
  provider: Prometheus
  versions:
    - params:
        - name: query
          value: "request_count"
      metric:
        type: mystery
"""


def fixed_sampler(value):
    """Beta sampler that always returns the same draw and records its arguments."""
    calls = []

    def sample(alpha, beta):
        calls.append((alpha, beta))
        return value

    sample.calls = calls
    return sample


@pytest.fixture
def endpoints():
    return parse_config(CANARY_CONFIG)


@pytest.fixture
def query_endpoint(endpoints):
    return endpoints[0]


@pytest.fixture
def open_endpoint(endpoints):
    return endpoints[1]
