"""Tests for header authorization and version resolution."""
import pytest
from starlette.datastructures import Headers

from metricsgen.models import EndpointConfig, MetricKind, MetricModel, Provider, QueryConstraint, Variant
from metricsgen.resolver import authorized, constraint_satisfied, resolve


def _variant(*params, rate=1.0):
    return Variant(
        metric=MetricModel(kind=MetricKind.COUNTER, type_name="counter", rate=rate),
        constraints=tuple(QueryConstraint.build(name, pattern) for name, pattern in params),
    )


def _endpoint(*variants, headers=()):
    return EndpointConfig(uri="/q", provider=Provider.PROMETHEUS, variants=variants, headers=headers)


class TestAuthorized:
    HEADERS = (("X-Api-Key", "secret"), ("X-Tenant", "team-a"))

    def test_matching_headers(self):
        endpoint = _endpoint(headers=self.HEADERS)
        assert authorized(endpoint, {"X-Api-Key": "secret", "X-Tenant": "team-a", "Accept": "*/*"})

    def test_header_names_are_case_insensitive(self):
        endpoint = _endpoint(headers=self.HEADERS)
        assert authorized(endpoint, {"x-api-key": "secret", "X-TENANT": "team-a"})

    @pytest.mark.parametrize("name", ["X-Api-Key", "X-Tenant"])
    def test_any_wrong_value_rejects(self, name):
        headers = {"X-Api-Key": "secret", "X-Tenant": "team-a"}
        headers[name] = "wrong"
        assert not authorized(_endpoint(headers=self.HEADERS), headers)

    def test_values_are_case_sensitive(self):
        endpoint = _endpoint(headers=self.HEADERS)
        assert not authorized(endpoint, {"X-Api-Key": "SECRET", "X-Tenant": "team-a"})

    def test_missing_header_rejects(self):
        assert not authorized(_endpoint(headers=self.HEADERS), {"X-Api-Key": "secret"})

    def test_no_configured_headers_always_passes(self):
        assert authorized(_endpoint(), {})

    def test_missing_header_equals_empty_value(self):
        assert authorized(_endpoint(headers=(("X-Empty", ""),)), {})

    def test_repeated_header_uses_first_value(self):
        endpoint = _endpoint(headers=(("X-Key", "a"),))
        assert authorized(endpoint, Headers(raw=[(b"x-key", b"a"), (b"x-key", b"b")]))
        assert not authorized(endpoint, Headers(raw=[(b"x-key", b"b"), (b"x-key", b"a")]))


class TestConstraint:
    constraint = QueryConstraint.build("color", "gr")

    def test_absent_parameter(self):
        assert not constraint_satisfied(self.constraint, {})

    def test_empty_parameter(self):
        assert not constraint_satisfied(self.constraint, {"color": [""]})

    def test_no_values(self):
        assert not constraint_satisfied(self.constraint, {"color": []})

    def test_non_matching_value(self):
        assert not constraint_satisfied(self.constraint, {"color": ["blue"]})

    def test_substring_match(self):
        assert constraint_satisfied(self.constraint, {"color": ["green"]})

    def test_only_first_value_counts(self):
        assert not constraint_satisfied(self.constraint, {"color": ["blue", "green"]})

    def test_invalid_pattern_never_matches(self):
        broken = QueryConstraint.build("color", "gr(")
        assert not constraint_satisfied(broken, {"color": ["gr("]})


class TestResolve:
    def test_empty_constraints_match_anything(self):
        catch_all = _variant()
        assert resolve(_endpoint(catch_all), {}) is catch_all
        assert resolve(_endpoint(catch_all), {"anything": ["x"]}) is catch_all

    def test_first_match_wins(self):
        first = _variant(("version", "can"), rate=1.0)
        second = _variant(("version", "canary"), rate=2.0)
        assert resolve(_endpoint(first, second), {"version": ["canary"]}) is first

    def test_all_constraints_required(self):
        both = _variant(("version", "canary"), ("query", "latency"))
        fallback = _variant()
        endpoint = _endpoint(both, fallback)
        assert resolve(endpoint, {"version": ["canary"]}) is fallback
        assert resolve(endpoint, {"version": ["canary"], "query": ["mean_latency"]}) is both

    def test_no_match(self):
        endpoint = _endpoint(_variant(("version", "canary")))
        assert resolve(endpoint, {"version": ["stable"]}) is None

    def test_no_variants(self):
        assert resolve(_endpoint(), {"version": ["canary"]}) is None

    def test_invalid_pattern_only_disqualifies_its_variant(self):
        broken = _variant(("version", "[canary"))
        working = _variant(("version", "canary"))
        assert resolve(_endpoint(broken, working), {"version": ["canary"]}) is working
