"""Tests for multi-provider portrait search aggregation."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from caricature.search.aggregator import PortraitSearchAggregator
from caricature.search.models import SearchResult


class FakeProvider:
    """Provider double that yields `available` results, or raises `error`."""

    def __init__(self, name, available=0, configured=True, error=None):
        self.name = name
        self.available = available
        self.configured = configured
        self.collect = AsyncMock(side_effect=self._collect)
        self.error = error

    def is_configured(self):
        return self.configured

    async def _collect(self, person_name, slots, session):
        if self.error:
            raise self.error
        return [
            SearchResult(
                url=f"https://{self.name}/{i}.jpg",
                local_path=f"/cache/{self.name}-{i}.jpg",
                source=self.name,
                description=f"{self.name} {i}",
                index=99,
            )
            for i in range(min(slots, self.available))
        ]


def _search(providers, name="Oprah Winfrey", **kwargs):
    aggregator = PortraitSearchAggregator(settings=None, providers=providers, cache=object())
    return asyncio.run(aggregator.search(name, **kwargs))


@pytest.mark.parametrize("name", ["", "   ", "\n\t", None])
def test_blank_name_returns_empty_without_provider_calls(name):
    google = FakeProvider("google", available=3)

    assert _search([google], name=name) == []
    google.collect.assert_not_called()


@pytest.mark.parametrize("k", [1, 2, 3, 5])
def test_returns_at_most_k_results_indexed_from_one(k):
    providers = [
        FakeProvider("google", available=1),
        FakeProvider("unsplash", available=1),
        FakeProvider("pexels", available=10),
    ]

    results = _search(providers, max_results=k)

    assert len(results) <= k
    assert [r.index for r in results] == list(range(1, len(results) + 1))


def test_lower_priority_providers_not_called_when_first_fills_target():
    google = FakeProvider("google", available=5)
    unsplash = FakeProvider("unsplash", available=5)
    pexels = FakeProvider("pexels", available=5)

    results = _search([google, unsplash, pexels], max_results=3)

    assert [r.source for r in results] == ["google"] * 3
    assert google.collect.call_count == 1
    unsplash.collect.assert_not_called()
    pexels.collect.assert_not_called()


def test_failing_provider_is_skipped_with_same_remaining_budget():
    google = FakeProvider("google", error=RuntimeError("quota exceeded"))
    unsplash = FakeProvider("unsplash", available=2)
    pexels = FakeProvider("pexels", available=5)

    results = _search([google, unsplash, pexels], max_results=3)

    assert [r.source for r in results] == ["unsplash", "unsplash", "pexels"]
    assert unsplash.collect.call_args.args[1] == 3
    assert pexels.collect.call_args.args[1] == 1


def test_all_providers_failing_returns_empty():
    providers = [
        FakeProvider("google", error=RuntimeError("boom")),
        FakeProvider("unsplash", error=ValueError("bad json")),
    ]

    assert _search(providers) == []


def test_unconfigured_providers_are_skipped():
    google = FakeProvider("google", available=3, configured=False)
    pexels = FakeProvider("pexels", available=3)

    results = _search([google, pexels])

    google.collect.assert_not_called()
    assert [r.source for r in results] == ["pexels"] * 3


def test_no_configured_providers_returns_empty():
    assert _search([FakeProvider("google", available=3, configured=False)]) == []


def test_max_results_clamped_to_at_least_one():
    results = _search([FakeProvider("google", available=3)], max_results=0)

    assert len(results) == 1
    assert results[0].index == 1


def test_name_is_trimmed_before_provider_call():
    google = FakeProvider("google", available=1)

    _search([google], name="  Jon Stewart  ")

    assert google.collect.call_args.args[0] == "Jon Stewart"


def test_default_max_results_is_three():
    results = _search([FakeProvider("google", available=10)])
    assert len(results) == 3
