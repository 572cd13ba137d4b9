"""Mini README: Tests for composite shipment filtering.

Uses the ``populated_ledger`` fixture (shipments A-D between January and
April 2024).

Structure:
    * test_empty_filter_matches_everything_newest_first - no criteria, no narrowing.
    * test_single_criteria - product or status alone.
    * test_combined_criteria_are_the_intersection - AND composition.
    * test_date_bounds_are_inclusive - shipments on either bound are kept.
    * test_plain_dates_cover_whole_days - ``date`` bounds span the UTC day.
    * test_open_ended_range - one-sided bounds.
    * test_inverted_range_yields_nothing - start after end matches nothing.
    * test_month_tag_selects_creation_month - tags alone and combined.
    * test_invalid_month_tag_fails_soft - bad tags log and match nothing.
    * test_for_month_builds_full_month_window - helper constructor bounds.
    * test_in_memory_matching_agrees_with_sql - ``matches`` mirrors the SQL predicate.
    * test_completed_in_month_uses_completion_time - completion month lookups.
"""

from __future__ import annotations

from datetime import date

import pytest

from conftest import utc
from incometracker.domain import Product, ShipmentStatus
from incometracker.errors import InvalidFilter
from incometracker.ledger import FilterEngine, ShipmentFilter


def _ids(shipments):
    return [shipment.shipment_id for shipment in shipments]


@pytest.fixture
def dataset(populated_ledger, store):
    ledger, shipments = populated_ledger
    return FilterEngine(store), {key: value.shipment_id for key, value in shipments.items()}


def test_empty_filter_matches_everything_newest_first(dataset) -> None:
    """An empty filter returns every shipment, newest first."""

    engine, ids = dataset

    assert not ShipmentFilter().has_filters()
    assert _ids(engine.apply(ShipmentFilter())) == [ids["D"], ids["C"], ids["B"], ids["A"]]


def test_single_criteria(dataset) -> None:
    """Product and status filters each narrow the list on their own."""

    engine, ids = dataset

    by_product = engine.apply(ShipmentFilter(product=Product.FISH_SKIN_SALTED_EGG))
    by_status = engine.apply(ShipmentFilter(status=ShipmentStatus.COMPLETE))

    assert _ids(by_product) == [ids["C"], ids["A"]]
    assert _ids(by_status) == [ids["D"], ids["C"]]


def test_combined_criteria_are_the_intersection(dataset) -> None:
    """Combining criteria equals intersecting their separate results."""

    engine, ids = dataset
    product = Product.FISH_SKIN_SALTED_EGG
    status = ShipmentStatus.IN_PROGRESS

    combined = set(_ids(engine.apply(ShipmentFilter(product=product, status=status))))
    separately = set(_ids(engine.apply(ShipmentFilter(product=product)))) & set(
        _ids(engine.apply(ShipmentFilter(status=status)))
    )

    assert combined == separately == {ids["A"]}


def test_date_bounds_are_inclusive(dataset, populated_ledger) -> None:
    """Shipments created exactly on a bound are included."""

    engine, ids = dataset
    _, shipments = populated_ledger

    criteria = ShipmentFilter(date_start=shipments["A"].created_at, date_end=shipments["B"].created_at)
    assert _ids(engine.apply(criteria)) == [ids["B"], ids["A"]]


def test_plain_dates_cover_whole_days(dataset) -> None:
    """A single-day ``date`` range keeps shipments created at any time that day."""

    engine, ids = dataset

    criteria = ShipmentFilter(date_start=date(2024, 2, 10), date_end=date(2024, 2, 10))
    assert _ids(engine.apply(criteria)) == [ids["B"]]


def test_open_ended_range(dataset) -> None:
    """Only the supplied bound is applied."""

    engine, ids = dataset

    assert _ids(engine.apply(ShipmentFilter(date_start=utc(2024, 2, 1)))) == [ids["D"], ids["C"], ids["B"]]
    assert _ids(engine.apply(ShipmentFilter(date_end=utc(2024, 2, 1)))) == [ids["A"]]


def test_inverted_range_yields_nothing(dataset) -> None:
    """A start after the end is not an error, just an empty result."""

    engine, _ = dataset

    criteria = ShipmentFilter(date_start=utc(2024, 3, 1), date_end=utc(2024, 1, 1))
    assert engine.apply(criteria) == []


def test_month_tag_selects_creation_month(dataset) -> None:
    """Month tags select by creation month and combine with other criteria."""

    engine, ids = dataset

    assert _ids(engine.apply(ShipmentFilter(month_tag="02-2024"))) == [ids["C"], ids["B"]]
    assert _ids(engine.apply(ShipmentFilter.for_month(2024, 2))) == [ids["C"], ids["B"]]
    assert _ids(
        engine.apply(ShipmentFilter(month_tag="02-2024", product=Product.FISH_SKIN_ORIGINAL))
    ) == [ids["B"]]


@pytest.mark.parametrize("tag", ["13-2024", "00-2024", "2024-02", "2-2024", "", "Feb 2024"])
def test_invalid_month_tag_fails_soft(dataset, tag, caplog) -> None:
    """Malformed month tags are logged and match nothing instead of raising."""

    engine, _ = dataset

    assert engine.apply(ShipmentFilter(month_tag=tag)) == []
    assert "invalid month" in caplog.text


def test_for_month_builds_full_month_window() -> None:
    """``for_month`` spans the first to the last instant, leap days included."""

    criteria = ShipmentFilter.for_month(2024, 2)

    assert criteria.month_tag == "02-2024"
    assert criteria.date_start == utc(2024, 2, 1, 0, 0)
    assert criteria.date_end.day == 29
    assert criteria.date_end.hour == 23
    assert criteria.has_filters()
    with pytest.raises(InvalidFilter):
        ShipmentFilter.for_month(2024, 13)


def test_in_memory_matching_agrees_with_sql(dataset, store) -> None:
    """``ShipmentFilter.matches`` selects exactly what the SQL predicate selects."""

    engine, _ = dataset
    everything = store.scan().to_list()
    filters = [
        ShipmentFilter(),
        ShipmentFilter(product=Product.FISH_SKIN_SALTED_EGG),
        ShipmentFilter(status=ShipmentStatus.COMPLETE, month_tag="03-2024"),
        ShipmentFilter(date_start=date(2024, 2, 1), date_end=date(2024, 2, 29)),
        ShipmentFilter(month_tag="13-2024"),
    ]

    for criteria in filters:
        expected = [s.shipment_id for s in everything if criteria.matches(s)]
        assert _ids(engine.apply(criteria)) == expected


def test_completed_in_month_uses_completion_time(dataset) -> None:
    """Completion month lookups key on ``completed_at``, not creation time."""

    engine, ids = dataset

    assert _ids(engine.completed_in_month("04-2024")) == [ids["D"]]
    assert engine.completed_in_month("03-2024") == []
    assert engine.completed_in_month("not-a-month") == []
