"""Mini README: Tests for totals and monthly completed-income rollups.

Structure:
    * test_total_value_of_empty_subset_is_zero - empty sums stay Decimal.
    * test_total_value_matches_hand_computed_subset - value, quantity and count over a subset.
    * test_available_completion_months_most_recent_first - distinct months, newest first.
    * test_completion_months_are_deduplicated - several completions share one month entry.
    * test_completed_value_by_month_only_counts_that_month - month isolation and bad tags.
    * test_completed_shipments_by_month_ordered_by_completion - latest completion first.
    * test_reopened_shipments_leave_the_report - IN_PROGRESS rows never count as income.
    * test_monthly_income_report - report entries and their labels.
    * test_monthly_income_formatting_edge_cases - labels for malformed tags.
    * test_product_totals - value and quantity per product.
"""

from __future__ import annotations

from decimal import Decimal

from incometracker.domain import MonthlyIncome, Product, ShipmentStatus


def test_total_value_of_empty_subset_is_zero(ledger) -> None:
    """Summing nothing yields ``Decimal("0")`` rather than the integer 0."""

    total = ledger.aggregation.total_value([])

    assert total == Decimal("0")
    assert isinstance(total, Decimal)


def test_total_value_matches_hand_computed_subset(populated_ledger, make_shipment) -> None:
    """Totals over a chosen subset match the arithmetic done by hand."""

    ledger, shipments = populated_ledger
    subset = [shipments["A"], shipments["D"]]

    # A: 10 x 50000, D: 7 x 40000
    assert ledger.aggregation.total_value(subset) == Decimal("780000")
    assert ledger.aggregation.total_quantity(subset) == 17
    assert ledger.aggregation.count(subset) == 2

    returned = make_shipment(quantity=10, returned_quantity=3, unit_price=Decimal("2.50"))
    assert ledger.aggregation.total_value([returned]) == Decimal("17.50")


def test_available_completion_months_most_recent_first(populated_ledger) -> None:
    """Only months with completed shipments appear, newest first."""

    ledger, _ = populated_ledger

    assert ledger.available_completion_months() == ["04-2024", "02-2024"]


def test_completion_months_are_deduplicated(populated_ledger, clock) -> None:
    """A second completion in April does not add another April entry."""

    ledger, shipments = populated_ledger
    clock.set(clock.now.replace(day=20))
    ledger.complete_shipment(shipments["A"].shipment_id, 0)

    assert ledger.available_completion_months() == ["04-2024", "02-2024"]
    assert ledger.completed_value_by_month("04-2024") == Decimal("780000")


def test_completed_value_by_month_only_counts_that_month(populated_ledger) -> None:
    """Each month sums only its own completions; empty or bad months give zero."""

    ledger, _ = populated_ledger

    assert ledger.completed_value_by_month("02-2024") == Decimal("150000")
    assert ledger.completed_value_by_month("04-2024") == Decimal("280000")
    assert ledger.completed_value_by_month("03-2024") == Decimal("0")
    assert ledger.completed_value_by_month("13-2024") == Decimal("0")


def test_completed_shipments_by_month_ordered_by_completion(populated_ledger, clock) -> None:
    """Shipments completed in a month are listed latest completion first."""

    ledger, shipments = populated_ledger
    clock.set(clock.now.replace(day=1, hour=8))
    earlier = ledger.complete_shipment(shipments["B"].shipment_id, 1)

    listed = ledger.completed_shipments_by_month("04-2024")
    assert [s.shipment_id for s in listed] == [shipments["D"].shipment_id, earlier.shipment_id]
    assert all(s.status is ShipmentStatus.COMPLETE for s in listed)


def test_reopened_shipments_leave_the_report(populated_ledger) -> None:
    """Moving a shipment back to IN_PROGRESS removes its month from the report."""

    ledger, shipments = populated_ledger
    d = shipments["D"]

    ledger.update_shipment(d.shipment_id, d.product, d.quantity, d.destination, ShipmentStatus.IN_PROGRESS)

    assert ledger.available_completion_months() == ["02-2024"]
    assert ledger.completed_value_by_month("04-2024") == Decimal("0")


def test_monthly_income_report(populated_ledger) -> None:
    """The report pairs each completion month with its income and a readable label."""

    ledger, _ = populated_ledger

    report = ledger.monthly_income()

    assert report == [
        MonthlyIncome(month="04-2024", total_value=Decimal("280000")),
        MonthlyIncome(month="02-2024", total_value=Decimal("150000")),
    ]
    assert [entry.formatted_month for entry in report] == ["April 2024", "February 2024"]


def test_monthly_income_formatting_edge_cases() -> None:
    """Out-of-range months read as Unknown; unparseable tags are shown verbatim."""

    assert MonthlyIncome("13-2024", Decimal("0")).formatted_month == "Unknown 2024"
    assert MonthlyIncome("garbage", Decimal("0")).formatted_month == "garbage"


def test_product_totals(populated_ledger) -> None:
    """Per-product totals cover every status of that product."""

    ledger, _ = populated_ledger

    assert ledger.total_value_by_product(Product.FISH_SKIN_SALTED_EGG) == Decimal("650000")
    assert ledger.total_quantity_by_product(Product.FISH_SKIN_SALTED_EGG) == 13
    assert ledger.total_value_by_product(Product.FISH_SKIN_ORIGINAL) == Decimal("225000")
