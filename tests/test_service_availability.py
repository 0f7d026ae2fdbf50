"""
Availability checks run the overlap predicate over a vehicle's non-cancelled
rentals; cancelled rentals and the rental being edited never conflict.
"""
from datetime import date, timedelta

import pytest

from fleetdesk.exceptions import InvalidInterval, VehicleNotFound, VehicleUnavailable
from fleetdesk.services.availability_service import AvailabilityService
from fleetdesk.utils.intervals import Interval, overlaps


def book(services, fleet, start, end, vehicle="axia"):
    return services.rentals.create(fleet["alice"].id, fleet[vehicle].name, Interval.parse(start, end))


def test_empty_schedule_is_available(services, fleet):
    result = services.availability.check_availability("Perodua Axia", Interval.parse("2024-06-01", "2024-06-05"))
    assert result.available
    assert result.conflicts == []


def test_touching_boundary_conflicts(services, fleet):
    existing = book(services, fleet, "2024-06-01", "2024-06-05")

    result = services.availability.check_availability(fleet["axia"], Interval.parse("2024-06-05", "2024-06-07"))
    assert not result.available
    assert [c["id"] for c in result.to_dict()["conflicts"]] == [existing.id]

    result = services.availability.check_availability(fleet["axia"], Interval.parse("2024-06-06", "2024-06-07"))
    assert result.available


def test_same_day_changeover_policy(repo, fleet, services):
    book(services, fleet, "2024-06-01", "2024-06-05")
    relaxed = AvailabilityService(repo, allow_same_day_changeover=True)
    assert relaxed.check_availability("Perodua Axia", Interval.parse("2024-06-05", "2024-06-07")).available


def test_other_vehicles_do_not_conflict(services, fleet):
    book(services, fleet, "2024-06-01", "2024-06-05", vehicle="vios")
    assert services.availability.check_availability(fleet["axia"].id, Interval.parse("2024-06-02", "2024-06-03")).available


def test_cancelled_rental_frees_interval(services, fleet):
    rental = book(services, fleet, "2024-06-01", "2024-06-05")
    services.rentals.cancel(rental.id, reason="changed plans")

    result = services.availability.check_availability(fleet["axia"], Interval.parse("2024-06-01", "2024-06-05"))
    assert result.available


def test_exclude_rental_being_edited(services, fleet):
    rental = book(services, fleet, "2024-06-01", "2024-06-05")
    interval = Interval.parse("2024-06-02", "2024-06-06")
    assert not services.availability.check_availability(fleet["axia"], interval).available
    assert services.availability.check_availability(fleet["axia"], interval, exclude_rental_id=rental.id).available


def test_zero_length_interval_is_invalid(services, fleet):
    with pytest.raises(InvalidInterval):
        services.availability.check_availability(fleet["axia"], Interval.parse("2024-06-01", "2024-06-01"))


def test_unknown_vehicle(services, fleet):
    with pytest.raises(VehicleNotFound):
        services.availability.check_availability("Batmobile", Interval.parse("2024-06-01", "2024-06-03"))


def test_schedule_filters_by_month_and_sorts(services, fleet):
    july = book(services, fleet, "2024-07-10", "2024-07-12")
    june = book(services, fleet, "2024-06-28", "2024-07-02")
    may = book(services, fleet, "2024-05-01", "2024-05-03")
    cancelled = book(services, fleet, "2024-06-10", "2024-06-12")
    services.rentals.cancel(cancelled.id)

    assert [r.id for r in services.availability.get_schedule("Perodua Axia", 7, 2024)] == [june.id, july.id]
    assert [r.id for r in services.availability.get_schedule("Perodua Axia")] == [may.id, june.id, july.id]


def test_accepted_rentals_never_overlap(services, fleet):
    """Try every multi-day interval in a week; whatever was accepted is pairwise disjoint."""
    base = date(2024, 6, 1)
    accepted = []
    for s in range(7):
        for e in range(s + 1, 8):
            interval = Interval(base + timedelta(days=s), base + timedelta(days=e))
            try:
                book(services, fleet, interval.start, interval.end)
            except VehicleUnavailable:
                continue
            accepted.append(interval)

    assert accepted
    stored = [r.interval for r in services.availability.get_schedule("Perodua Axia")]
    assert sorted(stored, key=lambda iv: iv.start) == sorted(accepted, key=lambda iv: iv.start)
    for i, a in enumerate(stored):
        for b in stored[i + 1:]:
            assert not overlaps(a, b)
