"""
Booking request state machine: pending -> confirmed | rejected,
confirmed -> completed (converted into a rental). Terminal states stay put.
"""
import pytest

from fleetdesk.exceptions import (
    CustomerBlacklisted,
    InvalidInterval,
    InvalidTransition,
    NotFound,
    ValidationError,
    VehicleUnavailable,
)
from fleetdesk.models import BookingRequest
from fleetdesk.services.common import Pricing
from fleetdesk.utils.constants import BookingStatus, RentalStatus, Event, StaffAction
from fleetdesk.utils.intervals import Interval


def test_submit_records_pending_request(services, fleet, channel):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id,
                                   Interval.parse("2024-06-01", "2024-06-05"), message="  airport pickup ")
    assert req.status == BookingStatus.PENDING
    assert req.total_days == 4
    assert req.vehicle_name == "Perodua Axia"
    assert req.customer_message == "airport pickup"
    assert req.email_sent is True
    assert channel.sent == [(fleet["alice"].id, Event.BOOKING_RECEIVED)]


def test_submit_with_end_equal_start_persists_nothing(services, repo, fleet):
    with pytest.raises(InvalidInterval):
        services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-01"))
    assert repo.list_booking_requests() == []


def test_blacklisted_customer_cannot_submit(services, repo, fleet):
    with pytest.raises(CustomerBlacklisted):
        services.bookings.submit(fleet["bob"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    assert repo.list_booking_requests() == []


def test_resolved_vehicle_name_wins(services, fleet):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id,
                                   Interval.parse("2024-06-01", "2024-06-03"), vehicle_name="Something Else")
    assert req.vehicle_name == "Perodua Axia"


def test_confirm_records_staff_and_logs(services, repo, fleet):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    services.bookings.decide(req.id, "confirmed", staff_id=3)

    assert req.status == BookingStatus.CONFIRMED
    assert req.confirmed_by_staff_id == 3
    assert req.confirmed_at is not None
    assert [log.action for log in repo.list_staff_logs(staff_id=3)] == [StaffAction.BOOKING_CONFIRMED]


def test_reject_requires_reason(services, fleet):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    with pytest.raises(ValidationError):
        services.bookings.decide(req.id, "rejected", staff_id=3, reason="  ")
    assert services.bookings.get(req.id).status == BookingStatus.PENDING


def test_decide_on_rejected_request_mutates_nothing(services, fleet, repo):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    services.bookings.decide(req.id, "rejected", staff_id=3, reason="vehicle in service")

    with pytest.raises(InvalidTransition):
        services.bookings.decide(req.id, "confirmed", staff_id=4)

    again = repo.get_booking_request(req.id)
    assert again.status == BookingStatus.REJECTED
    assert again.confirmed_by_staff_id is None
    assert again.rejected_reason == "vehicle in service"
    assert repo.list_staff_logs(staff_id=4) == []


def test_decide_rejects_unknown_outcome(services, fleet):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    with pytest.raises(ValidationError):
        services.bookings.decide(req.id, "completed", staff_id=3)


def test_convert_creates_pending_rental(services, fleet, confirmed_request):
    request_id = confirmed_request(fleet["alice"].id, fleet["axia"].id, "2024-06-01", "2024-06-05")

    rental = services.bookings.convert_to_rental(request_id, Pricing(rental_per_day=90.0, deposit=100.0), staff_id=7)

    assert rental.status == RentalStatus.PENDING
    assert rental.vehicle == "Perodua Axia"
    assert rental.total_days == 4
    assert rental.grand_total == 460.0
    assert rental.booking_request_id == request_id
    req = services.bookings.get(request_id)
    assert req.status == BookingStatus.COMPLETED
    assert req.rental_id == rental.id


def test_convert_requires_confirmed_request(services, fleet):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    with pytest.raises(InvalidTransition):
        services.bookings.convert_to_rental(req.id)


def test_converted_request_cannot_convert_twice(services, fleet, confirmed_request):
    request_id = confirmed_request(fleet["alice"].id, fleet["axia"].id, "2024-06-01", "2024-06-05")
    services.bookings.convert_to_rental(request_id)
    with pytest.raises(InvalidTransition):
        services.bookings.convert_to_rental(request_id)


def test_convert_into_taken_dates_fails(services, repo, fleet, confirmed_request):
    first = confirmed_request(fleet["alice"].id, fleet["axia"].id, "2024-06-01", "2024-06-05")
    second = confirmed_request(fleet["alice"].id, fleet["axia"].id, "2024-06-05", "2024-06-08")
    services.bookings.convert_to_rental(first)

    with pytest.raises(VehicleUnavailable) as exc:
        services.bookings.convert_to_rental(second)

    assert len(exc.value.conflicts) == 1
    assert repo.get_booking_request(second).status == BookingStatus.CONFIRMED
    assert len(repo.list_rentals()) == 1


def test_withdraw_deletes_request(services, repo, fleet):
    req = services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    request_id = req.id
    services.bookings.withdraw(request_id, staff_id=2)

    assert repo.session.get(BookingRequest, request_id) is None
    with pytest.raises(NotFound):
        services.bookings.withdraw(request_id)


def test_list_by_status(services, fleet):
    a = services.bookings.submit(fleet["alice"].id, fleet["axia"].id, Interval.parse("2024-06-01", "2024-06-03"))
    services.bookings.submit(fleet["alice"].id, fleet["vios"].id, Interval.parse("2024-06-01", "2024-06-03"))
    services.bookings.decide(a.id, "confirmed", staff_id=1)

    assert [r.id for r in services.bookings.list_requests("confirmed")] == [a.id]
    assert len(services.bookings.list_requests()) == 2
    assert len(services.bookings.list_for_customer(fleet["alice"].id)) == 2
