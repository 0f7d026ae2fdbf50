"""Booking request lifecycle: submit, decide, convert into a rental, withdraw."""

from __future__ import annotations

import logging

from ..exceptions import NotFound, InvalidTransition, ValidationError, VehicleUnavailable, CustomerNotFound
from ..utils.constants import (
    BookingStatus,
    RentalStatus,
    BOOKING_TRANSITIONS,
    DECISION_OUTCOMES,
    Event,
    StaffAction,
)
from ..utils.dates import utcnow
from ..utils.intervals import Interval
from .common import Pricing, require_active_customer

logger = logging.getLogger(__name__)


def parse_booking_status(value) -> BookingStatus:
    try:
        return BookingStatus(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Error: unknown booking status '{value}'")


class BookingRequestService:
    """
    State machine for customer booking requests:
        pending -> confirmed | rejected
        confirmed -> completed (converted into a rental)
    rejected and completed are terminal.
    """

    def __init__(self, repo, availability, notifier, pricing_defaults: dict | None = None):
        self.repo = repo
        self.availability = availability
        self.notifier = notifier
        self.pricing_defaults = dict(pricing_defaults or {})

    # --------------- helpers ---------------
    def _get(self, request_id):
        req = self.repo.get_booking_request(request_id)
        if req is None:
            raise NotFound(f"Error: booking request '{request_id}' not found")
        return req

    @staticmethod
    def _check_transition(current: BookingStatus, target: BookingStatus) -> None:
        if target not in BOOKING_TRANSITIONS[current]:
            raise InvalidTransition(current=current, target=target)

    def _notify(self, req, event: str) -> None:
        """Deliver an event to the customer and remember which channels got through."""
        delivered = self.notifier.notify(req.customer, event, booking_request=req)
        updates = {}
        if delivered.get("email") and not req.email_sent:
            updates["email_sent"] = True
        if delivered.get("whatsapp") and not req.whatsapp_sent:
            updates["whatsapp_sent"] = True
        if updates:
            with self.repo.atomic():
                self.repo.update_booking_request(req, **updates)

    # --------------- queries ---------------
    def get(self, request_id):
        return self._get(request_id)

    def list_requests(self, status=None) -> list:
        st = parse_booking_status(status) if status else None
        return self.repo.list_booking_requests(status=st)

    def list_for_customer(self, customer_id) -> list:
        if self.repo.get_customer(customer_id) is None:
            raise CustomerNotFound(f"Error: customer with ID '{customer_id}' not found")
        return self.repo.list_booking_requests(customer_id=customer_id)

    # --------------- commands ---------------
    def submit(self, customer_id, vehicle_id, interval: Interval, message: str | None = None,
               vehicle_name: str | None = None):
        """
        Record a pending request. Availability is advisory here: staff keep the
        final say (they may offer a substitute vehicle), so overlaps are only
        enforced at conversion time.
        """
        interval.require_span()
        total_days = interval.total_days

        with self.repo.atomic():
            require_active_customer(self.repo, customer_id)
            vehicle = self.availability.resolve_vehicle(vehicle_id)
            if vehicle_name and vehicle_name.strip() != vehicle.name:
                logger.info("Booking request names '%s' for vehicle %s; using '%s'",
                            vehicle_name, vehicle.id, vehicle.name)
            req = self.repo.add_booking_request(
                customer_id=customer_id,
                vehicle_id=vehicle.id,
                vehicle_name=vehicle.name,
                start_date=interval.start,
                end_date=interval.end,
                total_days=total_days,
                customer_message=(message or "").strip() or None,
                status=BookingStatus.PENDING,
            )

        logger.info("Booking request %s submitted: customer %s, %s %s",
                    req.id, customer_id, req.vehicle_name, interval)
        self._notify(req, Event.BOOKING_RECEIVED)
        return req

    def decide(self, request_id, outcome, staff_id, reason: str | None = None):
        """Confirm or reject a pending request. Rejection requires a reason."""
        target = parse_booking_status(outcome)
        if target not in DECISION_OUTCOMES:
            raise ValidationError("Error: status must be 'confirmed' or 'rejected'")
        reason = (reason or "").strip() or None
        if target == BookingStatus.REJECTED and not reason:
            raise ValidationError("Error: a reason is required to reject a booking request")

        with self.repo.atomic():
            req = self._get(request_id)
            self._check_transition(req.status, target)
            if target == BookingStatus.CONFIRMED:
                self.repo.update_booking_request(
                    req, status=target, confirmed_by_staff_id=staff_id, confirmed_at=utcnow()
                )
                action = StaffAction.BOOKING_CONFIRMED
            else:
                self.repo.update_booking_request(req, status=target, rejected_reason=reason)
                action = StaffAction.BOOKING_REJECTED
            self.repo.log_staff_action(staff_id, action, "booking_request", req.id,
                                       {"vehicle": req.vehicle_name, "reason": reason})

        logger.info("Booking request %s %s by staff %s", req.id, target.value, staff_id)
        event = Event.BOOKING_CONFIRMED if target == BookingStatus.CONFIRMED else Event.BOOKING_REJECTED
        self._notify(req, event)
        return req

    def convert_to_rental(self, request_id, pricing: Pricing | None = None, staff_id=None):
        """
        Turn a confirmed request into a pending rental. The availability check
        and the insert run in one transaction holding the vehicle lock, so two
        conversions racing for the same dates cannot both succeed.
        """
        pricing = pricing or Pricing()
        with self.repo.atomic():
            req = self._get(request_id)
            self._check_transition(req.status, BookingStatus.COMPLETED)

            vehicle = self.repo.lock_vehicle(req.vehicle_name)
            if vehicle is None:
                vehicle = self.availability.resolve_vehicle(req.vehicle_id)
                self.repo.lock_vehicle(vehicle.name)

            interval = req.interval
            result = self.availability.check_availability(vehicle, interval)
            if not result.available:
                raise VehicleUnavailable(
                    f"Error: {vehicle.name} is no longer available for {interval}",
                    conflicts=result.conflict_summaries(),
                )

            if self.repo.get_customer(req.customer_id) is None:
                raise CustomerNotFound(f"Error: customer with ID '{req.customer_id}' not found")

            rental = self.repo.add_rental(
                customer_id=req.customer_id,
                vehicle=vehicle.name,
                start_date=interval.start,
                end_date=interval.end,
                total_days=req.total_days,
                status=RentalStatus.PENDING,
                booking_request_id=req.id,
                **pricing.columns(req.total_days, self.pricing_defaults, vehicle),
            )
            self.repo.update_booking_request(req, status=BookingStatus.COMPLETED, rental_id=rental.id)
            self.repo.log_staff_action(staff_id, StaffAction.BOOKING_CONVERTED, "booking_request", req.id,
                                       {"rentalId": rental.id, "vehicle": vehicle.name})

        logger.info("Booking request %s converted to rental %s", request_id, rental.id)
        return rental

    def withdraw(self, request_id, staff_id=None) -> None:
        """Hard-delete a request in any status (staff cleanup)."""
        with self.repo.atomic():
            req = self._get(request_id)
            if req.status == BookingStatus.COMPLETED:
                logger.warning("Deleting converted booking request %s (rental %s stays)", req.id, req.rental_id)
            self.repo.log_staff_action(staff_id, StaffAction.BOOKING_DELETED, "booking_request", req.id,
                                       {"status": req.status.value, "vehicle": req.vehicle_name})
            self.repo.delete_booking_request(req)
        logger.info("Booking request %s deleted", request_id)
