"""Rental lifecycle: create, complete (handover), cancel, delete."""

from __future__ import annotations

import logging

from ..exceptions import NotFound, InvalidTransition, VehicleUnavailable, CustomerNotFound
from ..utils.constants import RentalStatus, RENTAL_TRANSITIONS, Event, StaffAction
from ..utils.dates import utcnow
from ..utils.intervals import Interval
from .common import Pricing, Artifacts, Handover, require_active_customer

logger = logging.getLogger(__name__)


class RentalService:
    """
    State machine for rentals:
        pending -> completed | cancelled
    Both end states are terminal; any rental may still be hard-deleted.
    """

    def __init__(self, repo, availability, documents, notifier, pricing_defaults: dict | None = None):
        self.repo = repo
        self.availability = availability
        self.documents = documents
        self.notifier = notifier
        self.pricing_defaults = dict(pricing_defaults or {})

    def _get(self, rental_id):
        rental = self.repo.get_rental(rental_id)
        if rental is None:
            raise NotFound(f"Error: rental '{rental_id}' not found")
        return rental

    @staticmethod
    def _check_transition(current: RentalStatus, target: RentalStatus) -> None:
        if target not in RENTAL_TRANSITIONS[current]:
            raise InvalidTransition(current=current, target=target)

    # --------------- queries ---------------
    def get(self, rental_id):
        return self._get(rental_id)

    def list_rentals(self, customer_id=None) -> list:
        return self.repo.list_rentals(customer_id=customer_id)

    # --------------- commands ---------------
    def create(self, customer_id, vehicle, interval: Interval, pricing: Pricing | None = None,
               artifacts: Artifacts | None = None):
        """
        Self-service rental creation. Photos, payment proof and signature are
        optional here; a rental with missing proof is flagged ``incomplete``.
        Availability is re-checked under the vehicle lock before the insert.
        """
        interval.require_span()
        pricing = pricing or Pricing()
        artifacts = artifacts or Artifacts()

        with self.repo.atomic():
            require_active_customer(self.repo, customer_id)
            v = self.availability.resolve_vehicle(vehicle)
            self.repo.lock_vehicle(v.name)

            result = self.availability.check_availability(v, interval)
            if not result.available:
                raise VehicleUnavailable(
                    f"Error: {v.name} is already booked for {interval}",
                    conflicts=result.conflict_summaries(),
                )

            rental = self.repo.add_rental(
                customer_id=customer_id,
                vehicle=v.name,
                start_date=interval.start,
                end_date=interval.end,
                total_days=interval.total_days,
                status=RentalStatus.PENDING,
                **pricing.columns(interval.total_days, self.pricing_defaults, v),
                **artifacts.provided(),
            )

        logger.info("Rental %s created: customer %s, %s %s", rental.id, customer_id, rental.vehicle, interval)
        return rental

    def complete(self, rental_id, handover: Handover | None = None, staff_id=None):
        """Record handover data, mark completed, then issue the signed agreement."""
        handover = handover or Handover()
        with self.repo.atomic():
            rental = self._get(rental_id)
            self._check_transition(rental.status, RentalStatus.COMPLETED)
            self.repo.update_rental(
                rental,
                status=RentalStatus.COMPLETED,
                completed_at=utcnow(),
                **handover.columns(),
            )
            self.repo.log_staff_action(staff_id, StaffAction.RENTAL_COMPLETED, "rental", rental.id,
                                       {"vehicle": rental.vehicle, "customer": rental.customer_id})

        logger.info("Rental %s completed", rental.id)
        self._deliver_agreement(rental)
        return rental

    def cancel(self, rental_id, reason: str | None = None, staff_id=None):
        """Cancel a pending rental; its dates stop counting in overlap checks."""
        reason = (reason or "").strip() or None
        with self.repo.atomic():
            rental = self._get(rental_id)
            self._check_transition(rental.status, RentalStatus.CANCELLED)
            self.repo.update_rental(
                rental,
                status=RentalStatus.CANCELLED,
                cancelled_at=utcnow(),
                cancel_reason=reason,
            )
            self.repo.log_staff_action(staff_id, StaffAction.RENTAL_CANCELLED, "rental", rental.id,
                                       {"vehicle": rental.vehicle, "customer": rental.customer_id,
                                        "reason": reason or "Cancelled by staff"})

        logger.info("Rental %s cancelled (%s)", rental.id, reason or "no reason given")
        return rental

    def delete(self, rental_id, staff_id=None) -> None:
        """Hard delete in any status, including the generated agreement."""
        with self.repo.atomic():
            rental = self._get(rental_id)
            document = rental.agreement_pdf_url
            self.repo.log_staff_action(staff_id, StaffAction.RENTAL_DELETED, "rental", rental.id,
                                       {"vehicle": rental.vehicle, "customer": rental.customer_id,
                                        "status": rental.status.value})
            self.repo.delete_rental(rental)

        logger.info("Rental %s deleted", rental_id)
        if document:
            try:
                self.documents.remove(document)
            except OSError:
                logger.exception("Could not remove agreement %s for deleted rental %s", document, rental_id)

    def regenerate_agreement(self, rental_id):
        rental = self._get(rental_id)
        if rental.customer is None:
            raise CustomerNotFound(f"Error: customer with ID '{rental.customer_id}' not found")
        self._deliver_agreement(rental)
        return rental

    # --------------- collaborators ---------------
    def _deliver_agreement(self, rental) -> None:
        """
        Generate the agreement and notify the customer. Failures here are
        logged; the rental's state is already committed.
        """
        customer = rental.customer
        try:
            ref = self.documents.generate_agreement(rental, customer)
        except Exception:
            logger.exception("Agreement generation failed for rental %s", rental.id)
            return
        if ref:
            with self.repo.atomic():
                self.repo.update_rental(rental, agreement_pdf_url=ref)
        delivered = self.notifier.notify(customer, Event.RENTAL_COMPLETED, rental=rental, document=ref)
        logger.info("Agreement for rental %s delivered via %s", rental.id,
                    [name for name, ok in delivered.items() if ok] or "no channel")
