from dataclasses import dataclass
from pathlib import Path

from flask import current_app

from ..models.repository import RentalRepository
from .availability_service import AvailabilityService
from .booking_service import BookingRequestService
from .calendar_service import CalendarService
from .collaborators import LocalDocumentStore, LogChannel, Notifier
from .rental_service import RentalService
from .customer_service import CustomerService

PRICING_KEYS = (
    "DEFAULT_DAILY_RATE",
    "DEFAULT_DEPOSIT_DAYS",
    "DEFAULT_MILEAGE_LIMIT",
    "DEFAULT_EXTRA_MILEAGE_CHARGE",
)


@dataclass
class Services:
    repo: RentalRepository
    availability: AvailabilityService
    bookings: BookingRequestService
    rentals: RentalService
    calendar: CalendarService
    customers: CustomerService


def build_services(config, session, documents=None, notifier=None) -> Services:
    """Wire one repository into every service; collaborators default from config."""
    repo = RentalRepository(session)
    if documents is None:
        documents = LocalDocumentStore(Path(config["DOCUMENT_DIR"]))
    if notifier is None:
        notifier = Notifier({name: LogChannel(name) for name in config.get("NOTIFICATION_CHANNELS", ())})
    pricing = {k: config.get(k) for k in PRICING_KEYS}

    availability = AvailabilityService(repo, allow_same_day_changeover=bool(config.get("ALLOW_SAME_DAY_CHANGEOVER")))
    return Services(
        repo=repo,
        availability=availability,
        bookings=BookingRequestService(repo, availability, notifier, pricing),
        rentals=RentalService(repo, availability, documents, notifier, pricing),
        calendar=CalendarService(repo, availability),
        customers=CustomerService(repo),
    )


def current_services() -> Services:
    """Services bound to the running app."""
    return current_app.extensions["fleetdesk"]


__all__ = [
    "Services",
    "build_services",
    "current_services",
    "AvailabilityService",
    "BookingRequestService",
    "RentalService",
    "CalendarService",
    "CustomerService",
]
