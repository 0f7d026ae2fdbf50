# fleetdesk/utils/constants.py

"""
Global constants for statuses, state-machine transitions and event names.
These constants are imported by models, services and controllers.
"""

import enum


class RentalStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    # Terminal "converted into a rental" marker.
    COMPLETED = "completed"


class CustomerStatus(str, enum.Enum):
    ACTIVE = "active"
    BLACKLISTED = "blacklisted"


RENTAL_TRANSITIONS = {
    RentalStatus.PENDING: {RentalStatus.COMPLETED, RentalStatus.CANCELLED},
    RentalStatus.COMPLETED: set(),
    RentalStatus.CANCELLED: set(),
}

BOOKING_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.REJECTED},
    BookingStatus.CONFIRMED: {BookingStatus.COMPLETED},
    BookingStatus.REJECTED: set(),
    BookingStatus.COMPLETED: set(),
}

# Outcomes staff may pick when deciding a pending request
DECISION_OUTCOMES = {BookingStatus.CONFIRMED, BookingStatus.REJECTED}


class Event:
    BOOKING_RECEIVED = "booking_request_received"
    BOOKING_CONFIRMED = "booking_confirmed"
    BOOKING_REJECTED = "booking_rejected"
    RENTAL_COMPLETED = "rental_completed"


class StaffAction:
    BOOKING_CONFIRMED = "BOOKING_CONFIRMED"
    BOOKING_REJECTED = "BOOKING_REJECTED"
    BOOKING_CONVERTED = "BOOKING_CONVERTED"
    BOOKING_DELETED = "BOOKING_DELETED"
    RENTAL_COMPLETED = "RENTAL_COMPLETED"
    RENTAL_CANCELLED = "RENTAL_CANCELLED"
    RENTAL_DELETED = "RENTAL_DELETED"
    CUSTOMER_STATUS_CHANGED = "CUSTOMER_STATUS_CHANGED"


# --- Misc ---
# Photo slots captured at handover, in upload order
PHOTO_SLOTS = ("frontWithCustomer", "front", "back", "left", "right", "interiorMileage", "knownDamage")
FUEL_LEVELS = range(0, 5)
# Largest id or count a SQL INTEGER column holds
SQL_INT_MAX = 2 ** 63 - 1
