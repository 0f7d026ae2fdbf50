from .db import db
from .booking import BookingRequest
from .customer import Customer
from .rental import Rental
from .repository import RentalRepository
from .staff_log import StaffLog
from .vehicle import Vehicle

__all__ = [
    "db",
    "BookingRequest",
    "Customer",
    "Rental",
    "RentalRepository",
    "StaffLog",
    "Vehicle",
]
