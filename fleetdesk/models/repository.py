"""
Persistence boundary for rentals, booking requests and the staff audit log.

The repository is the only writer of these rows. Writes are grouped in
``atomic()`` units: one transaction that commits on success, rolls back on
any error and normalizes storage failures into the domain error kinds.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager

from sqlalchemy import select
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)

from ..exceptions import VehicleUnavailable, StorageUnavailable
from ..utils.constants import RentalStatus, BookingStatus, CustomerStatus, SQL_INT_MAX
from ..utils.intervals import Interval, overlaps
from .booking import BookingRequest
from .customer import Customer
from .rental import Rental, OVERLAP_GUARD
from .staff_log import StaffLog
from .vehicle import Vehicle

logger = logging.getLogger(__name__)

# Driver/pool failures that mean "storage unreachable or too slow"
STORAGE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


class RentalRepository:
    def __init__(self, session):
        self.session = session

    # ---------- Transactions ----------
    @contextmanager
    def atomic(self):
        """
        Run the enclosed reads and writes as one transaction.
        - overlap guard violation -> VehicleUnavailable
        - connectivity / lock timeout -> StorageUnavailable
        """
        session = self.session
        try:
            yield session
            session.commit()
        except IntegrityError as exc:
            session.rollback()
            if OVERLAP_GUARD in str(exc.orig):
                logger.warning("Overlap guard rejected rental insert: %s", exc.orig)
                raise VehicleUnavailable() from exc
            raise
        except STORAGE_ERRORS as exc:
            session.rollback()
            logger.error("Storage failure, transaction rolled back: %s", exc)
            raise StorageUnavailable() from exc
        except Exception:
            session.rollback()
            raise

    def lock_vehicle(self, name: str) -> Vehicle | None:
        """Take the row lock that serializes bookings for one vehicle."""
        stmt = select(Vehicle).where(Vehicle.name == name).with_for_update()
        return self.session.execute(stmt).scalar_one_or_none()

    # ---------- Vehicles ----------
    def get_vehicle(self, vehicle_id: int) -> Vehicle | None:
        return self.session.get(Vehicle, vehicle_id)

    def find_vehicle(self, ref) -> Vehicle | None:
        """Resolve a vehicle by numeric id or by name."""
        if ref is None:
            return None
        if isinstance(ref, int) or (isinstance(ref, str) and ref.strip().isdecimal()):
            if int(ref) > SQL_INT_MAX:
                return None
            found = self.get_vehicle(int(ref))
            if found is not None:
                return found
        name = str(ref).strip()
        return self.session.execute(select(Vehicle).where(Vehicle.name == name)).scalar_one_or_none()

    def add_vehicle(self, name: str, category: str = "car", mileage_limit: int = 300,
                    is_active: bool = True) -> Vehicle:
        vehicle = Vehicle(name=name.strip(), category=category, mileage_limit=mileage_limit,
                          is_active=is_active)
        self.session.add(vehicle)
        self.session.flush()
        return vehicle

    def list_vehicles(self, active_only: bool = False) -> list[Vehicle]:
        stmt = select(Vehicle).order_by(Vehicle.name)
        if active_only:
            stmt = stmt.where(Vehicle.is_active.is_(True))
        return list(self.session.execute(stmt).scalars())

    # ---------- Customers ----------
    def get_customer(self, customer_id: int) -> Customer | None:
        return self.session.get(Customer, customer_id)

    def find_customer_by_email(self, email: str) -> Customer | None:
        stmt = select(Customer).where(Customer.email == (email or "").strip().lower())
        return self.session.execute(stmt).scalar_one_or_none()

    def add_customer(self, full_name: str, email: str, phone: str | None = None,
                     status: CustomerStatus = CustomerStatus.ACTIVE) -> Customer:
        customer = Customer(full_name=full_name.strip(), email=email.strip().lower(),
                            phone=phone, status=status)
        self.session.add(customer)
        self.session.flush()
        return customer

    def set_customer_status(self, customer: Customer, status: CustomerStatus) -> Customer:
        customer.status = status
        self.session.flush()
        return customer

    # ---------- Rentals ----------
    def get_rental(self, rental_id: int) -> Rental | None:
        return self.session.get(Rental, rental_id)

    def list_rentals(self, customer_id: int | None = None) -> list[Rental]:
        stmt = select(Rental).order_by(Rental.created_at.desc(), Rental.id.desc())
        if customer_id is not None:
            stmt = stmt.where(Rental.customer_id == customer_id)
        return list(self.session.execute(stmt).scalars())

    def active_rentals(self, vehicle: str, exclude_id: int | None = None) -> list[Rental]:
        """Non-cancelled rentals for one vehicle, ascending by start date."""
        stmt = (
            select(Rental)
            .where(Rental.vehicle == vehicle, Rental.status != RentalStatus.CANCELLED)
            .order_by(Rental.start_date, Rental.id)
        )
        if exclude_id is not None:
            stmt = stmt.where(Rental.id != exclude_id)
        return list(self.session.execute(stmt).scalars())

    def rentals_in_window(self, window: Interval | None = None, vehicle: str | None = None) -> list[Rental]:
        """Non-cancelled rentals intersecting the closed window (all time when None)."""
        stmt = select(Rental).where(Rental.status != RentalStatus.CANCELLED)
        if vehicle is not None:
            stmt = stmt.where(Rental.vehicle == vehicle)
        if window is not None:
            stmt = stmt.where(Rental.start_date <= window.end, Rental.end_date >= window.start)
        stmt = stmt.order_by(Rental.start_date, Rental.id)
        return list(self.session.execute(stmt).scalars())

    def calendar_rows(self, window: Interval | None = None, vehicle: str | None = None):
        """Rentals intersecting the window joined with the renter's name."""
        stmt = (
            select(Rental, Customer.full_name)
            .join(Customer, Customer.id == Rental.customer_id)
            .where(Rental.status != RentalStatus.CANCELLED)
        )
        if vehicle is not None:
            stmt = stmt.where(Rental.vehicle == vehicle)
        if window is not None:
            stmt = stmt.where(Rental.start_date <= window.end, Rental.end_date >= window.start)
        stmt = stmt.order_by(Rental.start_date, Rental.id)
        return list(self.session.execute(stmt).all())

    def add_rental(self, **fields) -> Rental:
        """Insert a rental; the flush assigns its id and fires the overlap guard."""
        rental = Rental(**fields)
        self.session.add(rental)
        try:
            self.session.flush()
        except IntegrityError as exc:
            if OVERLAP_GUARD not in str(exc.orig):
                raise
            self.session.rollback()
            raise self._overlap_error(fields) from exc
        return rental

    def _overlap_error(self, fields: dict) -> VehicleUnavailable:
        """Rebuild the conflict list for an insert the storage guard refused."""
        interval = Interval(fields["start_date"], fields["end_date"])
        conflicts = [
            r.summary() for r in self.active_rentals(fields["vehicle"])
            if overlaps(interval, r.interval, allow_same_day_changeover=True)
        ]
        logger.warning("Overlap guard rejected %s %s: %d conflict(s)", fields["vehicle"], interval, len(conflicts))
        return VehicleUnavailable(f"Error: {fields['vehicle']} is already booked for {interval}", conflicts=conflicts)

    def update_rental(self, rental: Rental, **updates) -> Rental:
        for key, value in updates.items():
            setattr(rental, key, value)
        self.session.flush()
        return rental

    def delete_rental(self, rental: Rental) -> None:
        self.session.delete(rental)
        self.session.flush()

    # ---------- Booking requests ----------
    def get_booking_request(self, request_id: int) -> BookingRequest | None:
        return self.session.get(BookingRequest, request_id)

    def list_booking_requests(self, status: BookingStatus | None = None,
                              customer_id: int | None = None) -> list[BookingRequest]:
        stmt = select(BookingRequest).order_by(BookingRequest.created_at.desc(), BookingRequest.id.desc())
        if status is not None:
            stmt = stmt.where(BookingRequest.status == status)
        if customer_id is not None:
            stmt = stmt.where(BookingRequest.customer_id == customer_id)
        return list(self.session.execute(stmt).scalars())

    def add_booking_request(self, **fields) -> BookingRequest:
        req = BookingRequest(**fields)
        self.session.add(req)
        self.session.flush()
        return req

    def update_booking_request(self, req: BookingRequest, **updates) -> BookingRequest:
        for key, value in updates.items():
            setattr(req, key, value)
        self.session.flush()
        return req

    def delete_booking_request(self, req: BookingRequest) -> None:
        self.session.delete(req)
        self.session.flush()

    # ---------- Staff audit log ----------
    def log_staff_action(self, staff_id, action: str, target_type: str, target_id: int,
                         details: dict | None = None) -> StaffLog:
        entry = StaffLog(staff_id=staff_id, action=action, target_type=target_type,
                         target_id=target_id, details=details or {})
        self.session.add(entry)
        self.session.flush()
        return entry

    def list_staff_logs(self, staff_id: int | None = None) -> list[StaffLog]:
        stmt = select(StaffLog).order_by(StaffLog.created_at.desc(), StaffLog.id.desc())
        if staff_id is not None:
            stmt = stmt.where(StaffLog.staff_id == staff_id)
        return list(self.session.execute(stmt).scalars())
