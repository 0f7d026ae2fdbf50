from ..utils.constants import BookingStatus
from ..utils.dates import utcnow, to_local_iso
from ..utils.intervals import Interval
from .db import db


class BookingRequest(db.Model):
    """Unconfirmed customer intent for a vehicle over a date range."""
    __tablename__ = "booking_requests"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    vehicle_id = db.Column(db.Integer, db.ForeignKey("vehicles.id"), nullable=False)
    vehicle_name = db.Column(db.String(120), nullable=False)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    total_days = db.Column(db.Integer, nullable=False)
    customer_message = db.Column(db.Text, nullable=True)
    status = db.Column(
        db.Enum(BookingStatus, native_enum=False, length=16,
                values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )

    # audit
    confirmed_by_staff_id = db.Column(db.Integer, nullable=True)
    confirmed_at = db.Column(db.DateTime, nullable=True)
    rejected_reason = db.Column(db.String(500), nullable=True)
    rental_id = db.Column(db.Integer, nullable=True)

    # notification flags
    email_sent = db.Column(db.Boolean, nullable=False, default=False)
    whatsapp_sent = db.Column(db.Boolean, nullable=False, default=False)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    customer = db.relationship("Customer")

    @property
    def interval(self) -> Interval:
        return Interval(self.start_date, self.end_date)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "customerName": self.customer.full_name if self.customer else None,
            "vehicleId": self.vehicle_id,
            "vehicleName": self.vehicle_name,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "totalDays": self.total_days,
            "customerMessage": self.customer_message,
            "status": self.status.value,
            "confirmedByStaffId": self.confirmed_by_staff_id,
            "confirmedAt": to_local_iso(self.confirmed_at),
            "rejectedReason": self.rejected_reason,
            "rentalId": self.rental_id,
            "emailSent": self.email_sent,
            "whatsappSent": self.whatsapp_sent,
            "createdAt": to_local_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<BookingRequest {self.id} {self.vehicle_name} {self.status.value}>"
