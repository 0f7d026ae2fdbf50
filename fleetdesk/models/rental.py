from sqlalchemy import DDL, event

from ..utils.constants import RentalStatus
from ..utils.dates import utcnow, to_local_iso
from ..utils.intervals import Interval
from .db import db

# Message raised by the storage-level overlap guard; the repository maps it
# back to VehicleUnavailable.
OVERLAP_GUARD = "rental_overlap"


class Rental(db.Model):
    """
    Committed reservation/agreement for one vehicle over [start_date, end_date].
    Photos, payment proof and signature may be missing until handover.
    """
    __tablename__ = "rentals"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False, index=True)
    vehicle = db.Column(db.String(120), nullable=False, index=True)
    start_date = db.Column(db.Date, nullable=False)
    end_date = db.Column(db.Date, nullable=False)
    total_days = db.Column(db.Integer, nullable=False)
    status = db.Column(
        db.Enum(RentalStatus, native_enum=False, length=16,
                values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=RentalStatus.PENDING,
        index=True,
    )

    # pricing (staff supplied)
    rental_per_day = db.Column(db.Float, nullable=False, default=0.0)
    deposit = db.Column(db.Float, nullable=False, default=0.0)
    discount = db.Column(db.Float, nullable=False, default=0.0)
    grand_total = db.Column(db.Float, nullable=False, default=0.0)
    mileage_limit = db.Column(db.Integer, nullable=True)
    extra_mileage_charge = db.Column(db.Float, nullable=True)

    # handover condition
    current_mileage = db.Column(db.Integer, nullable=True)
    fuel_level = db.Column(db.Integer, nullable=True)
    color = db.Column(db.String(40), nullable=True)

    # opaque artifact references
    vehicle_photos = db.Column(db.JSON, nullable=True)
    payment_proof_url = db.Column(db.String(500), nullable=True)
    signature_url = db.Column(db.String(500), nullable=True)
    agreement_pdf_url = db.Column(db.String(500), nullable=True)

    booking_request_id = db.Column(db.Integer, nullable=True)
    cancel_reason = db.Column(db.String(500), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    completed_at = db.Column(db.DateTime, nullable=True)
    cancelled_at = db.Column(db.DateTime, nullable=True)

    customer = db.relationship("Customer", back_populates="rentals")

    @property
    def interval(self) -> Interval:
        return Interval(self.start_date, self.end_date)

    @property
    def incomplete(self) -> bool:
        """Proof of handover still missing (photos, payment proof or signature)."""
        return not (self.vehicle_photos and self.payment_proof_url and self.signature_url)

    def summary(self) -> dict:
        """Short form used in availability conflict lists."""
        return {
            "id": self.id,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "customerId": self.customer_id,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "customerId": self.customer_id,
            "vehicle": self.vehicle,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "totalDays": self.total_days,
            "status": self.status.value,
            "rentalPerDay": self.rental_per_day,
            "deposit": self.deposit,
            "discount": self.discount,
            "grandTotal": self.grand_total,
            "mileageLimit": self.mileage_limit,
            "extraMileageCharge": self.extra_mileage_charge,
            "currentMileage": self.current_mileage,
            "fuelLevel": self.fuel_level,
            "color": self.color,
            "vehiclePhotos": self.vehicle_photos or {},
            "paymentProofUrl": self.payment_proof_url,
            "signatureUrl": self.signature_url,
            "agreementPdfUrl": self.agreement_pdf_url,
            "bookingRequestId": self.booking_request_id,
            "cancelReason": self.cancel_reason,
            "incomplete": self.incomplete,
            "createdAt": to_local_iso(self.created_at),
            "completedAt": to_local_iso(self.completed_at),
            "cancelledAt": to_local_iso(self.cancelled_at),
        }

    def __repr__(self) -> str:
        return f"<Rental {self.id} {self.vehicle} {self.start_date}..{self.end_date} {self.status.value}>"


# Storage-level backstop for the non-overlap invariant. Strict comparison is
# the floor both changeover policies agree on; the inclusive rule is enforced
# by the application check inside the same transaction.
_overlap_trigger = DDL(f"""
CREATE TRIGGER IF NOT EXISTS rentals_no_overlap
BEFORE INSERT ON rentals
WHEN NEW.status != 'cancelled' AND EXISTS (
    SELECT 1 FROM rentals
    WHERE vehicle = NEW.vehicle
      AND status != 'cancelled'
      AND start_date < NEW.end_date
      AND NEW.start_date < end_date
)
BEGIN
    SELECT RAISE(ABORT, '{OVERLAP_GUARD}');
END
""")
event.listen(Rental.__table__, "after_create", _overlap_trigger.execute_if(dialect="sqlite"))
