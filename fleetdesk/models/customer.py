from ..utils.constants import CustomerStatus
from ..utils.dates import utcnow, to_local_iso
from .db import db


class Customer(db.Model):
    """
    Registered renter. Only identity and standing matter to the booking core;
    documents collected at registration live with the registration service.
    """
    __tablename__ = "customers"

    id = db.Column(db.Integer, primary_key=True)
    full_name = db.Column(db.String(160), nullable=False)
    email = db.Column(db.String(160), nullable=False, unique=True, index=True)
    phone = db.Column(db.String(40), nullable=True)
    status = db.Column(
        db.Enum(CustomerStatus, native_enum=False, length=16,
                values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=CustomerStatus.ACTIVE,
    )
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    rentals = db.relationship("Rental", back_populates="customer")

    @property
    def is_blacklisted(self) -> bool:
        return self.status == CustomerStatus.BLACKLISTED

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "fullName": self.full_name,
            "email": self.email,
            "phone": self.phone,
            "status": self.status.value,
            "createdAt": to_local_iso(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<Customer {self.email}>"
