from .db import db


class Vehicle(db.Model):
    """
    Fleet vehicle. Rentals reference vehicles by ``name``; the row itself is
    also the lock target that serializes bookings for one vehicle.
    """
    __tablename__ = "vehicles"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(120), nullable=False, unique=True, index=True)
    category = db.Column(db.String(40), nullable=False, default="car")
    mileage_limit = db.Column(db.Integer, nullable=False, default=300)  # km per day
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "mileageLimit": self.mileage_limit,
            "isActive": self.is_active,
        }

    def __repr__(self) -> str:
        return f"<Vehicle {self.name}>"
