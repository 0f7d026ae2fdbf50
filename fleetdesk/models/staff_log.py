from ..utils.dates import utcnow, to_local_iso
from .db import db


class StaffLog(db.Model):
    """Audit trail of staff actions on requests, rentals and customers."""
    __tablename__ = "staff_logs"

    id = db.Column(db.Integer, primary_key=True)
    staff_id = db.Column(db.Integer, nullable=True, index=True)
    action = db.Column(db.String(40), nullable=False)
    target_type = db.Column(db.String(24), nullable=False)
    target_id = db.Column(db.Integer, nullable=False)
    details = db.Column(db.JSON, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staffId": self.staff_id,
            "action": self.action,
            "targetType": self.target_type,
            "targetId": self.target_id,
            "details": self.details or {},
            "createdAt": to_local_iso(self.created_at),
        }
