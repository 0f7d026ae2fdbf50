from flask import Blueprint, jsonify, request

from ..services import current_services
from ..services.common import require_int
from ..utils.decorators import json_body, require_fields, optional_int

bp = Blueprint("staff", __name__)


@bp.get("/calendar")
def calendar():
    """Fleet (or ?vehicle=) bookings for ?month&year with customer names."""
    rows = current_services().calendar.bookings(
        month=request.args.get("month"),
        year=request.args.get("year"),
        vehicle=request.args.get("vehicle") or None,
    )
    return jsonify(rows)


@bp.patch("/customers/<int:customer_id>/status")
@json_body
def set_customer_status(customer_id, payload):
    """Blacklist or reinstate a customer."""
    require_fields(payload, "status")
    customer = current_services().customers.set_status(
        customer_id, payload["status"], staff_id=optional_int(payload, "staffId")
    )
    return jsonify(customer.to_dict())


@bp.get("/staff/logs")
def staff_logs():
    staff_id = request.args.get("staffId")
    if staff_id:
        staff_id = require_int(staff_id, "staffId")
    logs = current_services().repo.list_staff_logs(staff_id=staff_id or None)
    return jsonify([entry.to_dict() for entry in logs])
