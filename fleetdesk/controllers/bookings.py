from flask import Blueprint, jsonify, request

from ..services import current_services
from ..services.common import Pricing, require_int
from ..utils.decorators import json_body, require_fields, optional_int
from ..utils.intervals import Interval

bp = Blueprint("bookings", __name__)


@bp.post("/booking-requests")
@json_body
def submit_booking_request(payload):
    """Customer intake. Dates are validated before anything is stored."""
    require_fields(payload, "customerId", "vehicleId")
    interval = Interval.parse(payload.get("startDate"), payload.get("endDate"))
    req = current_services().bookings.submit(
        customer_id=require_int(payload["customerId"], "customerId"),
        vehicle_id=require_int(payload["vehicleId"], "vehicleId"),
        interval=interval,
        message=payload.get("customerMessage"),
        vehicle_name=payload.get("vehicleName"),
    )
    return jsonify(req.to_dict()), 201


@bp.get("/booking-requests")
def list_booking_requests():
    reqs = current_services().bookings.list_requests(status=request.args.get("status"))
    return jsonify([r.to_dict() for r in reqs])


@bp.get("/booking-requests/<int:request_id>")
def get_booking_request(request_id):
    return jsonify(current_services().bookings.get(request_id).to_dict())


@bp.get("/customers/<int:customer_id>/booking-requests")
def customer_booking_requests(customer_id):
    reqs = current_services().bookings.list_for_customer(customer_id)
    return jsonify([r.to_dict() for r in reqs])


@bp.patch("/booking-requests/<int:request_id>/status")
@json_body
def decide_booking_request(request_id, payload):
    """Staff decision: {status: confirmed|rejected, staffId, reason?}."""
    require_fields(payload, "status", "staffId")
    req = current_services().bookings.decide(
        request_id,
        payload["status"],
        staff_id=require_int(payload["staffId"], "staffId"),
        reason=payload.get("reason"),
    )
    return jsonify(req.to_dict())


@bp.post("/booking-requests/<int:request_id>/convert")
@json_body
def convert_booking_request(request_id, payload):
    """Turn a confirmed request into a pending rental (409 if the dates were taken)."""
    rental = current_services().bookings.convert_to_rental(
        request_id,
        Pricing.from_payload(payload),
        staff_id=optional_int(payload, "staffId"),
    )
    return jsonify(rental.to_dict()), 201


@bp.delete("/booking-requests/<int:request_id>")
@json_body
def withdraw_booking_request(request_id, payload):
    current_services().bookings.withdraw(request_id, staff_id=optional_int(payload, "staffId"))
    return jsonify({"message": "Booking request deleted", "id": request_id})
