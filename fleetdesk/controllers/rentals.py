from flask import Blueprint, jsonify, request

from ..services import current_services
from ..services.common import Pricing, Artifacts, Handover, require_int
from ..utils.decorators import json_body, require_fields, optional_int
from ..utils.intervals import Interval

bp = Blueprint("rentals", __name__, url_prefix="/rentals")


@bp.post("/availability")
@json_body
def check_availability(payload):
    """Staff check by vehicle name, optionally ignoring the rental being edited."""
    require_fields(payload, "vehicle")
    interval = Interval.parse(payload.get("startDate"), payload.get("endDate"))
    result = current_services().availability.check_availability(
        payload["vehicle"],
        interval,
        exclude_rental_id=optional_int(payload, "excludeRentalId"),
    )
    return jsonify(result.to_dict())


@bp.post("")
@json_body
def create_rental(payload):
    """Self-service rental; photos/payment proof/signature may come later."""
    require_fields(payload, "customerId", "vehicle")
    interval = Interval.parse(payload.get("startDate"), payload.get("endDate"))
    rental = current_services().rentals.create(
        customer_id=require_int(payload["customerId"], "customerId"),
        vehicle=payload["vehicle"],
        interval=interval,
        pricing=Pricing.from_payload(payload),
        artifacts=Artifacts.from_payload(payload),
    )
    return jsonify(rental.to_dict()), 201


@bp.get("")
def list_rentals():
    customer_id = request.args.get("customerId")
    if customer_id:
        customer_id = require_int(customer_id, "customerId")
    rentals = current_services().rentals.list_rentals(customer_id=customer_id or None)
    return jsonify([r.to_dict() for r in rentals])


@bp.get("/<int:rental_id>")
def get_rental(rental_id):
    return jsonify(current_services().rentals.get(rental_id).to_dict())


@bp.patch("/<int:rental_id>/complete")
@json_body
def complete_rental(rental_id, payload):
    """Staff handover: condition, final pricing and artifact references."""
    rental = current_services().rentals.complete(
        rental_id,
        Handover.from_payload(payload),
        staff_id=optional_int(payload, "staffId"),
    )
    return jsonify(rental.to_dict())


@bp.patch("/<int:rental_id>/cancel")
@json_body
def cancel_rental(rental_id, payload):
    rental = current_services().rentals.cancel(
        rental_id,
        reason=payload.get("reason"),
        staff_id=optional_int(payload, "staffId"),
    )
    return jsonify(rental.to_dict())


@bp.post("/<int:rental_id>/agreement")
def regenerate_agreement(rental_id):
    rental = current_services().rentals.regenerate_agreement(rental_id)
    return jsonify(rental.to_dict())


@bp.delete("/<int:rental_id>")
@json_body
def delete_rental(rental_id, payload):
    current_services().rentals.delete(rental_id, staff_id=optional_int(payload, "staffId"))
    return jsonify({"message": "Rental deleted", "id": rental_id})
