from flask import Blueprint, jsonify, request

from ..services import current_services
from ..utils.decorators import json_body
from ..utils.intervals import Interval

bp = Blueprint("vehicles", __name__, url_prefix="/vehicles")


@bp.get("")
def list_vehicles():
    """Active vehicles customers can book (?all=1 includes inactive ones)."""
    active_only = request.args.get("all") not in ("1", "true")
    vehicles = current_services().repo.list_vehicles(active_only=active_only)
    return jsonify([v.to_dict() for v in vehicles])


@bp.post("/<vehicle_id>/availability")
@json_body
def check_vehicle_availability(vehicle_id, payload):
    """Advisory check shown to customers before they submit a request."""
    interval = Interval.parse(payload.get("startDate"), payload.get("endDate"))
    result = current_services().availability.check_availability(vehicle_id, interval)
    return jsonify(result.to_dict())


@bp.get("/<vehicle>/schedule")
def vehicle_schedule(vehicle):
    """Non-cancelled rentals of one vehicle, optionally restricted to ?month&year."""
    rentals = current_services().availability.get_schedule(
        vehicle,
        month=request.args.get("month"),
        year=request.args.get("year"),
    )
    return jsonify([r.to_dict() for r in rentals])
