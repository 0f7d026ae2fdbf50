from flask import Blueprint, jsonify

from ..services import current_services
from ..utils.decorators import json_body, require_fields

bp = Blueprint("auth", __name__, url_prefix="/customers")


@bp.post("/login")
@json_body
def customer_login(payload):
    """Email login for the customer portal; suspended accounts get 403."""
    require_fields(payload, "email")
    customer = current_services().customers.login(payload["email"])
    return jsonify(customer.to_dict())
