from functools import wraps

from flask import request

from ..exceptions import ValidationError
from .constants import SQL_INT_MAX


def json_body(fn):
    """Parse the JSON object body and pass it as ``payload`` (empty dict if none)."""
    @wraps(fn)
    def wrapper(*args, **kwargs):
        payload = request.get_json(silent=True)
        if payload is None:
            if request.get_data(cache=True).strip():
                raise ValidationError("Error: request body must be valid JSON")
            payload = {}
        if not isinstance(payload, dict):
            raise ValidationError("Error: request body must be a JSON object")
        return fn(*args, payload=payload, **kwargs)

    return wrapper


def require_fields(payload: dict, *names):
    """Raise ValidationError naming every missing/blank field."""
    missing = [n for n in names if payload.get(n) in (None, "")]
    if missing:
        raise ValidationError(f"Error: missing required field(s): {', '.join(missing)}")


def optional_int(payload: dict, name: str):
    value = payload.get(name)
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        raise ValidationError(f"Error: '{name}' must be an integer")
    try:
        parsed = int(str(value).strip())
    except ValueError:
        raise ValidationError(f"Error: '{name}' must be an integer")
    if abs(parsed) > SQL_INT_MAX:
        raise ValidationError(f"Error: '{name}' is out of range")
    return parsed
