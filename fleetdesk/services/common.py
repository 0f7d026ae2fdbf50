"""Shared service helpers: payload coercion, pricing and handover inputs."""

import math
import re
from dataclasses import dataclass, field, fields
from typing import Optional

from ..exceptions import ValidationError, CustomerNotFound, CustomerBlacklisted
from ..utils.constants import PHOTO_SLOTS, FUEL_LEVELS, SQL_INT_MAX
from ..utils.intervals import Interval, month_window


# -------- number helpers --------
_LEADING_INT = re.compile(r"\s*([-+]?\d+)")


def round2(x: float) -> float:
    return round(float(x), 2)


def to_float_safe(value) -> Optional[float]:
    """Safely convert to float; return None if invalid."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def to_int_safe(value) -> Optional[int]:
    """Safely convert to int; accepts '12', 12.0 and '170 KM'-style strings (leading number only)."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        return int(m.group(1)) if m else None
    return None


def require_int(value, name: str) -> int:
    """Parse an id-like field or raise ValidationError (must fit a SQL INTEGER)."""
    if isinstance(value, bool):
        raise ValidationError(f"Error: '{name}' must be an integer")
    try:
        parsed = int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Error: '{name}' must be an integer")
    if abs(parsed) > SQL_INT_MAX:
        raise ValidationError(f"Error: '{name}' is out of range")
    return parsed


def _count(data: dict, key: str, label: str) -> Optional[int]:
    """Non-negative whole number (km, readings) or None when absent."""
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    val = to_int_safe(raw)
    if val is None:
        raise ValidationError(f"Error: '{key}' must be {label}")
    if val < 0 or val > SQL_INT_MAX:
        raise ValidationError(f"Error: '{key}' must be a non-negative number")
    return val


def _money(data: dict, key: str) -> Optional[float]:
    raw = data.get(key)
    if raw is None or raw == "":
        return None
    if isinstance(raw, str):
        # "RM 2.50" -> 2.50
        raw = "".join(ch for ch in raw if ch.isdigit() or ch in ".-")
    val = to_float_safe(raw)
    if val is None or val < 0:
        raise ValidationError(f"Error: '{key}' must be a non-negative number")
    return val


# -------- month windows --------
def resolve_window(month=None, year=None) -> Optional[Interval]:
    """
    Closed window for a calendar month, or None for "all time".
    month and year must be given together.
    """
    if month in (None, "") and year in (None, ""):
        return None
    if month in (None, "") or year in (None, ""):
        raise ValidationError("Error: month and year must be given together")
    m = require_int(month, "month")
    y = require_int(year, "year")
    if not 1 <= m <= 12:
        raise ValidationError("Error: month must be between 1 and 12")
    if not 1 <= y <= 9999:
        raise ValidationError("Error: year is out of range")
    return month_window(m, y)


# -------- customer preconditions --------
def require_active_customer(repo, customer_id):
    """Resolve a customer and refuse blacklisted accounts."""
    customer = repo.get_customer(customer_id)
    if customer is None:
        raise CustomerNotFound(f"Error: customer with ID '{customer_id}' not found")
    if customer.is_blacklisted:
        raise CustomerBlacklisted()
    return customer


# -------- pricing / handover inputs --------
@dataclass
class Pricing:
    """
    Staff-supplied pricing. Missing values are filled from configured
    defaults when a rental row is built; nothing here computes a quote.
    """
    rental_per_day: Optional[float] = None
    deposit: Optional[float] = None
    discount: Optional[float] = None
    grand_total: Optional[float] = None
    mileage_limit: Optional[int] = None
    extra_mileage_charge: Optional[float] = None

    @classmethod
    def from_payload(cls, data: Optional[dict]) -> "Pricing":
        data = data or {}
        mileage_limit = _count(data, "mileageLimit", "a number of km")
        return cls(
            rental_per_day=_money(data, "rentalPerDay"),
            deposit=_money(data, "deposit"),
            discount=_money(data, "discount"),
            grand_total=_money(data, "grandTotal"),
            mileage_limit=mileage_limit,
            extra_mileage_charge=_money(data, "extraMileageCharge"),
        )

    def provided(self) -> dict:
        """Only the values staff actually sent, keyed by column name."""
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    def columns(self, total_days: int, defaults: dict, vehicle=None) -> dict:
        """Column values for a new rental row, defaults applied."""
        rate = self.rental_per_day
        if rate is None:
            rate = float(defaults.get("DEFAULT_DAILY_RATE", 0))
        deposit = self.deposit
        if deposit is None:
            deposit = rate * int(defaults.get("DEFAULT_DEPOSIT_DAYS", 0))
        discount = self.discount or 0.0
        total = self.grand_total
        if total is None:
            total = max(0.0, rate * total_days + deposit - discount)
        mileage_limit = self.mileage_limit
        if mileage_limit is None:
            mileage_limit = vehicle.mileage_limit if vehicle is not None else defaults.get("DEFAULT_MILEAGE_LIMIT")
        extra = self.extra_mileage_charge
        if extra is None:
            extra = defaults.get("DEFAULT_EXTRA_MILEAGE_CHARGE")
        return {
            "rental_per_day": round2(rate),
            "deposit": round2(deposit),
            "discount": round2(discount),
            "grand_total": round2(total),
            "mileage_limit": mileage_limit,
            "extra_mileage_charge": extra,
        }


def normalize_photos(value) -> Optional[dict]:
    """
    Accept either {slot: url} or a list of urls (assigned to the handover
    slots in upload order). Empty input means "no photos yet".
    """
    if not value:
        return None
    if isinstance(value, dict):
        return {str(k): str(v) for k, v in value.items() if v}
    if isinstance(value, (list, tuple)):
        if len(value) > len(PHOTO_SLOTS):
            raise ValidationError(f"Error: at most {len(PHOTO_SLOTS)} vehicle photos are accepted")
        return {slot: str(url) for slot, url in zip(PHOTO_SLOTS, value) if url}
    raise ValidationError("Error: 'vehiclePhotos' must be a list or an object of URLs")


@dataclass
class Artifacts:
    """Opaque references to photos, payment proof and signature."""
    vehicle_photos: Optional[dict] = None
    payment_proof_url: Optional[str] = None
    signature_url: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Optional[dict]) -> "Artifacts":
        data = data or {}
        return cls(
            vehicle_photos=normalize_photos(data.get("vehiclePhotos")),
            payment_proof_url=(data.get("paymentProofUrl") or None),
            signature_url=(data.get("signatureUrl") or None),
        )

    def provided(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name)}


@dataclass
class Handover:
    """Vehicle condition and updated pricing recorded when a rental completes."""
    current_mileage: Optional[int] = None
    fuel_level: Optional[int] = None
    color: Optional[str] = None
    pricing: Pricing = field(default_factory=Pricing)
    artifacts: Artifacts = field(default_factory=Artifacts)

    @classmethod
    def from_payload(cls, data: Optional[dict]) -> "Handover":
        data = data or {}
        current_mileage = _count(data, "currentMileage", "a number")
        fuel = data.get("fuelLevel")
        fuel_level = None
        if fuel not in (None, ""):
            fuel_level = to_int_safe(fuel)
            if fuel_level not in FUEL_LEVELS:
                raise ValidationError(
                    f"Error: 'fuelLevel' must be between {FUEL_LEVELS.start} and {FUEL_LEVELS.stop - 1}"
                )
        color = (data.get("color") or "").strip() or None
        return cls(
            current_mileage=current_mileage,
            fuel_level=fuel_level,
            color=color,
            pricing=Pricing.from_payload(data),
            artifacts=Artifacts.from_payload(data),
        )

    def columns(self) -> dict:
        out = {}
        if self.current_mileage is not None:
            out["current_mileage"] = self.current_mileage
        if self.fuel_level is not None:
            out["fuel_level"] = self.fuel_level
        if self.color is not None:
            out["color"] = self.color
        out.update(self.pricing.provided())
        out.update(self.artifacts.provided())
        return out
