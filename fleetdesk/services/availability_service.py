"""Vehicle availability: overlap checks and per-vehicle schedules."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..exceptions import VehicleNotFound
from ..models.vehicle import Vehicle
from ..utils.intervals import Interval, overlaps
from .common import resolve_window

logger = logging.getLogger(__name__)


@dataclass
class AvailabilityResult:
    available: bool
    conflicts: list = field(default_factory=list)

    def conflict_summaries(self) -> list[dict]:
        return [r.summary() for r in self.conflicts]

    def to_dict(self) -> dict:
        return {"available": self.available, "conflicts": self.conflict_summaries()}


class AvailabilityService:
    """
    Answers "is vehicle V free for [start, end]?" by running the overlap
    predicate over the vehicle's non-cancelled rentals. Read-only.
    """

    def __init__(self, repo, allow_same_day_changeover: bool = False):
        self.repo = repo
        self.allow_same_day_changeover = allow_same_day_changeover

    def resolve_vehicle(self, vehicle) -> Vehicle:
        """Accept a Vehicle, an id or a name; raise VehicleNotFound otherwise."""
        if isinstance(vehicle, Vehicle):
            return vehicle
        found = self.repo.find_vehicle(vehicle)
        if found is None:
            raise VehicleNotFound(f"Error: vehicle '{vehicle}' not found")
        return found

    def check_availability(self, vehicle, interval: Interval, exclude_rental_id: int | None = None) -> AvailabilityResult:
        """
        Return availability plus the conflicting rentals.
        - end <= start is an InvalidInterval (dates are never swapped)
        - exclude_rental_id skips the rental being edited
        """
        interval.require_span()
        v = self.resolve_vehicle(vehicle)
        existing = self.repo.active_rentals(v.name, exclude_id=exclude_rental_id)
        conflicts = [
            r for r in existing
            if overlaps(interval, r.interval, self.allow_same_day_changeover)
        ]
        if conflicts:
            logger.info("Vehicle %s unavailable for %s: %d conflict(s)", v.name, interval, len(conflicts))
        return AvailabilityResult(available=not conflicts, conflicts=conflicts)

    def get_schedule(self, vehicle, month=None, year=None) -> list:
        """Non-cancelled rentals intersecting the month (all time if omitted), by start date."""
        window = resolve_window(month, year)
        v = self.resolve_vehicle(vehicle)
        return self.repo.rentals_in_window(window, vehicle=v.name)
