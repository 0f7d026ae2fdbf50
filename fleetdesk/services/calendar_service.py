from __future__ import annotations

from .common import resolve_window


class CalendarService:
    """Read-only month view of rentals merged with customer names."""

    def __init__(self, repo, availability):
        self.repo = repo
        self.availability = availability

    def bookings(self, month=None, year=None, vehicle=None) -> list[dict]:
        window = resolve_window(month, year)
        name = self.availability.resolve_vehicle(vehicle).name if vehicle else None
        return [
            {
                "id": rental.id,
                "vehicle": rental.vehicle,
                "startDate": rental.start_date.isoformat(),
                "endDate": rental.end_date.isoformat(),
                "customerId": rental.customer_id,
                "customerName": customer_name,
                "status": rental.status.value,
            }
            for rental, customer_name in self.repo.calendar_rows(window, vehicle=name)
        ]
