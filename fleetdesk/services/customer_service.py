from __future__ import annotations

import logging

from ..exceptions import CustomerNotFound, CustomerBlacklisted, ValidationError
from ..utils.constants import CustomerStatus, StaffAction

logger = logging.getLogger(__name__)


class CustomerService:
    """Customer login gate and staff-controlled account standing."""

    def __init__(self, repo):
        self.repo = repo

    def get(self, customer_id):
        customer = self.repo.get_customer(customer_id)
        if customer is None:
            raise CustomerNotFound(f"Error: customer with ID '{customer_id}' not found")
        return customer

    def login(self, email: str):
        """Email-based customer login; blacklisted accounts are refused."""
        if not (email or "").strip():
            raise ValidationError("Error: email is required")
        customer = self.repo.find_customer_by_email(email)
        if customer is None:
            raise CustomerNotFound("Error: customer not found with this email address")
        if customer.is_blacklisted:
            logger.warning("Blacklisted customer %s attempted to log in", customer.id)
            raise CustomerBlacklisted()
        return customer

    def set_status(self, customer_id, status, staff_id=None):
        try:
            new_status = CustomerStatus(str(status or "").strip().lower())
        except ValueError:
            raise ValidationError("Error: status must be 'active' or 'blacklisted'")

        with self.repo.atomic():
            customer = self.get(customer_id)
            old_status = customer.status
            self.repo.set_customer_status(customer, new_status)
            self.repo.log_staff_action(staff_id, StaffAction.CUSTOMER_STATUS_CHANGED, "customer", customer.id,
                                       {"from": old_status.value, "to": new_status.value})
        logger.info("Customer %s status %s -> %s", customer_id, old_status.value, new_status.value)
        return customer
