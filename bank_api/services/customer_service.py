"""
Customer service.

Validates customer writes and turns repository sentinels into typed errors.
"""

import logging
from datetime import datetime
from typing import List

from ..domain.entities import Customer
from ..domain.exceptions import DataAccessException, ResourceNotFoundException
from ..repositories.interfaces import ICustomerRepository
from .validation import require_text

logger = logging.getLogger(__name__)


class CustomerService:
    """Customer operations over the customer store."""

    def __init__(self, customer_repo: ICustomerRepository):
        self.customer_repo = customer_repo

    async def get_all_customers(self) -> List[Customer]:
        return await self.customer_repo.get_all()

    async def get_customer_by_id(self, customer_id: int) -> Customer:
        customer = await self.customer_repo.get_by_id(customer_id)
        if customer is None:
            raise ResourceNotFoundException("Customer", customer_id)
        return customer

    async def create_customer(self, customer: Customer) -> Customer:
        """
        Create a customer.

        Raises:
            BusinessValidationException: Blank first name, last name or email
        """
        self._validate(customer)
        customer.created_date = datetime.utcnow()
        customer.is_active = True

        created = await self.customer_repo.create(customer)
        logger.info(f"Customer {created.id} created")
        return created

    async def update_customer(self, customer_id: int, customer: Customer) -> None:
        """
        Replace an existing customer, keeping its creation timestamp.

        Raises:
            BusinessValidationException: Blank first name, last name or email
            ResourceNotFoundException: If the customer does not exist
            DataAccessException: The store reported no row updated
        """
        self._validate(customer)
        existing = await self.get_customer_by_id(customer_id)

        customer.id = customer_id
        customer.created_date = existing.created_date
        if not await self.customer_repo.update(customer):
            raise DataAccessException(f"Failed to update customer with ID {customer_id}")

    async def delete_customer(self, customer_id: int) -> None:
        if not await self.customer_repo.delete(customer_id):
            raise ResourceNotFoundException("Customer", customer_id)
        logger.info(f"Customer {customer_id} deleted")

    @staticmethod
    def _validate(customer: Customer) -> None:
        require_text(customer.first_name, "First name cannot be empty", "firstName")
        require_text(customer.last_name, "Last name cannot be empty", "lastName")
        require_text(customer.email, "Email cannot be empty", "email")
