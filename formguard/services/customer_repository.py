"""Customer repository — in-memory store backing the demo API.

Also serves as the ``customers`` UniquenessLookup for the Unique constraint.
For production with multiple instances, swap to a database-backed repository.
"""

import itertools
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Optional

import structlog

logger = structlog.get_logger()


def _holds(customers, field: str, value: Any) -> bool:
    if field == "email" and isinstance(value, str):
        value = value.lower()
        return any(c.email.lower() == value for c in customers)
    return any(getattr(c, field, None) == value for c in customers)


@dataclass
class Customer:
    id: int
    name: str
    email: str
    birth_date: date
    credit_limit: Optional[Decimal] = None
    nickname: Optional[str] = None
    phones: list[dict] = field(default_factory=list)


class CustomerRepository:
    """Keeps customers in insertion order, keyed by id."""

    def __init__(self):
        self._customers: dict[int, Customer] = {}
        self._ids = itertools.count(1)

    def add(self, **attributes: Any) -> Customer:
        customer = Customer(id=next(self._ids), **attributes)
        self._customers[customer.id] = customer
        logger.info("customer_added", customer_id=customer.id)
        return customer

    def get(self, customer_id: int) -> Optional[Customer]:
        return self._customers.get(customer_id)

    def list(self, name_prefix: Optional[str] = None) -> list[Customer]:
        customers = list(self._customers.values())
        if name_prefix:
            prefix = name_prefix.lower()
            customers = [c for c in customers if c.name.lower().startswith(prefix)]
        return customers

    def update_email(self, customer_id: int, email: str) -> Customer:
        customer = self._customers[customer_id]
        customer.email = email
        logger.info("customer_email_changed", customer_id=customer_id)
        return customer

    # ── UniquenessLookup ──

    def exists(self, field: str, value: Any) -> bool:
        """True if another customer already holds ``value`` in ``field``."""
        return _holds(self._customers.values(), field, value)

    def excluding(self, customer_id: int) -> "ExcludingLookup":
        """Lookup that ignores one customer, for updates of that customer."""
        return ExcludingLookup(self, customer_id)


class ExcludingLookup:
    """UniquenessLookup over every customer but one."""

    def __init__(self, repository: CustomerRepository, customer_id: int):
        self.repository = repository
        self.customer_id = customer_id

    def exists(self, field: str, value: Any) -> bool:
        others = [c for c in self.repository.list() if c.id != self.customer_id]
        return _holds(others, field, value)
