# crm/deps.py
from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from crm.core.database import get_db
from crm.core.errors import NotFoundError
from crm.models.address import Address
from crm.models.customer import Customer
from crm.services.repository import CustomerRepository


def get_repository(db: Session = Depends(get_db)) -> CustomerRepository:
    """Request-scoped persistence client bound to the request's session."""
    return CustomerRepository(db)


def require_customer(customer_id: int, repo: CustomerRepository) -> Customer:
    customer = repo.get_customer(customer_id)
    if customer is None:
        raise NotFoundError("Customer not found")
    return customer


def require_address(address_id: int, repo: CustomerRepository) -> Address:
    address = repo.get_address(address_id)
    if address is None:
        raise NotFoundError("Address not found")
    return address
