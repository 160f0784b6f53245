from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from crm.core.config import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from crm.core.errors import ConflictError
from crm.deps import get_repository, require_customer
from crm.models.customer import Customer
from crm.schemas.address import AddressRead
from crm.schemas.common import CreatedResponse, MessageResponse
from crm.schemas.customer import (
    CustomerDetailResponse,
    CustomerListResponse,
    CustomerPayload,
    CustomerRead,
)
from crm.services.customer_query import CustomerFilters, list_customers
from crm.services.repository import EMAIL_OWNED, EMAIL_TAKEN, PHONE_OWNED, PHONE_TAKEN, CustomerRepository
from crm.services.validation import normalized_customer

router = APIRouter(prefix="/api/customers", tags=["customers"])
logger = logging.getLogger(__name__)


def _customer_read(customer: Customer, address_count: int) -> CustomerRead:
    return CustomerRead(
        id=customer.id,
        first_name=customer.first_name,
        last_name=customer.last_name,
        phone=customer.phone,
        email=customer.email,
        account_type=customer.account_type,
        single_address=address_count == 1,
    )


def _ensure_unique(repo: CustomerRepository, data: CustomerPayload, customer_id: int | None = None) -> None:
    """Advisory check; the unique constraints still guard the write itself."""
    other = repo.get_customer_by_phone(data.phone)
    if other is not None and other.id != customer_id:
        raise ConflictError(PHONE_TAKEN if customer_id is None else PHONE_OWNED)

    if data.email:
        other = repo.get_customer_by_email(data.email)
        if other is not None and other.id != customer_id:
            raise ConflictError(EMAIL_TAKEN if customer_id is None else EMAIL_OWNED)


@router.post("", response_model=CreatedResponse, status_code=status.HTTP_201_CREATED)
def create_customer(payload: CustomerPayload, repo: CustomerRepository = Depends(get_repository)):
    data = normalized_customer(payload)
    _ensure_unique(repo, data)
    customer = repo.create_customer(data)
    logger.info("customer created id=%s", customer.id)
    return {"id": customer.id, "message": "Customer created"}


@router.get("", response_model=CustomerListResponse)
def get_customers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    q: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    state: Optional[str] = Query(default=None),
    pincode: Optional[str] = Query(default=None),
    sort_by: str = Query(default="id", alias="sortBy", pattern="^(id|firstName|lastName)$"),
    order: str = Query(default="asc", pattern="^(asc|desc)$"),
    repo: CustomerRepository = Depends(get_repository),
):
    filters = CustomerFilters(q=q, city=city, state=state, pincode=pincode)
    result = list_customers(repo.db, filters, page=page, limit=limit, sort_by=sort_by, order=order)
    return CustomerListResponse(
        total=result.total,
        page=result.page,
        limit=result.limit,
        customers=[_customer_read(row.customer, row.address_count) for row in result.rows],
    )


@router.get("/{customer_id}", response_model=CustomerDetailResponse)
def get_customer(customer_id: int, repo: CustomerRepository = Depends(get_repository)):
    customer = require_customer(customer_id, repo)
    addresses = repo.list_addresses(customer.id)
    return CustomerDetailResponse(
        customer=_customer_read(customer, len(addresses)),
        addresses=[AddressRead.model_validate(address) for address in addresses],
    )


@router.put("/{customer_id}", response_model=MessageResponse)
def update_customer(
    customer_id: int,
    payload: CustomerPayload,
    repo: CustomerRepository = Depends(get_repository),
):
    data = normalized_customer(payload)
    customer = require_customer(customer_id, repo)
    _ensure_unique(repo, data, customer_id=customer.id)
    repo.update_customer(customer, data)
    logger.info("customer updated id=%s", customer_id)
    return {"message": "Updated"}


@router.delete("/{customer_id}", response_model=MessageResponse)
def delete_customer(customer_id: int, repo: CustomerRepository = Depends(get_repository)):
    customer = require_customer(customer_id, repo)
    repo.delete_customer(customer)
    logger.info("customer deleted id=%s", customer_id)
    return {"message": "Deleted"}
