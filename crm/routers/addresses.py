from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status

from crm.deps import get_repository, require_address, require_customer
from crm.schemas.address import AddressPayload
from crm.schemas.common import CreatedResponse, MessageResponse
from crm.services.repository import CustomerRepository
from crm.services.validation import normalized_address

router = APIRouter(prefix="/api", tags=["addresses"])
logger = logging.getLogger(__name__)


@router.post(
    "/customers/{customer_id}/addresses",
    response_model=CreatedResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
def add_address(
    customer_id: int,
    payload: AddressPayload,
    repo: CustomerRepository = Depends(get_repository),
):
    data = normalized_address(payload)
    customer = require_customer(customer_id, repo)
    address = repo.add_address(customer.id, data)
    logger.info("address created id=%s customer_id=%s", address.id, customer.id)
    return {"id": address.id}


@router.put("/addresses/{address_id}", response_model=MessageResponse)
def update_address(
    address_id: int,
    payload: AddressPayload,
    repo: CustomerRepository = Depends(get_repository),
):
    data = normalized_address(payload)
    address = require_address(address_id, repo)
    repo.update_address(address, data)
    return {"message": "Address updated"}


@router.delete("/addresses/{address_id}", response_model=MessageResponse)
def delete_address(address_id: int, repo: CustomerRepository = Depends(get_repository)):
    address = require_address(address_id, repo)
    repo.delete_address(address)
    return {"message": "Address deleted"}
