from __future__ import annotations

from fastapi import APIRouter, Depends

from crm.core.config import HISTORY_LIMIT
from crm.deps import get_repository, require_customer
from crm.schemas.history import OrderListResponse, OrderRead, PaymentListResponse, PaymentRead
from crm.services.repository import CustomerRepository

router = APIRouter(prefix="/api/customers", tags=["history"])


@router.get("/{customer_id}/orders", response_model=OrderListResponse)
def get_customer_orders(customer_id: int, repo: CustomerRepository = Depends(get_repository)):
    customer = require_customer(customer_id, repo)
    orders = repo.list_orders(customer.id, limit=HISTORY_LIMIT)
    return OrderListResponse(orders=[OrderRead.model_validate(order) for order in orders])


@router.get("/{customer_id}/payments", response_model=PaymentListResponse)
def get_customer_payments(customer_id: int, repo: CustomerRepository = Depends(get_repository)):
    customer = require_customer(customer_id, repo)
    payments = repo.list_payments(customer.id, limit=HISTORY_LIMIT)
    return PaymentListResponse(payments=[PaymentRead.model_validate(payment) for payment in payments])
