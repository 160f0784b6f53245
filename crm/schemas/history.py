from datetime import datetime

from crm.schemas.common import CamelModel


class OrderRead(CamelModel):
    id: int
    customer_id: int
    order_date: datetime
    amount: float
    status: str


class PaymentRead(CamelModel):
    id: int
    customer_id: int
    payment_date: datetime
    amount: float
    method: str


class OrderListResponse(CamelModel):
    orders: list[OrderRead]


class PaymentListResponse(CamelModel):
    payments: list[PaymentRead]
