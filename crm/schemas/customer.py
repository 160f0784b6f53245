from typing import Optional

from crm.schemas.address import AddressRead
from crm.schemas.common import CamelModel


class CustomerPayload(CamelModel):
    """Body of create/update; field rules live in ``crm.services.validation``."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    account_type: Optional[str] = None


class CustomerRead(CamelModel):
    id: int
    first_name: str
    last_name: str
    phone: str
    email: Optional[str] = None
    account_type: str
    single_address: bool = False


class CustomerListResponse(CamelModel):
    total: int
    page: int
    limit: int
    customers: list[CustomerRead]


class CustomerDetailResponse(CamelModel):
    customer: CustomerRead
    addresses: list[AddressRead]
