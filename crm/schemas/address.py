from typing import Optional

from crm.schemas.common import CamelModel


class AddressPayload(CamelModel):
    line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    pincode: Optional[str] = None


class AddressRead(CamelModel):
    id: int
    customer_id: int
    line1: str
    city: str
    state: Optional[str] = None
    pincode: Optional[str] = None
