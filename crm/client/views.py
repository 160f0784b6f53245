"""Client-side state for the list, detail and form screens.

Rendering is left to whatever UI sits on top; these classes only hold the
data each screen shows and decide when to talk to the API.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

from crm.client.api_client import ApiError, CRMClient
from crm.schemas.address import AddressPayload
from crm.schemas.customer import CustomerPayload
from crm.services.validation import validate_address, validate_customer

logger = logging.getLogger(__name__)

SCROLL_THRESHOLD_PX = 10
DETAIL_TABS = ("addresses", "orders", "payments")


@dataclass(frozen=True)
class ListFilters:
    q: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""


class CustomerListView:
    def __init__(self, client: CRMClient, limit: int = 10):
        self.client = client
        self.limit = limit
        self.filters = ListFilters()
        self.page = 1
        self.total = 0
        self.customers: list[dict[str, Any]] = []
        self.loading = False

    @property
    def has_more(self) -> bool:
        return len(self.customers) < self.total

    def load(self, reset: bool = False, page: Optional[int] = None) -> None:
        """Fetch ``page`` (default: the current one); ``self.page`` only moves on success."""
        page = self.page if page is None else page
        self.loading = True
        try:
            data = self.client.list_customers(
                page=page,
                limit=self.limit,
                q=self.filters.q,
                city=self.filters.city,
                state=self.filters.state,
                pincode=self.filters.pincode,
            )
        finally:
            self.loading = False
        self.page = page
        self.total = int(data.get("total") or 0)
        rows = list(data.get("customers") or [])
        if reset:
            self.customers = rows
        else:
            self.customers.extend(rows)

    def set_filters(self, **changes: str) -> bool:
        """Apply filter changes; any actual change restarts from page 1."""
        updated = replace(self.filters, **{key: value or "" for key, value in changes.items()})
        if updated == self.filters:
            return False
        self.filters = updated
        self.refresh()
        return True

    def clear_filters(self) -> None:
        self.filters = ListFilters()
        self.refresh()

    def refresh(self) -> None:
        self.page = 1
        self.customers = []
        self.load(reset=True)

    def load_next_page(self) -> bool:
        if self.loading or not self.has_more:
            return False
        self.load(reset=False, page=self.page + 1)
        return True

    def on_scroll(self, scroll_top: float, client_height: float, scroll_height: float) -> bool:
        if self.loading:
            return False
        if scroll_top + client_height >= scroll_height - SCROLL_THRESHOLD_PX:
            return self.load_next_page()
        return False

    def delete_customer(self, customer_id: int) -> None:
        self.client.delete_customer(customer_id)
        self.refresh()


class CustomerDetailView:
    def __init__(self, client: CRMClient, customer_id: int):
        self.client = client
        self.customer_id = customer_id
        self.customer: Optional[dict[str, Any]] = None
        self.addresses: list[dict[str, Any]] = []
        self.orders: list[dict[str, Any]] = []
        self.payments: list[dict[str, Any]] = []
        self.active_tab = DETAIL_TABS[0]
        self.errors: dict[str, ApiError] = {}
        self.mounted = False

    def mount(self) -> None:
        # three independent fetches, once per view
        if self.mounted:
            return
        self.mounted = True
        self.fetch_customer()
        self.fetch_orders()
        self.fetch_payments()

    def select_tab(self, tab: str) -> None:
        if tab not in DETAIL_TABS:
            raise ValueError(f"unknown tab: {tab}")
        self.active_tab = tab

    def fetch_customer(self) -> None:
        try:
            data = self.client.get_customer(self.customer_id)
        except ApiError as exc:
            self.errors["customer"] = exc
            return
        self.errors.pop("customer", None)
        self.addresses = list(data.get("addresses") or [])
        self.customer = dict(data["customer"])
        self.customer["singleAddress"] = len(self.addresses) == 1

    def fetch_orders(self) -> None:
        try:
            self.orders = self.client.list_orders(self.customer_id)
        except ApiError as exc:
            self.errors["orders"] = exc
            return
        self.errors.pop("orders", None)

    def fetch_payments(self) -> None:
        try:
            self.payments = self.client.list_payments(self.customer_id)
        except ApiError as exc:
            self.errors["payments"] = exc
            return
        self.errors.pop("payments", None)

    def add_address(self, line1: str, city: str, state: str = "", pincode: str = "") -> list[dict[str, str]]:
        """Add an address; returns local rule violations, empty on success."""
        payload = AddressPayload(line1=line1, city=city, state=state, pincode=pincode)
        violations = validate_address(payload)
        if violations:
            return [violation.as_dict() for violation in violations]
        self.client.add_address(self.customer_id, payload.model_dump(by_alias=True))
        self.fetch_customer()
        return []

    def delete_address(self, address_id: int) -> None:
        self.client.delete_address(address_id)
        self.fetch_customer()


class CustomerFormView:
    FIELDS = ("firstName", "lastName", "phone", "email", "accountType")

    def __init__(self, client: CRMClient, customer_id: Optional[int] = None):
        self.client = client
        self.customer_id = customer_id
        self.values: dict[str, str] = {field: "" for field in self.FIELDS}
        self.values["accountType"] = "basic"
        self.errors: list[dict[str, str]] = []
        self.saved_id: Optional[int] = None

    @property
    def is_edit(self) -> bool:
        return self.customer_id is not None

    def load(self) -> None:
        if not self.is_edit:
            return
        customer = self.client.get_customer(self.customer_id)["customer"]
        for field in self.FIELDS:
            self.values[field] = customer.get(field) or ""
        self.values["accountType"] = self.values["accountType"] or "basic"

    def set_field(self, field: str, value: str) -> None:
        if field not in self.FIELDS:
            raise KeyError(field)
        self.values[field] = value

    def _payload(self) -> CustomerPayload:
        return CustomerPayload.model_validate(self.values)

    def precheck(self) -> list[dict[str, str]]:
        return [violation.as_dict() for violation in validate_customer(self._payload())]

    def submit(self) -> bool:
        self.errors = self.precheck()
        if self.errors:
            return False

        body = dict(self.values)
        try:
            if self.is_edit:
                self.client.update_customer(self.customer_id, body)
                self.saved_id = self.customer_id
            else:
                self.saved_id = int(self.client.create_customer(body)["id"])
        except ApiError as exc:
            if exc.status_code not in (400, 409):
                raise
            self.errors = exc.field_errors or [
                {"field": _conflict_field(exc.message), "rule": "conflict", "message": exc.message or "Error"}
            ]
            logger.info("form rejected by server status=%s", exc.status_code)
            return False
        return True


def _conflict_field(message: str | None) -> str:
    text = (message or "").lower()
    if "phone" in text:
        return "phone"
    if "email" in text:
        return "email"
    return "form"
