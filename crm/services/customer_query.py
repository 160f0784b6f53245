from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy import distinct, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from crm.core.errors import PersistenceError
from crm.models.address import Address
from crm.models.customer import Customer
from crm.services.validation import clean_optional

SORTABLE_COLUMNS = {
    "id": Customer.id,
    "firstName": Customer.first_name,
    "lastName": Customer.last_name,
}
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class CustomerFilters:
    q: str | None = None
    city: str | None = None
    state: str | None = None
    pincode: str | None = None

    def normalized(self) -> "CustomerFilters":
        return CustomerFilters(
            q=clean_optional(self.q),
            city=clean_optional(self.city),
            state=clean_optional(self.state),
            pincode=clean_optional(self.pincode),
        )

    @property
    def touches_addresses(self) -> bool:
        return any(value is not None for value in (self.city, self.state, self.pincode))


@dataclass
class CustomerRow:
    customer: Customer
    address_count: int

    @property
    def single_address(self) -> bool:
        return self.address_count == 1


@dataclass
class CustomerPage:
    total: int
    page: int
    limit: int
    rows: list[CustomerRow] = field(default_factory=list)


def _matching_customers(db: Session, filters: CustomerFilters):
    query = db.query(Customer.id)
    if filters.touches_addresses:
        # every address filter has to hold on the same address row
        query = query.join(Address, Address.customer_id == Customer.id)

    conditions = []
    if filters.q:
        search_like = f"%{filters.q}%"
        conditions.append(
            or_(
                Customer.first_name.ilike(search_like),
                Customer.last_name.ilike(search_like),
                Customer.phone.ilike(search_like),
                Customer.email.ilike(search_like),
            )
        )
    if filters.city:
        conditions.append(Address.city == filters.city)
    if filters.state:
        conditions.append(Address.state == filters.state)
    if filters.pincode:
        conditions.append(Address.pincode == filters.pincode)
    return query.filter(*conditions)


def list_customers(
    db: Session,
    filters: CustomerFilters,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "id",
    order: str = "asc",
) -> CustomerPage:
    """Return one page of customers matching ``filters``.

    ``total`` counts distinct customers, so a customer with several matching
    addresses is counted once. The address count behind ``singleAddress``
    comes from one grouped subquery joined into the page query.
    """
    if page < 1:
        raise ValueError("page must be >= 1")
    if limit < 1:
        raise ValueError("limit must be > 0")
    if sort_by not in SORTABLE_COLUMNS:
        raise ValueError(f"sortBy must be one of: {', '.join(SORTABLE_COLUMNS)}")
    if order not in SORT_ORDERS:
        raise ValueError("order must be asc or desc")

    filters = filters.normalized()
    matching = _matching_customers(db, filters)

    address_counts = (
        db.query(
            Address.customer_id.label("customer_id"),
            func.count(Address.id).label("address_count"),
        )
        .group_by(Address.customer_id)
        .subquery()
    )

    sort_column = SORTABLE_COLUMNS[sort_by]
    ordering = [sort_column.desc() if order == "desc" else sort_column.asc()]
    if sort_by != "id":
        ordering.append(Customer.id.asc())

    offset = (page - 1) * limit
    try:
        total = matching.with_entities(func.count(distinct(Customer.id))).scalar() or 0
        result = (
            db.query(Customer, func.coalesce(address_counts.c.address_count, 0).label("address_count"))
            .outerjoin(address_counts, address_counts.c.customer_id == Customer.id)
            .filter(Customer.id.in_(matching.distinct().subquery().select()))
            .order_by(*ordering)
            .limit(limit)
            .offset(offset)
            .all()
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise PersistenceError() from exc

    rows = [CustomerRow(customer=customer, address_count=int(count or 0)) for customer, count in result]
    return CustomerPage(total=int(total), page=page, limit=limit, rows=rows)
