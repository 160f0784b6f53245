from __future__ import annotations

import logging
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from crm.core.errors import ConflictError, NotFoundError, PersistenceError
from crm.models.address import Address
from crm.models.customer import Customer, DEFAULT_ACCOUNT_TYPE
from crm.models.order import Order
from crm.models.payment import Payment
from crm.schemas.address import AddressPayload
from crm.schemas.customer import CustomerPayload

logger = logging.getLogger(__name__)

PHONE_TAKEN = "Phone already exists"
EMAIL_TAKEN = "Email already exists"
PHONE_OWNED = "Phone belongs to another customer"
EMAIL_OWNED = "Email belongs to another customer"

# SQLite names the column, Postgres names the constraint
_PHONE_MARKERS = ("uq_customers_phone", "customers.phone")
_EMAIL_MARKERS = ("uq_customers_email", "customers.email")


def _constraint_error(exc: IntegrityError, phone_message: str = PHONE_TAKEN, email_message: str = EMAIL_TAKEN) -> Exception:
    detail = str(getattr(exc, "orig", exc)).lower()
    if "foreign key" in detail or "foreign_key" in detail or "_fkey" in detail:
        return NotFoundError("Customer not found")
    if any(marker in detail for marker in _PHONE_MARKERS):
        return ConflictError(phone_message)
    if any(marker in detail for marker in _EMAIL_MARKERS):
        return ConflictError(email_message)
    return PersistenceError()


class CustomerRepository:
    """Persistence client for customers and their dependent records.

    Every write commits right away. Integrity failures are rolled back and
    translated into ``ConflictError`` (unique phone/email), ``NotFoundError``
    (owning customer is gone) or ``PersistenceError``.
    """

    def __init__(self, db: Session):
        self.db = db

    def _commit(self, **messages: str) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            translated = _constraint_error(exc, **messages)
            logger.info("write rejected by constraint: %s", type(translated).__name__)
            raise translated from exc
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError() from exc

    def _read(self, query_fn):
        try:
            return query_fn()
        except SQLAlchemyError as exc:
            self.db.rollback()
            raise PersistenceError() from exc

    # customers

    def create_customer(self, data: CustomerPayload) -> Customer:
        customer = Customer(
            first_name=data.first_name,
            last_name=data.last_name,
            phone=data.phone,
            email=data.email,
            account_type=data.account_type or DEFAULT_ACCOUNT_TYPE,
        )
        self.db.add(customer)
        self._commit()
        self.db.refresh(customer)
        return customer

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self._read(lambda: self.db.query(Customer).filter(Customer.id == customer_id).first())

    def get_customer_by_phone(self, phone: str) -> Optional[Customer]:
        return self._read(lambda: self.db.query(Customer).filter(Customer.phone == phone).first())

    def get_customer_by_email(self, email: str) -> Optional[Customer]:
        return self._read(lambda: self.db.query(Customer).filter(Customer.email == email).first())

    def update_customer(self, customer: Customer, data: CustomerPayload) -> Customer:
        customer.first_name = data.first_name
        customer.last_name = data.last_name
        customer.phone = data.phone
        customer.email = data.email
        customer.account_type = data.account_type or DEFAULT_ACCOUNT_TYPE
        self._commit(phone_message=PHONE_OWNED, email_message=EMAIL_OWNED)
        self.db.refresh(customer)
        return customer

    def delete_customer(self, customer: Customer) -> None:
        self.db.delete(customer)
        self._commit()

    # addresses

    def list_addresses(self, customer_id: int) -> list[Address]:
        return self._read(
            lambda: self.db.query(Address).filter(Address.customer_id == customer_id).order_by(Address.id).all()
        )

    def get_address(self, address_id: int) -> Optional[Address]:
        return self._read(lambda: self.db.query(Address).filter(Address.id == address_id).first())

    def add_address(self, customer_id: int, data: AddressPayload) -> Address:
        address = Address(
            customer_id=customer_id,
            line1=data.line1,
            city=data.city,
            state=data.state,
            pincode=data.pincode,
        )
        self.db.add(address)
        self._commit()
        self.db.refresh(address)
        return address

    def update_address(self, address: Address, data: AddressPayload) -> Address:
        address.line1 = data.line1
        address.city = data.city
        address.state = data.state
        address.pincode = data.pincode
        self._commit()
        self.db.refresh(address)
        return address

    def delete_address(self, address: Address) -> None:
        self.db.delete(address)
        self._commit()

    # orders / payments

    def list_orders(self, customer_id: int, limit: int) -> list[Order]:
        return self._read(
            lambda: self.db.query(Order)
            .filter(Order.customer_id == customer_id)
            .order_by(Order.order_date.desc(), Order.id.desc())
            .limit(limit)
            .all()
        )

    def list_payments(self, customer_id: int, limit: int) -> list[Payment]:
        return self._read(
            lambda: self.db.query(Payment)
            .filter(Payment.customer_id == customer_id)
            .order_by(Payment.payment_date.desc(), Payment.id.desc())
            .limit(limit)
            .all()
        )

    def add_order(self, customer_id: int, order_date: datetime, amount: Decimal | float, status: str) -> Order:
        order = Order(customer_id=customer_id, order_date=order_date, amount=Decimal(str(amount)), status=status)
        self.db.add(order)
        self._commit()
        self.db.refresh(order)
        return order

    def add_payment(self, customer_id: int, payment_date: datetime, amount: Decimal | float, method: str) -> Payment:
        payment = Payment(
            customer_id=customer_id,
            payment_date=payment_date,
            amount=Decimal(str(amount)),
            method=method,
        )
        self.db.add(payment)
        self._commit()
        self.db.refresh(payment)
        return payment
