from sqlalchemy import Column, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from crm.core.database import Base

ACCOUNT_TYPES = ("basic", "premium")
DEFAULT_ACCOUNT_TYPE = "basic"


class Customer(Base):
    __tablename__ = "customers"
    __table_args__ = (
        UniqueConstraint("phone", name="uq_customers_phone"),
        UniqueConstraint("email", name="uq_customers_email"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(120), nullable=False)
    last_name = Column(String(120), nullable=False)
    phone = Column(String(10), nullable=False)
    email = Column(String(255), nullable=True)
    account_type = Column(String(20), nullable=False, default=DEFAULT_ACCOUNT_TYPE, server_default=DEFAULT_ACCOUNT_TYPE)

    addresses = relationship(
        "Address",
        back_populates="customer",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Address.id",
    )
    orders = relationship("Order", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True)
    payments = relationship("Payment", back_populates="customer", cascade="all, delete-orphan", passive_deletes=True)
