from sqlalchemy import Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from crm.core.database import Base


class Address(Base):
    __tablename__ = "addresses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    line1 = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False, index=True)
    state = Column(String(100), nullable=True)
    pincode = Column(String(6), nullable=True)

    customer = relationship("Customer", back_populates="addresses")
