from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import relationship

from crm.core.database import Base


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    payment_date = Column(DateTime(timezone=True), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    method = Column(String(30), nullable=False)

    customer = relationship("Customer", back_populates="payments")
