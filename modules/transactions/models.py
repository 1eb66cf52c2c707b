from datetime import datetime

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from core.models import Base


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    subtotal = Column(Float, nullable=False)
    discount = Column(Float, nullable=False, default=0.0)
    tax = Column(Float, nullable=False, default=0.0)
    total = Column(Float, nullable=False)
    profit = Column(Float, nullable=False)
    payment_method = Column(String(32), nullable=False)
    cashier_name = Column(String(255), nullable=False)
    customer_name = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)

    items = relationship(
        "TransactionItem",
        cascade="all, delete-orphan",
        back_populates="transaction",
        order_by="TransactionItem.id",
    )


class TransactionItem(Base):
    """A sold line. Product fields are snapshotted at sale time."""

    __tablename__ = "transaction_items"

    id = Column(Integer, primary_key=True, index=True)
    transaction_id = Column(Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="RESTRICT"), nullable=False)
    product_name = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    cost_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    profit = Column(Float, nullable=False)

    transaction = relationship("Transaction", back_populates="items")
