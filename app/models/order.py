"""
Order and order line models for database operations
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Float, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

class Order(Base):
    """Order header entity model"""
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    order_number = Column(String(50), unique=True, index=True, nullable=False)
    order_date = Column(String(30), nullable=False)  # Client-supplied, kept verbatim
    customer_name = Column(String(200), nullable=False)
    customer_address = Column(Text, nullable=False)
    customer_phone = Column(String(30), index=True, nullable=False)
    customer_email = Column(String(200), nullable=False)
    ship_to_address = Column(Text, nullable=True)
    billing_name = Column(String(200), nullable=True)
    billing_address = Column(Text, nullable=True)
    billing_tax_number = Column(String(50), nullable=True)
    subtotal = Column(Float, nullable=False, default=0)
    status = Column(String(20), default="PENDING", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.id",
    )

    def __repr__(self):
        return f"<Order(id={self.id}, order_number='{self.order_number}', status='{self.status}')>"

class OrderItem(Base):
    """Line item owned by an order"""
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(Integer, nullable=False)
    product_name = Column(String(200), nullable=False)  # Snapshot at order time
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total = Column(Float, nullable=False)

    order = relationship("Order", back_populates="items")

    def __repr__(self):
        return f"<OrderItem(id={self.id}, order_id={self.order_id}, product_id={self.product_id}, quantity={self.quantity})>"
