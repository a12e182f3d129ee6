from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, Text, DateTime, Numeric, JSON
from sqlalchemy.orm import relationship

from hapibara.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    order_number = Column(String(100), nullable=False, unique=True)

    status = Column(String(20), nullable=False, default="pending")  # pending, confirmed, processing, shipped, delivered, cancelled
    payment_status = Column(String(20), nullable=False, default="pending")  # pending, paid, failed, refunded
    payment_method = Column(String(100), nullable=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    shipping = Column(Numeric(10, 2), nullable=False)
    tax = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    shipping_address = Column(JSON, nullable=False)
    notes = Column(Text, nullable=True)
    tracking_number = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
