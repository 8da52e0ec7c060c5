# smartbazaar/models.py
"""SQLAlchemy ORM models for persisted entities.

`Listing` and `Order` carry a version counter used by SQLAlchemy's
`version_id_col`, so every UPDATE against them is conditional on the row not
having changed since it was read. Monetary and quantity columns are Numeric
and come back as `Decimal`.
"""
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, Text, String, Numeric, Boolean, TIMESTAMP, ForeignKey, Index, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from .db import Base
from .utils import new_id

def utcnow():
    return datetime.now(timezone.utc)

class User(Base):
    __tablename__ = "users"
    uid = Column(String(128), primary_key=True)
    email = Column(Text)
    role = Column(String(16), nullable=False)  # farmer | buyer
    first_name = Column(Text, nullable=False, default="")
    last_name = Column(Text, nullable=False, default="")
    phone = Column(Text)
    location = Column(Text)
    photo_url = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}".strip()

class Listing(Base):
    __tablename__ = "listings"
    id = Column(String(32), primary_key=True, default=new_id)
    farmer_id = Column(String(128), ForeignKey("users.uid"), nullable=False, index=True)
    crop_name = Column(Text, nullable=False)
    category = Column(Text)
    quantity = Column(Numeric(14, 3), nullable=False)
    unit = Column(String(16), nullable=False)
    price_per_unit = Column(Numeric(14, 2), nullable=False)
    location = Column(Text)
    description = Column(Text)
    image_url = Column(Text)
    status = Column(String(16), nullable=False, default="active")  # active | sold | expired
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    version = Column(Integer, nullable=False)

    __mapper_args__ = {"version_id_col": version}

class Order(Base):
    __tablename__ = "orders"
    id = Column(String(32), primary_key=True, default=new_id)
    listing_id = Column(String(32), ForeignKey("listings.id"), nullable=False, index=True)
    buyer_id = Column(String(128), ForeignKey("users.uid"), nullable=False)
    farmer_id = Column(String(128), ForeignKey("users.uid"), nullable=False)

    # snapshot of the listing at purchase time
    crop_name = Column(Text, nullable=False)
    quantity = Column(Numeric(14, 3), nullable=False)
    unit = Column(String(16), nullable=False)
    price_per_unit = Column(Numeric(14, 2), nullable=False)

    # settlement, fixed at creation
    subtotal = Column(Numeric(16, 4), nullable=False)
    delivery_charge = Column(Numeric(14, 2), nullable=False)
    commission = Column(Numeric(16, 4), nullable=False)
    farmer_earning = Column(Numeric(16, 4), nullable=False)
    total_price = Column(Numeric(16, 4), nullable=False)

    farmer_name = Column(Text, nullable=False, default="")
    farmer_avatar_url = Column(Text, nullable=False, default="")
    buyer_name = Column(Text, nullable=False, default="")
    buyer_avatar_url = Column(Text, nullable=False, default="")

    status = Column(String(24), nullable=False, default="pending")
    stock_restored = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, onupdate=utcnow)
    version = Column(Integer, nullable=False)

    history = relationship(
        "OrderEvent",
        order_by="OrderEvent.id",
        back_populates="order",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

class OrderEvent(Base):
    """Append-only status history of an order."""
    __tablename__ = "order_history"
    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(32), ForeignKey("orders.id"), nullable=False, index=True)
    status = Column(String(24), nullable=False)
    actor_id = Column(String(128))
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    order = relationship("Order", back_populates="history")

class Notification(Base):
    __tablename__ = "notifications"
    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(128), ForeignKey("users.uid"), nullable=False)
    type = Column(String(24), nullable=False)  # new_message | order_update | new_order
    title = Column(Text, nullable=False)
    message = Column(Text, nullable=False, default="")
    link = Column(Text, nullable=False, default="")
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

class Bookmark(Base):
    __tablename__ = "bookmarks"
    id = Column(String(32), primary_key=True, default=new_id)
    user_id = Column(String(128), ForeignKey("users.uid"), nullable=False)
    listing_id = Column(String(32), ForeignKey("listings.id"), nullable=False)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow)

    listing = relationship("Listing")

    __table_args__ = (UniqueConstraint("user_id", "listing_id", name="uq_bookmarks_user_listing"),)

Index("idx_listings_status_farmer", Listing.status, Listing.farmer_id)
Index("idx_orders_farmer_status", Order.farmer_id, Order.status)
Index("idx_orders_buyer", Order.buyer_id)
Index("idx_notifications_user_created", Notification.user_id, Notification.created_at)
