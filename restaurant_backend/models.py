"""
SQLAlchemy Database Models

Tables of the shop:
- products: the menu
- coupons: percentage discount codes
- orders: submitted orders with their line items as a JSON snapshot
- shop_status: the single administrative open/closed override row
"""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Numeric,
    DateTime,
    Text,
    Enum,
    Boolean,
    JSON,
)
from sqlalchemy.sql import func
from restaurant_backend.database import Base
from restaurant_backend.services.opening_hours import ShopOverride
import enum


class OrderStatus(str, enum.Enum):
    """
    Order lifecycle status.

    Only RECEIVED is ever assigned; no operation advances an order further.
    """
    RECEIVED = "received"


class DeliveryMethod(str, enum.Enum):
    """How the order reaches the customer."""
    DELIVERY = "delivery"
    PICKUP = "pickup"


class Product(Base):
    """A menu entry."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(String(500), nullable=True)
    category = Column(String(80), nullable=True, index=True)
    highlight = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Product #{self.id} - {self.name} - {self.price}>"


class Coupon(Base):
    """
    Percentage discount code.

    Codes are stored upper-case; the unique constraint is what turns a
    duplicate insert into a conflict.
    """
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    code = Column(String(40), nullable=False, unique=True, index=True)
    discount_percent = Column(Numeric(5, 2), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Coupon {self.code} - {self.discount_percent}%>"


class Order(Base):
    """
    A submitted order.

    Line items are written in the same row as the order (``items`` JSON
    column), so one INSERT persists the whole order. Prices in the snapshot
    are the prices at order time.
    """
    __tablename__ = "orders"

    # Primary Key
    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # =========================================================================
    # CUSTOMER INFORMATION
    # =========================================================================
    customer_name = Column(String(100), nullable=False)
    customer_phone = Column(String(40), nullable=False, index=True)
    customer_address = Column(String(255), nullable=False)
    customer_postal_code = Column(String(10), nullable=True)
    customer_city = Column(String(80), nullable=True)

    # =========================================================================
    # ORDER DETAILS
    # =========================================================================
    items = Column(JSON, nullable=False)
    payment_method = Column(String(50), nullable=True)
    delivery_method = Column(Enum(DeliveryMethod), nullable=True)

    # =========================================================================
    # PRICING
    # =========================================================================
    coupon_code = Column(String(40), nullable=True)
    subtotal = Column(Numeric(10, 2), nullable=False)
    discount = Column(Numeric(10, 2), nullable=False, default=0)
    total = Column(Numeric(10, 2), nullable=False)

    # =========================================================================
    # STATUS & TIMESTAMPS
    # =========================================================================
    status = Column(
        Enum(OrderStatus),
        default=OrderStatus.RECEIVED,
        nullable=False,
        index=True
    )
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self):
        return f"<Order #{self.id} - {self.customer_name} - {self.total}>"


class ShopStatus(Base):
    """
    Process-wide open/closed override.

    At most one row (id = 1). A missing row or a NULL override means the
    weekly schedule decides.
    """
    __tablename__ = "shop_status"

    id = Column(Integer, primary_key=True)
    override = Column(Enum(ShopOverride), nullable=True)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )
