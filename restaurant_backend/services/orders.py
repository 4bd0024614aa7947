"""
Order Intake Handler

Accepts an order, checks it against the opening hours and the shop's
address rules, prices it and stores it with a single INSERT.

Flow:
    1. Opening-hours gate (when enforced) -> ShopClosedError
    2. Address rules -> ValidationError
    3. Coupon lookup (unknown codes are ignored, not rejected)
    4. Pricing
    5. Persist order + line-item snapshot in one row
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_backend.database import store_operation
from restaurant_backend.errors import NotFoundError, ShopClosedError, ValidationError
from restaurant_backend.models import Order, OrderStatus
from restaurant_backend.schemas import OrderCreate
from restaurant_backend.services.catalog import find_coupon
from restaurant_backend.services.pricing import price_order
from restaurant_backend.services.shop_status import ShopStatusStore

logger = logging.getLogger(__name__)


class OrderIntakeService:
    """
    Creates and reads orders.

    Args:
        db: Session of the current request
        shop_status: Used to decide whether the shop is open
        enforce_opening_hours: Reject orders while closed
        require_postal_address: Postal code and city are mandatory
    """

    def __init__(
        self,
        db: AsyncSession,
        shop_status: ShopStatusStore,
        enforce_opening_hours: bool = True,
        require_postal_address: bool = False,
    ):
        self.db = db
        self.shop_status = shop_status
        self.enforce_opening_hours = enforce_opening_hours
        self.require_postal_address = require_postal_address

    def _check_address(self, order_data: OrderCreate) -> None:
        if not self.require_postal_address:
            return

        missing = [
            f"customer.{field}"
            for field in ("postal_code", "city")
            if not getattr(order_data.customer, field)
        ]
        if missing:
            raise ValidationError(
                "Missing customer address fields",
                detail=", ".join(missing),
            )

    async def place_order(self, order_data: OrderCreate) -> Order:
        """
        Accept an order.

        Raises:
            ShopClosedError: The shop is closed and opening hours are enforced
            ValidationError: Address rules not met
            StoreError: The database failed
        """
        if self.enforce_opening_hours and not await self.shop_status.is_open():
            logger.info(f"Order from {order_data.customer.name} rejected: shop closed")
            raise ShopClosedError("The shop is currently closed")

        self._check_address(order_data)

        coupon = await find_coupon(self.db, order_data.coupon)
        if order_data.coupon and coupon is None:
            logger.info(f"Unknown coupon {order_data.coupon!r} ignored")

        totals = price_order(order_data.items, coupon)

        customer = order_data.customer
        new_order = Order(
            customer_name=customer.name,
            customer_phone=customer.phone,
            customer_address=customer.address,
            customer_postal_code=customer.postal_code,
            customer_city=customer.city,
            items=[item.model_dump(mode="json") for item in order_data.items],
            payment_method=order_data.payment,
            delivery_method=order_data.delivery_method,
            coupon_code=coupon.code if coupon else None,
            subtotal=totals.subtotal,
            discount=totals.discount,
            total=totals.total,
            status=OrderStatus.RECEIVED,
        )

        async with store_operation(self.db, "save order"):
            self.db.add(new_order)
            await self.db.commit()
            await self.db.refresh(new_order)

        logger.info(
            f"Order #{new_order.id} received from {new_order.customer_name} "
            f"- total {new_order.total}"
        )
        return new_order

    async def list_orders(self, skip: int = 0, limit: Optional[int] = None) -> list[Order]:
        """Orders, newest first."""
        query = (
            select(Order)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
        )
        if limit is not None:
            query = query.limit(limit)

        async with store_operation(self.db, "load orders"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def get_order(self, order_id: int) -> Order:
        async with store_operation(self.db, "load order"):
            order = await self.db.get(Order, order_id)

        if order is None:
            raise NotFoundError(f"Order #{order_id} not found")
        return order
