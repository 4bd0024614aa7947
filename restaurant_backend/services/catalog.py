"""
Catalog/Coupon Store Gateway

CRUD accessors for products and coupons on top of an AsyncSession. Input
has already passed the request schemas; this layer maps store failures onto
the application error taxonomy.
"""

import logging
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from restaurant_backend.database import store_operation
from restaurant_backend.errors import ConflictError, NotFoundError
from restaurant_backend.models import Coupon, Product
from restaurant_backend.schemas import CouponCreate, ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def normalize_code(code: str) -> str:
    return code.strip().upper()


# =============================================================================
# PRODUCTS
# =============================================================================

async def list_products(db: AsyncSession) -> list[Product]:
    async with store_operation(db, "load products"):
        result = await db.execute(select(Product).order_by(Product.id.asc()))
        return list(result.scalars().all())


async def get_product(db: AsyncSession, product_id: int) -> Product:
    async with store_operation(db, "load product"):
        product = await db.get(Product, product_id)

    if product is None:
        raise NotFoundError(f"Product #{product_id} not found")
    return product


async def create_product(db: AsyncSession, data: ProductCreate) -> Product:
    product = Product(**data.model_dump())

    async with store_operation(db, "save product"):
        db.add(product)
        await db.commit()
        await db.refresh(product)

    logger.info(f"Product #{product.id} created: {product.name}")
    return product


async def replace_product(
    db: AsyncSession,
    product_id: int,
    data: ProductCreate,
) -> Product:
    """Overwrite every editable field of a product."""
    product = await get_product(db, product_id)

    async with store_operation(db, "save product"):
        for field, value in data.model_dump().items():
            setattr(product, field, value)
        await db.commit()
        await db.refresh(product)

    logger.info(f"Product #{product.id} replaced")
    return product


async def update_product(
    db: AsyncSession,
    product_id: int,
    data: ProductUpdate,
) -> Product:
    """Change only the fields present in the request."""
    product = await get_product(db, product_id)

    async with store_operation(db, "save product"):
        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(product, field, value)
        await db.commit()
        await db.refresh(product)

    logger.info(f"Product #{product.id} updated")
    return product


async def delete_product(db: AsyncSession, product_id: int) -> bool:
    async with store_operation(db, "delete product"):
        result = await db.execute(delete(Product).where(Product.id == product_id))
        await db.commit()

    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Product #{product_id} deleted")
    return deleted


# =============================================================================
# COUPONS
# =============================================================================

async def list_coupons(db: AsyncSession) -> list[Coupon]:
    async with store_operation(db, "load coupons"):
        result = await db.execute(select(Coupon).order_by(Coupon.id.asc()))
        return list(result.scalars().all())


async def create_coupon(db: AsyncSession, data: CouponCreate) -> Coupon:
    """
    Insert a coupon.

    Raises:
        ConflictError: If the (normalized) code already exists
    """
    coupon = Coupon(
        code=normalize_code(data.code),
        discount_percent=data.discount_percent,
    )

    async with store_operation(db, "save coupon"):
        try:
            db.add(coupon)
            await db.commit()
        except IntegrityError as e:
            await db.rollback()
            logger.info(f"Coupon code {coupon.code} rejected: already exists")
            raise ConflictError(
                f"Coupon code {coupon.code} already exists"
            ) from e
        await db.refresh(coupon)

    logger.info(f"Coupon {coupon.code} created ({coupon.discount_percent}%)")
    return coupon


async def find_coupon(db: AsyncSession, code: Optional[str]) -> Optional[Coupon]:
    """Look a coupon up by code, case-insensitively. None if unknown."""
    if not code or not code.strip():
        return None

    async with store_operation(db, "load coupon"):
        result = await db.execute(
            select(Coupon).where(Coupon.code == normalize_code(code))
        )
        return result.scalar_one_or_none()


async def delete_coupon(db: AsyncSession, coupon_id: int) -> bool:
    async with store_operation(db, "delete coupon"):
        result = await db.execute(delete(Coupon).where(Coupon.id == coupon_id))
        await db.commit()

    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Coupon #{coupon_id} deleted")
    return deleted
