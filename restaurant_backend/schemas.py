"""
Pydantic Schemas for Request/Response Validation

Request schemas are the validation boundary of the API: anything that
reaches the services has already passed them. Money comes in as Decimal and
goes out as float.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from restaurant_backend.models import DeliveryMethod, OrderStatus
from restaurant_backend.services.opening_hours import ShopOverride


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


CENT = Decimal("0.01")


def _whole_cents(v: Optional[Decimal]) -> Optional[Decimal]:
    if v is not None and v != v.quantize(CENT):
        raise ValueError("must not have more than 2 decimal places")
    return v


# =============================================================================
# LINE ITEMS
# =============================================================================

class LineItem(BaseModel):
    """
    One product entry within an order, captured at order time.

    ``qty`` is also accepted as ``quantity`` and ``product_id`` as ``id``.
    A missing or null quantity counts as 1.
    """
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    product_id: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("product_id", "id"),
        examples=[3],
    )
    name: str = Field(..., min_length=1, max_length=120, examples=["Pizza Margherita"])
    price: Decimal = Field(..., ge=0, examples=[9.5])
    qty: int = Field(
        1,
        ge=1,
        validation_alias=AliasChoices("qty", "quantity"),
        examples=[2],
    )
    note: Optional[str] = Field(None, max_length=300, examples=["no onions"])

    @field_validator("price")
    @classmethod
    def price_in_cents(cls, v):
        return _whole_cents(v)

    @field_validator("qty", mode="before")
    @classmethod
    def default_quantity(cls, v):
        return 1 if v is None else v

    @field_validator("note", mode="before")
    @classmethod
    def blank_note(cls, v):
        return _blank_to_none(v)


class LineItemResponse(BaseModel):
    product_id: Optional[int] = None
    name: str
    price: float
    qty: int
    note: Optional[str] = None


# =============================================================================
# PRODUCTS
# =============================================================================

class ProductCreate(BaseModel):
    """Request schema for creating or fully replacing a product."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=120, examples=["Pizza Margherita"])
    description: Optional[str] = Field(None, examples=["Tomato, mozzarella, basil"])
    price: Decimal = Field(..., ge=0, examples=[9.5])
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=80, examples=["pizza"])
    highlight: bool = False

    @field_validator("price")
    @classmethod
    def price_in_cents(cls, v):
        return _whole_cents(v)


class ProductUpdate(BaseModel):
    """Partial update; only the fields sent are changed."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=120)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=80)
    highlight: Optional[bool] = None

    @field_validator("name", "price", "highlight")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("price")
    @classmethod
    def price_in_cents(cls, v):
        return _whole_cents(v)


class ProductResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str]
    price: float
    image_url: Optional[str]
    category: Optional[str]
    highlight: bool
    created_at: Optional[datetime] = None


# =============================================================================
# COUPONS
# =============================================================================

class CouponCreate(BaseModel):
    """Request schema for creating a coupon. Codes are stored upper-case."""
    code: str = Field(..., min_length=1, max_length=40, examples=["SAVE10"])
    discount_percent: Decimal = Field(..., gt=0, le=100, examples=[10])

    @field_validator("code")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        code = v.strip().upper()
        if not code:
            raise ValueError("code must not be empty")
        return code

    @field_validator("discount_percent")
    @classmethod
    def percent_in_hundredths(cls, v):
        return _whole_cents(v)


class CouponResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    code: str
    discount_percent: float


class DeletedResponse(BaseModel):
    deleted: bool


# =============================================================================
# ORDERS
# =============================================================================

class CustomerInfo(BaseModel):
    """Customer contact block of an order."""
    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=100, examples=["Erika Mustermann"])
    phone: str = Field(..., min_length=1, max_length=40, examples=["0151 2345678"])
    address: str = Field(..., min_length=1, max_length=255, examples=["Hauptstr. 1"])
    postal_code: Optional[str] = Field(
        None,
        max_length=10,
        validation_alias=AliasChoices("postal_code", "plz"),
        examples=["10115"],
    )
    city: Optional[str] = Field(None, max_length=80, examples=["Berlin"])

    @field_validator("postal_code", "city", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)


class OrderCreate(BaseModel):
    """Request schema for submitting an order."""
    model_config = ConfigDict(str_strip_whitespace=True)

    customer: CustomerInfo
    items: List[LineItem] = Field(..., min_length=1)
    payment: Optional[str] = Field(None, max_length=50, examples=["cash", "card"])
    coupon: Optional[str] = Field(None, examples=["SAVE10"])
    delivery_method: Optional[DeliveryMethod] = Field(None, examples=["delivery"])

    @field_validator("payment", "coupon", "delivery_method", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)


class OrderCreateResponse(BaseModel):
    """Receipt returned after an order was accepted."""
    id: int
    total: float
    status: OrderStatus
    subtotal: float
    discount: float
    coupon: Optional[str] = None


class OrderResponse(BaseModel):
    """Response schema for a single stored order."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    customer_name: str
    customer_phone: str
    customer_address: str
    customer_postal_code: Optional[str]
    customer_city: Optional[str]
    items: List[LineItemResponse]
    payment_method: Optional[str]
    delivery_method: Optional[DeliveryMethod]
    coupon_code: Optional[str]
    subtotal: float
    discount: float
    total: float
    status: OrderStatus
    created_at: Optional[datetime] = None


# =============================================================================
# SHOP STATUS
# =============================================================================

class StatusUpdate(BaseModel):
    """Set or clear the override. An empty string clears it like null."""
    status: Optional[ShopOverride] = Field(None, examples=["open", "closed", None])

    @field_validator("status", mode="before")
    @classmethod
    def blank_status(cls, v):
        return _blank_to_none(v)


class StatusResponse(BaseModel):
    override: Optional[ShopOverride]
    open: bool
    next_open: Optional[datetime] = None


class StatusUpdateResponse(BaseModel):
    success: bool
    override: Optional[ShopOverride]


# =============================================================================
# CHECKOUT
# =============================================================================

class CheckoutRequest(BaseModel):
    items: List[LineItem] = Field(..., min_length=1)


class CheckoutResponse(BaseModel):
    url: str


# =============================================================================
# SYSTEM
# =============================================================================

class ConfigResponse(BaseModel):
    """Public configuration the frontend needs."""
    stripe_enabled: bool
    opening_hours_enforced: bool
    currency: str


class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    code: str
    detail: Optional[str] = None


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool
    database: str
    timestamp: datetime
