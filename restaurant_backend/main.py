"""
FastAPI Application Entry Point

Restaurant Ordering Backend.

Endpoints:
    - /api/products: Menu CRUD
    - /api/coupons: Coupon CRUD
    - /api/orders: Order intake and listing
    - /api/status: Opening state and administrative override
    - /api/pay/stripe/session: Stripe hosted checkout
    - /api/config: Public configuration for the frontend
    - /api/health: System health check

Version: 1.0.0
"""

import logging
from datetime import datetime
from typing import Optional
from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo

import uvicorn
from fastapi import FastAPI, Depends, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from restaurant_backend.core.config import get_settings, setup_logging
from restaurant_backend.database import get_db, init_db, engine
from restaurant_backend.errors import (
    CheckoutUnavailableError,
    ExternalServiceError,
    NotFoundError,
    RestaurantError,
)
from restaurant_backend.schemas import (
    CheckoutRequest,
    CheckoutResponse,
    ConfigResponse,
    CouponCreate,
    CouponResponse,
    DeletedResponse,
    ErrorResponse,
    HealthResponse,
    OrderCreate,
    OrderCreateResponse,
    OrderResponse,
    ProductCreate,
    ProductResponse,
    ProductUpdate,
    StatusResponse,
    StatusUpdate,
    StatusUpdateResponse,
)
from restaurant_backend.services import catalog
from restaurant_backend.services.orders import OrderIntakeService
from restaurant_backend.services.payment import BaseCheckoutService, get_checkout_service
from restaurant_backend.services.shop_status import Clock, ShopStatusStore

# Initialize configuration and logging
settings = get_settings()
setup_logging()
logger = logging.getLogger(__name__)


# =============================================================================
# APPLICATION LIFECYCLE
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info(f"Starting {settings.app_name}")
    logger.info(f"   Version: {settings.app_version}")
    logger.info(f"   Environment: {settings.env_mode.value}")
    logger.info(f"   Opening hours enforced: {settings.opening_hours_enforced}")
    logger.info("=" * 60)

    await init_db()

    checkout = get_checkout_service()
    logger.info(f"Checkout: {checkout.provider_name if checkout else 'disabled'}")

    missing = settings.validate_production_config()
    if missing:
        logger.warning(f"Missing production config: {missing}")

    logger.info("Application ready")

    yield  # Application runs

    # Shutdown
    logger.info("Shutting down...")
    await engine.dispose()
    logger.info("Cleanup complete")


# =============================================================================
# APPLICATION INSTANCE
# =============================================================================

app = FastAPI(
    title=settings.app_name,
    description="Products, coupons, orders and opening hours of a restaurant shop.",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

origins = settings.cors_origins_list
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials="*" not in origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_clock() -> Clock:
    """Current time in the shop's timezone."""
    tz = ZoneInfo(settings.shop_timezone)
    return lambda: datetime.now(tz)


def get_shop_status(
    db: AsyncSession = Depends(get_db),
    clock: Clock = Depends(get_clock),
) -> ShopStatusStore:
    return ShopStatusStore(db, settings.opening_hours, clock)


def get_order_service(
    db: AsyncSession = Depends(get_db),
    shop_status: ShopStatusStore = Depends(get_shop_status),
) -> OrderIntakeService:
    return OrderIntakeService(
        db,
        shop_status,
        enforce_opening_hours=settings.opening_hours_enforced,
        require_postal_address=settings.require_postal_address,
    )


# =============================================================================
# HEALTH & CONFIG ENDPOINTS
# =============================================================================

@app.get(
    "/api/health",
    response_model=HealthResponse,
    tags=["Health"],
    summary="System Health Check",
)
async def health_check(
    db: AsyncSession = Depends(get_db)
) -> HealthResponse:
    """Verify the database is reachable."""

    db_status = "healthy"
    try:
        await db.execute(select(func.now()))
    except Exception as e:
        db_status = "unhealthy"
        logger.error(f"Database health check failed: {e}")

    return HealthResponse(
        ok=db_status == "healthy",
        database=db_status,
        timestamp=datetime.now(),
    )


@app.get("/api/config", response_model=ConfigResponse, tags=["Health"])
async def public_config(
    checkout: Optional[BaseCheckoutService] = Depends(get_checkout_service),
) -> ConfigResponse:
    """Which optional features are switched on."""
    return ConfigResponse(
        stripe_enabled=checkout is not None,
        opening_hours_enforced=settings.opening_hours_enforced,
        currency=settings.stripe_currency,
    )


# =============================================================================
# PRODUCT ENDPOINTS
# =============================================================================

@app.get("/api/products", response_model=list[ProductResponse], tags=["Products"])
async def list_products(db: AsyncSession = Depends(get_db)) -> list[ProductResponse]:
    products = await catalog.list_products(db)
    return [ProductResponse.model_validate(p) for p in products]


@app.post(
    "/api/products",
    response_model=ProductResponse,
    status_code=201,
    responses=ERROR_RESPONSES,
    tags=["Products"],
)
async def create_product(
    product_data: ProductCreate,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    product = await catalog.create_product(db, product_data)
    return ProductResponse.model_validate(product)


@app.get("/api/products/{product_id}", response_model=ProductResponse, tags=["Products"])
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)) -> ProductResponse:
    return ProductResponse.model_validate(await catalog.get_product(db, product_id))


@app.put(
    "/api/products/{product_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    tags=["Products"],
)
async def replace_product(
    product_id: int,
    product_data: ProductCreate,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    product = await catalog.replace_product(db, product_id, product_data)
    return ProductResponse.model_validate(product)


@app.patch(
    "/api/products/{product_id}",
    response_model=ProductResponse,
    responses=ERROR_RESPONSES,
    tags=["Products"],
)
async def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: AsyncSession = Depends(get_db),
) -> ProductResponse:
    product = await catalog.update_product(db, product_id, product_data)
    return ProductResponse.model_validate(product)


@app.delete("/api/products/{product_id}", response_model=DeletedResponse, tags=["Products"])
async def delete_product(product_id: int, db: AsyncSession = Depends(get_db)) -> DeletedResponse:
    return DeletedResponse(deleted=await catalog.delete_product(db, product_id))


# =============================================================================
# COUPON ENDPOINTS
# =============================================================================

@app.get("/api/coupons", response_model=list[CouponResponse], tags=["Coupons"])
async def list_coupons(db: AsyncSession = Depends(get_db)) -> list[CouponResponse]:
    coupons = await catalog.list_coupons(db)
    return [CouponResponse.model_validate(c) for c in coupons]


@app.post(
    "/api/coupons",
    response_model=CouponResponse,
    status_code=201,
    responses={**ERROR_RESPONSES, 409: {"model": ErrorResponse}},
    tags=["Coupons"],
)
async def create_coupon(
    coupon_data: CouponCreate,
    db: AsyncSession = Depends(get_db),
) -> CouponResponse:
    """Create a coupon. A code that already exists yields 409."""
    coupon = await catalog.create_coupon(db, coupon_data)
    return CouponResponse.model_validate(coupon)


@app.get(
    "/api/coupons/lookup/{code}",
    response_model=CouponResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Coupons"],
)
async def lookup_coupon(code: str, db: AsyncSession = Depends(get_db)) -> CouponResponse:
    """Check a code the customer typed in, case-insensitively."""
    coupon = await catalog.find_coupon(db, code)
    if coupon is None:
        raise NotFoundError(f"Coupon {code} not found")
    return CouponResponse.model_validate(coupon)


@app.delete("/api/coupons/{coupon_id}", response_model=DeletedResponse, tags=["Coupons"])
async def delete_coupon(coupon_id: int, db: AsyncSession = Depends(get_db)) -> DeletedResponse:
    return DeletedResponse(deleted=await catalog.delete_coupon(db, coupon_id))


# =============================================================================
# ORDER ENDPOINTS
# =============================================================================

@app.post(
    "/api/orders",
    response_model=OrderCreateResponse,
    status_code=201,
    responses={**ERROR_RESPONSES, 403: {"model": ErrorResponse}},
    tags=["Orders"],
    summary="Submit Order",
)
async def create_order(
    order_data: OrderCreate,
    orders: OrderIntakeService = Depends(get_order_service),
) -> OrderCreateResponse:
    """
    Submit an order.

    Rejected with 403 ``shop_closed`` outside opening hours. An unknown
    coupon code is ignored and the order is priced without discount.
    """
    logger.info(f"Creating order for: {order_data.customer.name}")

    order = await orders.place_order(order_data)

    return OrderCreateResponse(
        id=order.id,
        total=order.total,
        status=order.status,
        subtotal=order.subtotal,
        discount=order.discount,
        coupon=order.coupon_code,
    )


@app.get("/api/orders", response_model=list[OrderResponse], tags=["Orders"])
async def list_orders(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=500),
    orders: OrderIntakeService = Depends(get_order_service),
) -> list[OrderResponse]:
    """Orders, newest first."""
    return [
        OrderResponse.model_validate(order)
        for order in await orders.list_orders(skip=skip, limit=limit)
    ]


@app.get(
    "/api/orders/{order_id}",
    response_model=OrderResponse,
    responses={404: {"model": ErrorResponse}},
    tags=["Orders"],
)
async def get_order(
    order_id: int,
    orders: OrderIntakeService = Depends(get_order_service),
) -> OrderResponse:
    return OrderResponse.model_validate(await orders.get_order(order_id))


# =============================================================================
# SHOP STATUS ENDPOINTS
# =============================================================================

@app.get("/api/status", response_model=StatusResponse, tags=["Status"])
async def get_status(
    shop_status: ShopStatusStore = Depends(get_shop_status),
) -> StatusResponse:
    snapshot = await shop_status.snapshot()
    return StatusResponse(
        override=snapshot.override,
        open=snapshot.open,
        next_open=snapshot.next_open,
    )


@app.post(
    "/api/status",
    response_model=StatusUpdateResponse,
    responses={400: {"model": ErrorResponse}},
    tags=["Status"],
)
async def set_status(
    payload: Optional[StatusUpdate] = None,
    shop_status: ShopStatusStore = Depends(get_shop_status),
) -> StatusUpdateResponse:
    """Force the shop open or closed; null returns it to the schedule."""
    override = await shop_status.set_override(payload.status if payload else None)
    return StatusUpdateResponse(success=True, override=override)


# =============================================================================
# CHECKOUT ENDPOINTS
# =============================================================================

@app.post(
    "/api/pay/stripe/session",
    response_model=CheckoutResponse,
    responses={
        **ERROR_RESPONSES,
        502: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
    tags=["Checkout"],
)
async def create_checkout_session(
    checkout_data: CheckoutRequest,
    checkout: Optional[BaseCheckoutService] = Depends(get_checkout_service),
) -> CheckoutResponse:
    """Create a hosted payment page and return its URL."""
    if checkout is None:
        raise CheckoutUnavailableError("Online payment is not available")

    base_url = settings.frontend_url.rstrip("/")
    result = await checkout.create_checkout_session(
        checkout_data.items,
        success_url=f"{base_url}/success",
        cancel_url=f"{base_url}/cancel",
    )

    if not result.success:
        raise ExternalServiceError(
            "Payment session could not be created",
            detail=result.error_message,
        )

    return CheckoutResponse(url=result.url)


# =============================================================================
# ERROR HANDLERS
# =============================================================================

@app.exception_handler(RestaurantError)
async def restaurant_error_handler(request: Request, exc: RestaurantError) -> JSONResponse:
    """Render an application error as ErrorResponse."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=exc.message,
            code=exc.code,
            detail=exc.detail,
        ).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report schema violations as 400 with a readable field list."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part != "body")
        problems.append(f"{location}: {error['msg']}" if location else error["msg"])

    logger.info(f"{request.method} {request.url.path} rejected: {problems}")

    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error="Invalid request",
            code="validation_error",
            detail="; ".join(problems),
        ).model_dump(),
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all exception handler."""
    logger.exception(f"Unhandled exception: {exc}")

    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal Server Error",
            code="internal_error",
            detail=str(exc) if settings.debug else None,
        ).model_dump(),
    )


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(
        "restaurant_backend.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level="debug" if settings.debug else "info",
    )
