"""
Checkout Service Factory

Provides a single entry point for obtaining the checkout service.

Usage:
    from restaurant_backend.services.payment import get_checkout_service

    checkout = get_checkout_service()
    if checkout is None:
        # Online payment disabled (no STRIPE_SECRET_KEY)

Switching:
    - STRIPE_SECRET_KEY set   -> StripeCheckoutService
    - STRIPE_SECRET_KEY unset -> None (checkout disabled)
"""

import logging
from functools import lru_cache
from typing import Optional

from restaurant_backend.core.config import get_settings
from restaurant_backend.services.payment.base import (
    BaseCheckoutService,
    CheckoutSessionResult,
    build_line_items,
)
from restaurant_backend.services.payment.stripe import StripeCheckoutService

logger = logging.getLogger(__name__)


@lru_cache()
def get_checkout_service() -> Optional[BaseCheckoutService]:
    """
    Get the configured checkout service instance.

    The instance is cached so the SDK is configured once per process.

    Returns:
        BaseCheckoutService or None when no provider key is configured
    """
    settings = get_settings()

    if not settings.stripe_enabled:
        logger.info("Checkout Service: disabled (no STRIPE_SECRET_KEY)")
        return None

    logger.info(f"Checkout Service: Using StripeCheckoutService ({settings.env_mode.value} mode)")
    return StripeCheckoutService()


def reset_checkout_service() -> None:
    """
    Clear the cached checkout service instance.

    The next call to get_checkout_service() re-reads the settings.
    """
    get_checkout_service.cache_clear()
    logger.debug("Checkout service cache cleared")


__all__ = [
    "get_checkout_service",
    "reset_checkout_service",
    "BaseCheckoutService",
    "CheckoutSessionResult",
    "StripeCheckoutService",
    "build_line_items",
]
