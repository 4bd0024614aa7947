"""
Stripe Checkout Service Implementation

Creates Stripe hosted checkout sessions with the official Stripe Python SDK.
Active whenever STRIPE_SECRET_KEY is configured.

Security Notes:
    - Never log the secret key
    - Payment confirmation (webhooks) is not handled here
"""

import asyncio
import logging
from datetime import datetime

import stripe

from restaurant_backend.core.config import get_settings
from restaurant_backend.services.payment.base import (
    BaseCheckoutService,
    CheckoutSessionResult,
    build_line_items,
)
from restaurant_backend.services.pricing import PricedItem

logger = logging.getLogger(__name__)


class StripeCheckoutService(BaseCheckoutService):
    """
    Stripe hosted checkout.

    The SDK is synchronous, so the API call runs in a worker thread to keep
    the event loop free for other requests.

    Example:
        >>> service = StripeCheckoutService()
        >>> result = await service.create_checkout_session(
        ...     items, success_url=".../success", cancel_url=".../cancel"
        ... )
        >>> result.url
        'https://checkout.stripe.com/c/pay/cs_test_...'
    """

    def __init__(self):
        """
        Initialize Stripe with API key from settings.

        Raises:
            ValueError: If STRIPE_SECRET_KEY is not configured
        """
        settings = get_settings()

        if not settings.stripe_secret_key:
            raise ValueError(
                "STRIPE_SECRET_KEY is required for Stripe checkout. "
                "Set it in your .env file or environment variables."
            )

        stripe.api_key = settings.stripe_secret_key
        self._currency = settings.stripe_currency

        logger.info(f"StripeCheckoutService initialized (currency={self._currency})")

    @property
    def provider_name(self) -> str:
        """Return the provider name."""
        return "stripe"

    async def create_checkout_session(
        self,
        items: list[PricedItem],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        start_time = datetime.now()
        line_items = build_line_items(items, self._currency)

        logger.info(f"Stripe: Creating checkout session ({len(line_items)} line items)")

        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                mode="payment",
                line_items=line_items,
                success_url=success_url,
                cancel_url=cancel_url,
            )

            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.info(f"Stripe: Checkout session created - {session.id}")

            return CheckoutSessionResult(
                success=True,
                url=session.url,
                session_id=session.id,
                response_time_ms=elapsed_ms,
            )

        except stripe.AuthenticationError as e:
            # API key issues
            logger.critical(f"Stripe: Authentication failed - {e}")

            return CheckoutSessionResult(
                success=False,
                error_message="Payment service configuration error",
                error_code="authentication_error",
            )

        except stripe.APIConnectionError as e:
            # Network issues
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Stripe: Connection error - {e}")

            return CheckoutSessionResult(
                success=False,
                error_message="Payment service temporarily unavailable",
                error_code="connection_error",
                response_time_ms=elapsed_ms,
            )

        except stripe.StripeError as e:
            # Invalid parameters and any other provider error
            elapsed_ms = (datetime.now() - start_time).total_seconds() * 1000
            logger.error(f"Stripe: Error - {e}")

            return CheckoutSessionResult(
                success=False,
                error_message="Payment processing error",
                error_code="stripe_error",
                response_time_ms=elapsed_ms,
            )
