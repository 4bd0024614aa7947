"""
Checkout Service Abstract Base Class

Defines the interface contract for hosted-checkout providers. The shop only
needs one operation: turn a list of line items into a payment session the
customer is redirected to.

Design Pattern: Strategy Pattern
    - The HTTP layer depends on BaseCheckoutService only
    - Tests plug in a fake implementation
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from restaurant_backend.services.pricing import PricedItem, to_minor_units


@dataclass
class CheckoutSessionResult:
    """
    Standardized result from creating a checkout session.

    Attributes:
        success: Whether the provider created the session
        url: Redirect URL of the hosted payment page
        session_id: Provider identifier of the session (Stripe: cs_xxx)
        error_message: Error description if the call failed
        error_code: Machine-readable error code
        response_time_ms: Time taken by the provider call
    """
    success: bool
    url: Optional[str] = None
    session_id: Optional[str] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0


def build_line_items(items: Iterable[PricedItem], currency: str) -> list[dict]:
    """
    Map order line items onto provider line items.

    Unit prices are sent in the smallest currency unit (cents), rounded
    half-up.

    Example:
        >>> build_line_items([LineItem(name="Cola", price=2.5, qty=2)], "eur")
        [{'price_data': {'currency': 'eur', 'product_data': {'name': 'Cola'},
          'unit_amount': 250}, 'quantity': 2}]
    """
    return [
        {
            "price_data": {
                "currency": currency,
                "product_data": {"name": item.name},
                "unit_amount": to_minor_units(item.price),
            },
            "quantity": item.qty,
        }
        for item in items
    ]


class BaseCheckoutService(ABC):
    """
    Abstract base class for checkout services.

    Implementations never raise for provider failures; they report them in
    the returned CheckoutSessionResult and leave the HTTP mapping to the
    caller.
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """
        Return the name of the payment provider.

        Returns:
            str: Provider name (e.g., "stripe")
        """
        pass

    @abstractmethod
    async def create_checkout_session(
        self,
        items: list[PricedItem],
        success_url: str,
        cancel_url: str,
    ) -> CheckoutSessionResult:
        """
        Request a hosted payment page for the given items.

        Args:
            items: Line items with name, price and qty
            success_url: Where the provider sends the customer after paying
            cancel_url: Where the provider sends the customer on abort

        Returns:
            CheckoutSessionResult: Standardized result object
        """
        pass
