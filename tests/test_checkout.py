from types import SimpleNamespace

import pytest
import stripe

from restaurant_backend.core.config import get_settings
from restaurant_backend.main import app
from restaurant_backend.schemas import LineItem
from restaurant_backend.services.payment import (
    BaseCheckoutService,
    CheckoutSessionResult,
    StripeCheckoutService,
    build_line_items,
    get_checkout_service,
    reset_checkout_service,
)

ITEMS = [
    {"name": "Pizza Margherita", "price": 9.99, "qty": 2},
    {"name": "Cola", "price": 2.5},
]


class FakeCheckoutService(BaseCheckoutService):
    def __init__(self, result: CheckoutSessionResult):
        self.result = result
        self.calls = []

    @property
    def provider_name(self) -> str:
        return "fake"

    async def create_checkout_session(self, items, success_url, cancel_url):
        self.calls.append((items, success_url, cancel_url))
        return self.result


@pytest.fixture
def stripe_settings(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_test_123")
    get_settings.cache_clear()
    reset_checkout_service()
    yield get_settings()
    monkeypatch.delenv("STRIPE_SECRET_KEY")
    get_settings.cache_clear()
    reset_checkout_service()


def test_line_items_use_minor_units():
    items = [LineItem.model_validate(item) for item in ITEMS]

    assert build_line_items(items, "eur") == [
        {
            "price_data": {
                "currency": "eur",
                "product_data": {"name": "Pizza Margherita"},
                "unit_amount": 999,
            },
            "quantity": 2,
        },
        {
            "price_data": {
                "currency": "eur",
                "product_data": {"name": "Cola"},
                "unit_amount": 250,
            },
            "quantity": 1,
        },
    ]


async def test_checkout_disabled_without_key(client):
    response = await client.post("/api/pay/stripe/session", json={"items": ITEMS})

    assert response.status_code == 503
    assert response.json()["code"] == "checkout_unavailable"

    config = (await client.get("/api/config")).json()
    assert config["stripe_enabled"] is False
    assert config["opening_hours_enforced"] is True


async def test_checkout_returns_redirect_url(client):
    fake = FakeCheckoutService(
        CheckoutSessionResult(success=True, url="https://pay.example.com/cs_1", session_id="cs_1")
    )
    app.dependency_overrides[get_checkout_service] = lambda: fake

    response = await client.post("/api/pay/stripe/session", json={"items": ITEMS})

    assert response.status_code == 200
    assert response.json() == {"url": "https://pay.example.com/cs_1"}
    items, success_url, cancel_url = fake.calls[0]
    assert [item.qty for item in items] == [2, 1]
    assert success_url == "https://shop.example.com/success"
    assert cancel_url == "https://shop.example.com/cancel"
    assert (await client.get("/api/config")).json()["stripe_enabled"] is True


async def test_checkout_provider_failure(client):
    fake = FakeCheckoutService(
        CheckoutSessionResult(success=False, error_message="Payment processing error", error_code="stripe_error")
    )
    app.dependency_overrides[get_checkout_service] = lambda: fake

    response = await client.post("/api/pay/stripe/session", json={"items": ITEMS})

    assert response.status_code == 502
    assert response.json()["code"] == "external_service_error"


async def test_checkout_requires_items(client):
    response = await client.post("/api/pay/stripe/session", json={"items": []})
    assert response.status_code == 400


def test_factory_returns_none_without_key():
    reset_checkout_service()
    assert get_checkout_service() is None


def test_factory_returns_stripe_with_key(stripe_settings):
    service = get_checkout_service()

    assert isinstance(service, StripeCheckoutService)
    assert service.provider_name == "stripe"


async def test_stripe_session_request(stripe_settings, monkeypatch):
    captured = {}

    def fake_create(**params):
        captured.update(params)
        return SimpleNamespace(id="cs_test_1", url="https://checkout.stripe.com/c/pay/cs_test_1")

    monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
    items = [LineItem.model_validate(item) for item in ITEMS]

    result = await StripeCheckoutService().create_checkout_session(
        items, success_url="https://s/ok", cancel_url="https://s/cancel"
    )

    assert result.success is True
    assert result.url == "https://checkout.stripe.com/c/pay/cs_test_1"
    assert result.session_id == "cs_test_1"
    assert captured["mode"] == "payment"
    assert captured["line_items"] == build_line_items(items, stripe_settings.stripe_currency)
    assert captured["success_url"] == "https://s/ok"


async def test_stripe_connection_error_is_reported(stripe_settings, monkeypatch):
    def failing_create(**params):
        raise stripe.APIConnectionError("network down")

    monkeypatch.setattr(stripe.checkout.Session, "create", failing_create)
    items = [LineItem.model_validate(item) for item in ITEMS]

    result = await StripeCheckoutService().create_checkout_session(
        items, success_url="https://s/ok", cancel_url="https://s/cancel"
    )

    assert result.success is False
    assert result.error_code == "connection_error"
    assert result.url is None


def test_stripe_service_requires_key():
    get_settings.cache_clear()
    with pytest.raises(ValueError):
        StripeCheckoutService()
