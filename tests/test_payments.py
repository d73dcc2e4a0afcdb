from decimal import Decimal

import pytest

from app.application import payments
from app.core.domain.errors import UnknownPaymentProviderError

fastapi = pytest.importorskip("fastapi")
TestClient = pytest.importorskip("fastapi.testclient").TestClient


def test_registry_lists_builtin_providers():
    assert payments.available_providers() == ["card", "paypal"]


@pytest.mark.parametrize("name,prefix", [("card", "card_"), ("paypal", "pp_"), ("PayPal", "pp_")])
def test_providers_approve_positive_amounts(name, prefix):
    result = payments.get_provider(name).process_payment(Decimal("25.00"))
    assert result.status == "approved"
    assert result.reference.startswith(prefix)
    assert result.amount == Decimal("25.00")


@pytest.mark.parametrize("name", ["card", "paypal"])
def test_providers_decline_non_positive_amounts(name):
    result = payments.get_provider(name).process_payment(Decimal("0"))
    assert result.status == "declined"
    assert result.reference is None


def test_card_declines_over_limit():
    provider = payments.CardPaymentProvider(limit=Decimal("100"))
    assert provider.process_payment(Decimal("100.01")).status == "declined"
    assert provider.process_payment(Decimal("100")).status == "approved"


def test_unknown_provider_raises():
    with pytest.raises(UnknownPaymentProviderError):
        payments.get_provider("bitcoin")


def test_default_provider_comes_from_config(monkeypatch):
    monkeypatch.setattr(payments, "DEFAULT_PROVIDER", "paypal")
    assert payments.get_provider().name == "paypal"


def test_custom_provider_can_be_registered(monkeypatch):
    class FreeProvider:
        name = "free"

        def process_payment(self, amount):
            return payments.PaymentResult(provider=self.name, amount=amount, status="approved")

    monkeypatch.setitem(payments.PROVIDER_REGISTRY, "free", FreeProvider)
    assert payments.process_payment(Decimal("1"), "free").provider == "free"


def test_payment_routes():
    from app.main import app

    client = TestClient(app)
    providers = client.get("/payments/providers").json()
    assert providers["providers"] == ["card", "paypal"]

    ok = client.post("/payments", json={"amount": "10.50", "provider": "paypal"})
    assert ok.status_code == 200
    assert ok.json()["status"] == "approved"
    assert ok.json()["provider"] == "paypal"

    missing = client.post("/payments", json={"amount": "1", "provider": "bitcoin"})
    assert missing.status_code == 404
