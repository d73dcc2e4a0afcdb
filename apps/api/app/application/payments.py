"""
Payment providers behind a single capability.

A provider is anything with a `name` and `process_payment(amount)`; concrete
variants are registered by name and the default is picked from
PAYMENT_PROVIDER.

Usage:
    provider = get_provider("paypal")
    result = provider.process_payment(Decimal("12.50"))
"""

import logging
import os
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Dict, List, Optional, Protocol

from app.core.domain.errors import UnknownPaymentProviderError

logger = logging.getLogger("payments")

DEFAULT_PROVIDER = os.environ.get("PAYMENT_PROVIDER", "card")
CARD_PAYMENT_LIMIT = Decimal(os.environ.get("CARD_PAYMENT_LIMIT", "10000"))


@dataclass
class PaymentResult:
    provider: str
    amount: Decimal
    status: str
    reference: Optional[str] = None
    message: str = ""


class PaymentProvider(Protocol):
    name: str

    def process_payment(self, amount: Decimal) -> PaymentResult:
        ...


def _declined(provider: str, amount: Decimal, message: str) -> PaymentResult:
    return PaymentResult(provider=provider, amount=amount, status="declined", message=message)


class CardPaymentProvider:
    name = "card"

    def __init__(self, limit: Decimal = CARD_PAYMENT_LIMIT):
        self.limit = limit

    def process_payment(self, amount: Decimal) -> PaymentResult:
        if amount <= 0:
            return _declined(self.name, amount, "Amount must be positive")
        if amount > self.limit:
            return _declined(self.name, amount, f"Amount exceeds card limit of {self.limit}")
        return PaymentResult(
            provider=self.name,
            amount=amount,
            status="approved",
            reference=f"card_{secrets.token_hex(8)}",
            message=f"Processed card payment of {amount}",
        )


class PaypalPaymentProvider:
    name = "paypal"

    def process_payment(self, amount: Decimal) -> PaymentResult:
        if amount <= 0:
            return _declined(self.name, amount, "Amount must be positive")
        return PaymentResult(
            provider=self.name,
            amount=amount,
            status="approved",
            reference=f"pp_{secrets.token_hex(8)}",
            message=f"Processed PayPal payment of {amount}",
        )


ProviderFactory = Callable[[], PaymentProvider]

# Registry: provider name -> factory
PROVIDER_REGISTRY: Dict[str, ProviderFactory] = {}


def register_provider(name: str, factory: ProviderFactory) -> None:
    PROVIDER_REGISTRY[name] = factory


def get_provider(name: Optional[str] = None) -> PaymentProvider:
    key = (name or DEFAULT_PROVIDER).lower()
    factory = PROVIDER_REGISTRY.get(key)
    if factory is None:
        raise UnknownPaymentProviderError(key)
    return factory()


def available_providers() -> List[str]:
    return sorted(PROVIDER_REGISTRY)


def process_payment(amount: Decimal, provider_name: Optional[str] = None) -> PaymentResult:
    provider = get_provider(provider_name)
    result = provider.process_payment(amount)
    logger.info(
        "Payment processed",
        extra={"provider": result.provider, "status": result.status, "reference": result.reference},
    )
    return result


register_provider(CardPaymentProvider.name, CardPaymentProvider)
register_provider(PaypalPaymentProvider.name, PaypalPaymentProvider)
