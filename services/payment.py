"""
Payment interface.

Providers form a closed set (PaymentProvider). Gateways are constructed by
the caller, each holding its own configured client, and handed to
PaymentService as a provider -> gateway mapping; dispatch is by provider tag.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Mapping, Protocol

from marshmallow import ValidationError

from services.exceptions import PaymentError, UnsupportedProvider

logger = logging.getLogger(__name__)


class PaymentProvider(str, Enum):
    MIDTRANS = "midtrans"


# banks a charge may be routed through
SUPPORTED_BANKS = ("bca", "bri", "bni", "permata", "mandiri", "gopay")

# gateway statuses that mean the charge did not go through
FAILED_STATUSES = ("deny", "cancel", "expire", "failure")


@dataclass(frozen=True)
class PaymentRequest:
    order_id: str
    amount: Decimal
    bank: str


@dataclass(frozen=True)
class PaymentResult:
    transaction_id: str
    order_id: str
    payment_vendor: str
    payment_type: str
    payment_action: str
    transaction_time: str
    status: str


class PaymentGateway(Protocol):
    def pay(self, request: PaymentRequest) -> PaymentResult:
        ...


class PaymentService:
    def __init__(self, gateways: Mapping[PaymentProvider, PaymentGateway]):
        self._gateways = dict(gateways)

    @property
    def providers(self):
        return sorted(p.value for p in self._gateways)

    def pay(self, provider, request: PaymentRequest) -> PaymentResult:
        try:
            provider = PaymentProvider(provider)
        except ValueError:
            raise UnsupportedProvider(f"Unknown payment provider: {provider}") from None
        gateway = self._gateways.get(provider)
        if gateway is None:
            raise UnsupportedProvider(f"Payment provider not configured: {provider.value}")
        if request.bank not in SUPPORTED_BANKS:
            raise UnsupportedProvider(f"Unsupported bank: {request.bank}")
        if request.amount <= 0:
            raise ValidationError({"amount": ["Must be greater than 0."]})

        result = gateway.pay(request)
        if result.status in FAILED_STATUSES:
            logger.warning("charge for order %s via %s ended with %s",
                           request.order_id, provider.value, result.status)
            raise PaymentError(f"Charge for order {request.order_id} ended with status {result.status}")
        logger.info("charged order %s via %s (%s)", request.order_id, provider.value, result.status)
        return result
