"""
Pricing strategies (Strategy pattern).

The lifecycle manager holds a ``PricingStrategy`` and calls ``price_cents()``
to derive the payment for a new booking. To add a new scheme (surge pricing,
walker-specific rates), implement the protocol and inject it.

Pricing must stay deterministic: no I/O, no randomness, no clock.
"""

import math
from typing import Protocol

from dogwalk.domain.models import BookingRequest


class PricingStrategy(Protocol):
    """Interface for computing the price of a walk in the smallest currency unit."""

    def price_cents(self, req: BookingRequest) -> int: ...


class StandardPricingStrategy:
    """Default pricing: base walk + per extra dog + per extra time block.

    Examples (defaults):
        - 1 dog, 30 min:   1500
        - 2 dogs, 30 min:  1500 + 500 = 2000
        - 1 dog, 60 min:   1500 + 2 * 400 = 2300
    """

    def __init__(
        self,
        base_cents: int = 1500,
        extra_dog_cents: int = 500,
        included_minutes: int = 30,
        block_minutes: int = 15,
        block_cents: int = 400,
    ) -> None:
        self.base_cents = base_cents
        self.extra_dog_cents = extra_dog_cents
        self.included_minutes = included_minutes
        self.block_minutes = block_minutes
        self.block_cents = block_cents

    def price_cents(self, req: BookingRequest) -> int:
        price = self.base_cents
        if len(req.dog_ids) > 1:
            price += (len(req.dog_ids) - 1) * self.extra_dog_cents
        extra_minutes = req.duration_minutes - self.included_minutes
        if extra_minutes > 0:
            price += math.ceil(extra_minutes / self.block_minutes) * self.block_cents
        return price
