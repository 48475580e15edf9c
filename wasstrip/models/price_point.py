# wasstrip/models/price_point.py

"""Temporal price observation for price history tracking."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PricePoint:
    """A single recorded price for a product at a point in time."""

    product_id: str
    price: float
    price_per_wash: float
    recorded_at: datetime
