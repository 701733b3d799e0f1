"""Subscription store backends module."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class LineItem:
    """Line item of a subscription."""

    id: int
    product_id: int | None = None
    name: str = ""


@dataclass
class Subscription:
    """WooCommerce subscription."""

    id: int
    billing_email: str
    status: str
    created_at: datetime
    items: list[LineItem] = field(default_factory=list)


@dataclass
class Product:
    """Product with its Freya classification."""

    id: int
    product_type: str | None = None
