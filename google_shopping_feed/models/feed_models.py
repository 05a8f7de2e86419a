"""Pydantic models for structured Google Shopping attributes."""

from pydantic import BaseModel


class FeedPrice(BaseModel):
    """Content API Price."""
    value: str
    currency: str


class ShippingWeight(BaseModel):
    """Content API ProductShippingWeight."""
    unit: str
    value: str


class ShippingEntry(BaseModel):
    """Content API ProductShipping entry for one destination country."""
    country: str
    price: FeedPrice
