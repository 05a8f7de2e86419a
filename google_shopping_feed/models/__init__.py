"""Data models for the store catalog and Google Shopping feed values."""

from .catalog_models import (
    OptionValue,
    Image,
    Variant,
    Product,
)
from .feed_models import (
    FeedPrice,
    ShippingWeight,
    ShippingEntry,
)

__all__ = [
    "OptionValue",
    "Image",
    "Variant",
    "Product",
    "FeedPrice",
    "ShippingWeight",
    "ShippingEntry",
]
