"""Configuration management for the Google Shopping feed."""

from typing import Optional, Dict
from pydantic import BaseModel, Field, ConfigDict


DEFAULT_TAXONOMY_URL = "http://www.google.com/basepages/producttype/taxonomy.en-US.txt"


class StoreConfig(BaseModel):
    """Store identity used in feed records."""
    brand: str = Field(..., description="Brand name sent with every product")
    storefront_url: Optional[str] = Field(
        None,
        description="Storefront base URL used for links when no request context is available"
    )


class FeedDefaults(BaseModel):
    """Constant feed attributes."""
    availability: str = Field("in stock", description="Availability sent for every variant")
    channel: str = Field("online", description="Content API channel")
    content_language: str = Field("en", description="Two-letter ISO 639-1 language code")
    target_country: str = Field("US", description="ISO 3166-1 alpha-2 target country")
    size_system: str = Field("US", description="Size system for apparel")


class ShippingConfig(BaseModel):
    """Flat shipping prices per destination country."""
    currency: str = Field("USD", description="Currency of all shipping prices")
    countries: list[str] = Field(
        default_factory=lambda: ["US", "CA", "AU", "FR", "UK", "DE"],
        description="Countries listed in the shipping attribute"
    )
    rates: Dict[str, str] = Field(
        default_factory=lambda: {"US": "2.99", "CA": "7.99"},
        description="Country-specific shipping prices"
    )
    default_rate: str = Field("11.99", description="Price for listed countries without a rate")
    weight_unit: str = Field("ounces", description="Unit of variant weights")


class TaxonomyConfig(BaseModel):
    """Remote product taxonomy settings."""
    url: str = Field(DEFAULT_TAXONOMY_URL, description="Google product taxonomy text file")
    timeout_seconds: float = Field(10.0, gt=0, description="HTTP timeout")
    cache_ttl_seconds: int = Field(3600, gt=0, description="Cache TTL in seconds")
    stale_ttl_seconds: int = Field(86400, gt=0, description="Max age for stale cache fallback")


class FeedConfig(BaseModel):
    """Main configuration for the Google Shopping feed."""
    store: StoreConfig
    feed: FeedDefaults = Field(default_factory=FeedDefaults)
    shipping: ShippingConfig = Field(default_factory=ShippingConfig)
    taxonomy: TaxonomyConfig = Field(default_factory=TaxonomyConfig)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "store": {
                    "brand": "Ann Arbor Tees",
                    "storefront_url": "https://annarbortees.com"
                },
                "feed": {
                    "availability": "in stock",
                    "channel": "online",
                    "content_language": "en",
                    "target_country": "US",
                    "size_system": "US"
                },
                "shipping": {
                    "currency": "USD",
                    "countries": ["US", "CA", "AU", "FR", "UK", "DE"],
                    "rates": {"US": "2.99", "CA": "7.99"},
                    "default_rate": "11.99"
                },
                "taxonomy": {
                    "cache_ttl_seconds": 3600
                }
            }
        }
    )
