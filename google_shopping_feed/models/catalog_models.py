"""Pydantic models for the store catalog read model."""

from typing import Optional, List
from decimal import Decimal
from pydantic import BaseModel, Field, PrivateAttr, model_validator


class OptionValue(BaseModel):
    """A variant's value for one option type (e.g. "Red" for "apparel-color")."""
    id: int
    name: str
    presentation: str
    option_type: str = Field(..., description="Name of the option type, e.g. 'apparel-color'")


class Image(BaseModel):
    """Image attached to a variant or a product."""
    id: int
    url: str
    thumbnail: bool = False
    option_value_id: Optional[int] = None
    alt: Optional[str] = None


class Variant(BaseModel):
    """A purchasable configuration of a product."""
    id: int
    sku: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    price: Decimal
    currency: str = "USD"
    weight: Decimal = Decimal("0.0")
    is_master: bool = False
    product_id: Optional[int] = None
    option_values: List[OptionValue] = Field(default_factory=list)
    images: List[Image] = Field(default_factory=list)

    # Set by the owning Product; not a field, so never serialized or compared.
    _product: Optional["Product"] = PrivateAttr(default=None)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Variant):
            return NotImplemented
        return self.model_dump() == other.model_dump()

    @property
    def product(self) -> Optional["Product"]:
        return self._product

    def option_value_for(self, option_type: str) -> Optional[OptionValue]:
        """Return the option value under the given option type, if any."""
        for option_value in self.option_values:
            if option_value.option_type == option_type:
                return option_value
        return None

    @property
    def product_images(self) -> List[Image]:
        return self.product.images if self.product is not None else []


class Product(BaseModel):
    """A catalog product with its master and non-master variants."""
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    images: List[Image] = Field(default_factory=list)
    variants: List[Variant] = Field(default_factory=list)

    @model_validator(mode="after")
    def _link_variants(self) -> "Product":
        for variant in self.variants:
            variant._product = self
            if variant.product_id is None:
                variant.product_id = self.id
            if variant.name is None:
                variant.name = self.name
            if variant.description is None:
                variant.description = self.description
        return self

