"""Read-only catalog of products loaded from a JSON export."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .models.catalog_models import Product, Variant


class Catalog:
    """Products and variants indexed by id."""

    def __init__(self, products: Iterable[Union[Product, Dict[str, Any]]] = ()):
        self._products: Dict[int, Product] = {}
        self._variants: Dict[int, Variant] = {}
        for product in products:
            self.add(product)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Catalog":
        """Load a JSON list of products, or an object with a "products" list."""
        with open(path) as f:
            data = json.load(f)
        if isinstance(data, dict):
            data = data.get("products", [])
        return cls(data)

    def add(self, product: Union[Product, Dict[str, Any]]) -> Product:
        product = product if isinstance(product, Product) else Product(**product)
        self._products[product.id] = product
        for variant in product.variants:
            self._variants[variant.id] = variant
        return product

    def products(self) -> List[Product]:
        return list(self._products.values())

    def get_product(self, product_id: int) -> Optional[Product]:
        return self._products.get(product_id)

    def get_variant(self, variant_id: int) -> Optional[Variant]:
        return self._variants.get(variant_id)
