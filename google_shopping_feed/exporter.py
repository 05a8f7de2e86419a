"""Builds Google Shopping feed records from catalog products."""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .context import FeedContext
from .models.catalog_models import Product, Variant
from .registry import FieldMappingRegistry
from .storage import BaseOverrideStore, InMemoryOverrideStore

logger = logging.getLogger("google_shopping_feed")


class FeedExporter:
    """
    Applies a FieldMappingRegistry to catalog variants.

    This class handles:
    - Choosing which variants of a product are sent to Google
    - Looking up administrator overrides for stored columns
    - Building one feed record per variant
    """

    def __init__(
        self,
        registry: FieldMappingRegistry,
        store: Optional[BaseOverrideStore] = None,
    ):
        """
        Initialize the exporter.

        Args:
            registry: Field mappings to apply
            store: Override store for stored columns (in-memory if omitted)
        """
        self.registry = registry
        self.store = store or InMemoryOverrideStore()

    def feed_variants(self, product: Product) -> List[Variant]:
        """Non-master variants, or the master when the product has no options."""
        variants = [v for v in product.variants if not v.is_master]
        if variants:
            return variants
        return [v for v in product.variants if v.is_master]

    def overrides_for(self, variant_id: int) -> Dict[str, Any]:
        return self.store.get(variant_id) or {}

    def build_record(self, variant: Variant, context: Optional[FeedContext] = None) -> Dict[str, Any]:
        """
        Build the feed record for one variant.

        Args:
            variant: Variant to describe
            context: Request context, or None outside a request

        Returns:
            Mapping of Google attribute name to value
        """
        return self.registry.resolve(variant, context, self.overrides_for(variant.id))

    def export_product(self, product: Product, context: Optional[FeedContext] = None) -> List[Dict[str, Any]]:
        return [self.build_record(v, context) for v in self.feed_variants(product)]

    def export(self, products: Iterable[Product], context: Optional[FeedContext] = None) -> List[Dict[str, Any]]:
        """
        Build feed records for every product.

        Args:
            products: Catalog products
            context: Request context, or None outside a request

        Returns:
            List of feed records, one per exported variant
        """
        records: List[Dict[str, Any]] = []
        for product in products:
            records.extend(self.export_product(product, context))
        logger.info("feed_exported", extra={"records": len(records)})
        return records

    def save_overrides(self, variant_id: int, values: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Merge administrator overrides into the stored ones.

        A None or blank value removes the override so the default applies again.

        Raises:
            UnknownFieldError: if a key is not a stored column
            InvalidOverrideError: if a value is not accepted by the field's widget
        """
        cleaned = self.registry.validate_overrides(values)
        merged = self.overrides_for(variant_id)
        for name, value in cleaned.items():
            if value is None:
                merged.pop(name, None)
            else:
                merged[name] = value
        self.store.set(variant_id, merged)
        logger.info("overrides_saved", extra={"variant_id": variant_id, "fields": sorted(cleaned)})
        return merged

    def render_form(self, variant_id: int) -> str:
        """HTML editors for the variant's stored columns."""
        return self.registry.render_form(self.overrides_for(variant_id))
