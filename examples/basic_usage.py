"""Example usage of the Google Shopping feed registry."""

import json
from google_shopping_feed import FeedConfig, FeedContext, FeedExporter, build_registry
from google_shopping_feed.catalog import Catalog
from google_shopping_feed.taxonomy import TaxonomyClient


def main():
    """Example: Build feed records for a catalog export."""

    config = FeedConfig(store={"brand": "Ann Arbor Tees"})
    with TaxonomyClient(config.taxonomy) as taxonomy:
        run(build_registry(config, taxonomy))


def run(registry):
    """Customize the registry and export the sample catalog."""
    # Add or replace fields; the last definition of a name wins
    registry.define("availability").constant("preorder")

    @registry.define("mpn").compute
    def mpn(variant):
        return variant.sku

    exporter = FeedExporter(registry)
    exporter.save_overrides(71, {"condition": "refurbished"})

    catalog = Catalog.from_file("examples/catalog.json")
    context = FeedContext(request_url="https://annarbortees.com/admin/google_products")

    records = exporter.export(catalog.products(), context)
    print(f"Built {len(records)} records")
    print(json.dumps(records[0], indent=2))

    print("\nEditable fields for variant 71:")
    print(exporter.render_form(71))


if __name__ == "__main__":
    main()
