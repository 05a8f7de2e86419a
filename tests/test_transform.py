import httpx

from google_shopping_feed.config import FeedConfig
from google_shopping_feed.context import FeedContext
from google_shopping_feed.google_feed import build_registry, from_option_type
from google_shopping_feed.models.catalog_models import Product
from google_shopping_feed.taxonomy import TaxonomyClient


def make_config(**overrides):
    data = {
        "store": {"brand": "Ann Arbor Tees"},
    }
    data.update(overrides)
    return FeedConfig(**data)


def offline_taxonomy():
    def handler(_request):
        return httpx.Response(503)

    return TaxonomyClient(client=httpx.Client(transport=httpx.MockTransport(handler)))


def make_registry(config=None):
    return build_registry(config or make_config(), taxonomy=offline_taxonomy())


def sample_product():
    return {
        "id": 7,
        "name": "Bear Tee",
        "slug": "bear-tee",
        "description": "Soft cotton",
        "images": [
            {"id": 100, "url": "https://cdn.example.com/product-any.jpg", "thumbnail": True},
            {"id": 101, "url": "https://cdn.example.com/product-large.jpg", "thumbnail": False, "option_value_id": 1},
            {"id": 102, "url": "https://cdn.example.com/product-red.jpg", "thumbnail": True, "option_value_id": 1},
        ],
        "variants": [
            {"id": 70, "sku": "BEAR", "price": "19.99", "is_master": True},
            {
                "id": 71,
                "sku": "BEAR-RED-S",
                "price": "19.99",
                "weight": "5.5",
                "option_values": [
                    {"id": 1, "name": "red", "presentation": "Red", "option_type": "apparel-color"},
                    {"id": 2, "name": "s", "presentation": "S", "option_type": "apparel-size"},
                    {"id": 3, "name": "ladies", "presentation": "Ladies", "option_type": "apparel-style"},
                ],
                "images": [
                    {"id": 200, "url": "https://cdn.example.com/variant-plain.jpg", "thumbnail": True},
                ],
            },
            {
                "id": 72,
                "sku": "BEAR-BLUE-M",
                "price": "21.00",
                "currency": "CAD",
                "option_values": [
                    {"id": 4, "name": "blue", "presentation": "Blue", "option_type": "apparel-color"},
                    {"id": 5, "name": "mens", "presentation": "Mens", "option_type": "apparel-style"},
                ],
            },
        ],
    }


def variants():
    product = Product(**sample_product())
    return {v.id: v for v in product.variants}


def test_identity_fields_come_from_variant():
    registry = make_registry()
    variant = variants()[71]
    assert registry.resolve_field("offer_id", variant) == "BEAR-RED-S"
    assert registry.resolve_field("title", variant) == "Bear Tee"
    assert registry.resolve_field("description", variant) == "Soft cotton"


def test_item_group_id_absent_for_master():
    registry = make_registry()
    by_id = variants()
    assert registry.resolve_field("item_group_id", by_id[70]) is None
    assert registry.resolve_field("item_group_id", by_id[71]) == 7
    assert "item_group_id" not in registry.resolve(by_id[70])


def test_option_type_fields():
    registry = make_registry()
    by_id = variants()
    assert registry.resolve_field("color", by_id[71]) == "Red"
    assert registry.resolve_field("sizes", by_id[71]) == ["S"]
    assert registry.resolve_field("sizes", by_id[72]) is None
    assert registry.resolve_field("color", by_id[70]) is None


def test_gender_normalization():
    registry = make_registry()
    by_id = variants()
    assert registry.resolve_field("gender", by_id[71]) == "Ladies"
    assert registry.resolve_field("gender", by_id[72]) == "unisex"
    assert registry.resolve_field("gender", by_id[70]) == "unisex"


def test_from_option_type_transform_receives_none():
    seen = []
    resolver = from_option_type("apparel-fit", lambda value: seen.append(value) or "fallback")
    assert resolver(variants()[71]) == "fallback"
    assert seen == [None]


def test_price_and_weight_are_strings():
    registry = make_registry()
    by_id = variants()
    assert registry.resolve_field("price", by_id[72]) == {"value": "21.00", "currency": "CAD"}
    assert registry.resolve_field("shipping_weight", by_id[71]) == {"unit": "ounces", "value": "5.5"}


def test_shipping_uses_fixed_country_list():
    registry = make_registry()
    shipping = registry.resolve_field("shipping", variants()[71])
    by_country = {entry["country"]: entry["price"] for entry in shipping}
    assert list(by_country) == ["US", "CA", "AU", "FR", "UK", "DE"]
    assert by_country["CA"] == {"value": "7.99", "currency": "USD"}
    assert by_country["US"]["value"] == "2.99"
    assert by_country["DE"]["value"] == "11.99"
    assert "JP" not in by_country


def test_image_link_prefers_option_value_thumbnail():
    registry = make_registry()
    by_id = variants()
    assert registry.resolve_field("image_link", by_id[71]) == "https://cdn.example.com/product-red.jpg"
    assert registry.resolve_field("image_link", by_id[72]) == "https://cdn.example.com/product-any.jpg"


def test_image_link_falls_back_to_variant_thumbnail():
    data = sample_product()
    data["images"] = []
    product = Product(**data)
    registry = make_registry()
    assert registry.resolve_field("image_link", product.variants[1]) == "https://cdn.example.com/variant-plain.jpg"
    assert registry.resolve_field("image_link", product.variants[2]) is None


def test_link_uses_explicit_context():
    registry = make_registry()
    variant = variants()[71]
    context = FeedContext(request_url="https://shop.example.com/admin/products?page=2")
    assert registry.resolve_field("link", variant, context) == "https://shop.example.com/products/bear-tee"


def test_link_without_context():
    variant = variants()[71]
    assert make_registry().resolve_field("link", variant) is None

    config = make_config(store={"brand": "Ann Arbor Tees", "storefront_url": "https://annarbortees.com"})
    assert make_registry(config).resolve_field("link", variant) == "https://annarbortees.com/products/bear-tee"


def test_stored_columns_use_defaults_and_overrides():
    registry = make_registry()
    variant = variants()[71]
    record = registry.resolve(variant)
    assert record["condition"] == "new"
    assert record["size_type"] == "regular"
    assert record["age_group"] == "adult"
    assert record["product_type"] == "T-Shirt"
    assert "adult" not in record
    assert "google_product_category" not in record

    record = registry.resolve(variant, overrides={"condition": "used", "adult": True})
    assert record["condition"] == "used"
    assert record["adult"] is True


def test_constants():
    record = make_registry().resolve(variants()[71])
    assert record["availability"] == "in stock"
    assert record["channel"] == "online"
    assert record["content_language"] == "en"
    assert record["target_country"] == "US"
    assert record["brand"] == "Ann Arbor Tees"
    assert record["size_system"] == "US"


def test_variants_compare_by_fields():
    first = Product(**sample_product()).variants[1]
    second = Product(**sample_product()).variants[1]
    assert first == second
    assert first.product is not second.product

    second.sku = "OTHER"
    assert first != second
    assert "product" not in first.model_dump()
