"""
Default mapping of store variants onto Google Shopping attributes.

Review these definitions and adjust them to the store. Fields registered
with as_stored_column can be overridden per variant by an administrator;
the override store owns their values.
"""

import logging
from typing import Any, Callable, List, Optional

from .config import FeedConfig
from .context import FeedContext, product_url
from .models.catalog_models import Image, Variant
from .models.feed_models import FeedPrice, ShippingEntry, ShippingWeight
from .registry import FieldMappingRegistry
from .taxonomy import TaxonomyClient, TaxonomyUnavailable
from .widgets import CheckboxWidget, SelectWidget, TextWidget

logger = logging.getLogger("google_shopping_feed")

CONDITIONS = ["new", "used", "refurbished"]
SIZE_TYPES = ["Regular", "Petite", "Plus", "Big and Tall", "Maternity"]
AGE_GROUPS = [
    ("Newborn (0-3 months)", "newborn"),
    ("Infant (3-12 months)", "infant"),
    ("Toddler (1-5 years)", "toddler"),
    ("Kids (5-13 years)", "kids"),
    ("Adult (13+ years)", "adult"),
]
GENDERS = ("unisex", "ladies")


def from_option_type(
    type_name: str,
    transform: Optional[Callable[[Optional[str]], Any]] = None,
) -> Callable[[Variant], Any]:
    """
    Resolver returning the presentation of the variant's option value for type_name.

    transform, when given, receives the presentation (None if the variant has
    no value for that option type) and its result is used instead.
    """
    def resolve(variant: Variant) -> Any:
        option_value = variant.option_value_for(type_name)
        result = option_value.presentation if option_value is not None else None
        return transform(result) if transform else result

    return resolve


def _sizes(size: Optional[str]) -> Optional[List[str]]:
    return [size] if size is not None else None


def _gender(style: Optional[str]) -> str:
    if style is not None and style.lower() in GENDERS:
        return style
    return "unisex"


def _first_thumbnail(images: List[Image], option_value_ids: Optional[set] = None) -> Optional[Image]:
    for image in images:
        if not image.thumbnail:
            continue
        if option_value_ids is None or image.option_value_id in option_value_ids:
            return image
    return None


def image_link(variant: Variant) -> Optional[str]:
    """
    URL of the variant's thumbnail.

    Thumbnails tagged with one of the variant's option values win (this relies
    on products representing one color each), checked on the variant and then
    on its product, before any thumbnail on either.
    """
    option_value_ids = {ov.id for ov in variant.option_values}
    image = (
        _first_thumbnail(variant.images, option_value_ids)
        or _first_thumbnail(variant.product_images, option_value_ids)
        or _first_thumbnail(variant.images)
        or _first_thumbnail(variant.product_images)
    )
    return image.url if image is not None else None


def category_widget(taxonomy: TaxonomyClient) -> Callable[[], Any]:
    """Widget factory listing the remote taxonomy; plain text input if it is unreachable."""
    def build():
        try:
            categories = taxonomy.categories()
        except TaxonomyUnavailable as exc:
            logger.warning("category_widget_fallback", extra={"error": str(exc)})
            return TextWidget(placeholder="Valid Product Categories")
        return SelectWidget.from_values(
            categories,
            include_blank="Valid Product Categories",
            css_class="select2-min-len-4",
        )

    return build


def build_registry(config: FeedConfig, taxonomy: TaxonomyClient) -> FieldMappingRegistry:
    """
    Register the Google Shopping attributes for a store.

    Args:
        config: Feed configuration
        taxonomy: Client used by the google_product_category editor; the caller closes it

    Returns:
        Populated FieldMappingRegistry
    """
    registry = FieldMappingRegistry()
    define = registry.define

    define("offer_id").compute(lambda variant: variant.sku)
    define("title").compute(lambda variant: variant.name)
    define("description").compute(lambda variant: variant.description)

    define("google_product_category").as_stored_column(widget=category_widget(taxonomy))

    # The context is None when records are built outside a request,
    # e.g. when uploading from a background job.
    @define("link").compute
    def link(variant: Variant, context: Optional[FeedContext]) -> Optional[str]:
        if variant.product is None:
            return None
        if context is not None:
            return context.product_url(variant.product.slug)
        if config.store.storefront_url:
            return product_url(config.store.storefront_url, variant.product.slug)
        return None

    define("condition").as_stored_column(
        default="new",
        widget=SelectWidget.from_values(CONDITIONS),
    )
    define("adult").as_stored_column(widget=CheckboxWidget())

    define("availability").constant(config.feed.availability)
    define("channel").constant(config.feed.channel)
    define("content_language").constant(config.feed.content_language)
    define("target_country").constant(config.feed.target_country)

    define("price").compute(
        lambda variant: FeedPrice(value=str(variant.price), currency=variant.currency)
    )
    define("item_group_id").compute(
        lambda variant: None if variant.is_master else variant.product_id
    )

    define("brand").constant(config.store.brand)
    define("color").compute(from_option_type("apparel-color"))
    define("sizes").compute(from_option_type("apparel-size", _sizes))
    define("size_type").constant("Regular")
    define("size_system").constant(config.feed.size_system)
    define("gender").compute(from_option_type("apparel-style", _gender))

    # Replaces the constant above with an editable column.
    define("size_type").as_stored_column(
        default="regular",
        widget=SelectWidget(choices=[(c, c.lower()) for c in SIZE_TYPES]),
    )
    define("age_group").as_stored_column(
        default="adult",
        widget=SelectWidget(choices=AGE_GROUPS),
    )

    define("shipping_weight").compute(
        lambda variant: ShippingWeight(unit=config.shipping.weight_unit, value=str(variant.weight))
    )

    @define("shipping").compute
    def shipping(_variant: Variant) -> List[ShippingEntry]:
        rates = config.shipping.rates
        return [
            ShippingEntry(
                country=country,
                price=FeedPrice(
                    currency=config.shipping.currency,
                    value=rates.get(country, config.shipping.default_rate),
                ),
            )
            for country in config.shipping.countries
        ]

    define("image_link").compute(image_link)
    # TODO: define additional_image_link from the remaining variant images

    define("product_type").as_stored_column(default="T-Shirt")

    return registry
