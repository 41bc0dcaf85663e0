"""
Product projection for the editor blocks.

``ProductProjector`` maps a platform product to ``ProductResponse``.
Everything it needs is passed in: the catalog (variation labels, child
products), the pricing service (tax-inclusive/exclusive prices), the
media resolver (image URLs) and the store settings (tax display mode and
currency format). It keeps no state between calls.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from ..config import Settings
from ..currency import format_amount, price_prefix_suffix
from ..host import CatalogReader, MediaResolver, PricingService
from ..models import Product
from .schemas import AddToCart, PriceBlock, PriceRange, ProductImage, ProductResponse

logger = logging.getLogger(__name__)

DESCRIPTION_LENGTH = 400
TRIM_SUFFIX = "..."
THUMBNAIL_SIZE = "woocommerce_thumbnail"


def trim_string(text: str, length: int = DESCRIPTION_LENGTH, suffix: str = TRIM_SUFFIX) -> str:
    """Cut ``text`` to at most ``length`` characters, ending in ``suffix``.

    The cut backs off to the last whitespace when one exists, so words
    are not split.
    """
    if len(text) <= length:
        return text
    cut = text[: max(0, length - len(suffix))]
    boundary = max(cut.rfind(" "), cut.rfind("\n"), cut.rfind("\t"))
    if boundary > 0:
        cut = cut[:boundary]
    return cut.rstrip() + suffix


def unique_ids(ids: Iterable[Optional[int]]) -> List[int]:
    seen: List[int] = []
    for value in ids:
        if value is None:
            continue
        value = abs(int(value))
        if value and value not in seen:
            seen.append(value)
    return seen


def variation_label(catalog: CatalogReader, product: Product) -> str:
    """``"Size: Large, Color: Blue"`` for a variation, ``""`` otherwise.

    Attributes left open on the variation ("any size") have an empty
    value and are left out.
    """
    if not product.is_type("variation"):
        return ""
    parts = []
    for name, value in product.attributes.items():
        if not value:
            continue
        taxonomy = name[len("attribute_"):] if name.startswith("attribute_") else name
        label = catalog.attribute_label(taxonomy)
        shown = catalog.term_name(taxonomy, value) or value
        parts.append("%s: %s" % (label, shown))
    return ", ".join(parts)


def product_images(media: MediaResolver, product: Product) -> List[ProductImage]:
    """Primary image then gallery, de-duplicated; unresolvable ids are skipped."""
    images = []
    for attachment_id in unique_ids([product.image_id, *product.gallery_image_ids]):
        full = media.image_src(attachment_id, "full")
        if full is None:
            logger.debug("Skipping attachment %s on product %s", attachment_id, product.id)
            continue
        thumbnail = media.image_src(attachment_id, THUMBNAIL_SIZE)
        attachment = media.get_attachment(attachment_id)
        images.append(
            ProductImage(
                id=attachment_id,
                src=full[0],
                thumbnail=thumbnail[0] if thumbnail else full[0],
                srcset=media.image_srcset(attachment_id, "full"),
                sizes=media.image_sizes(attachment_id, "full"),
                name=attachment.title if attachment else "",
                alt=attachment.alt if attachment else "",
            )
        )
    return images


class ProductProjector:
    def __init__(
        self,
        catalog: CatalogReader,
        pricing: PricingService,
        media: MediaResolver,
        settings: Settings,
    ) -> None:
        self.catalog = catalog
        self.pricing = pricing
        self.media = media
        self.settings = settings

    def project(self, product: Product, context: str = "view") -> ProductResponse:
        return ProductResponse(
            id=product.id,
            name=product.name,
            variation=self.variation_label(product),
            permalink=product.permalink,
            sku=product.sku,
            description=self.description(product),
            onsale=product.is_on_sale(),
            price=product.price,
            price_html=self.pricing.price_html(product),
            prices=self.prices(product),
            images=self.images(product),
            average_rating=product.average_rating,
            review_count=product.review_count,
            add_to_cart=AddToCart(
                text=product.add_to_cart_text(),
                description=product.add_to_cart_description(),
                supports_ajax=product.supports("ajax_add_to_cart"),
            ),
        )

    def variation_label(self, product: Product) -> str:
        return variation_label(self.catalog, product)

    @staticmethod
    def description(product: Product) -> str:
        if product.short_description:
            return product.short_description
        return trim_string(product.description)

    def _display_price(self, product: Product, price: Optional[str] = None) -> Optional[Decimal]:
        if self.settings.display_prices_including_tax:
            return self.pricing.price_including_tax(product, price)
        return self.pricing.price_excluding_tax(product, price)

    def _format(self, amount: Optional[Decimal]) -> str:
        return format_amount(amount, self.settings.price_num_decimals)

    def prices(self, product: Product) -> PriceBlock:
        prefix, suffix = price_prefix_suffix(self.settings)
        return PriceBlock(
            currency_code=self.settings.currency,
            decimal_separator=self.settings.price_decimal_sep,
            thousand_separator=self.settings.price_thousand_sep,
            decimals=self.settings.price_num_decimals,
            price_prefix=prefix,
            price_suffix=suffix,
            price=self._format(self._display_price(product)),
            regular_price=self._format(self._display_price(product, product.regular_price)),
            sale_price=self._format(self._display_price(product, product.sale_price)),
            price_range=self.price_range(product),
        )

    def _child_prices(self, product: Product) -> List[Decimal]:
        prices = []
        for child in self.catalog.get_products(product.children):
            if not child.is_visible() or child.price == "":
                continue
            amount = self._display_price(child)
            if amount is not None:
                prices.append(amount)
        return prices

    def price_range(self, product: Product) -> Optional[PriceRange]:
        if product.is_type("variable"):
            prices = self._child_prices(product)
            if prices and min(prices) != max(prices):
                return PriceRange(min_amount=self._format(min(prices)), max_amount=self._format(max(prices)))
            return None

        if product.is_type("grouped"):
            prices = self._child_prices(product)
            if prices:
                return PriceRange(min_amount=self._format(min(prices)), max_amount=self._format(max(prices)))
            return None

        return None

    def images(self, product: Product) -> List[ProductImage]:
        return product_images(self.media, product)
