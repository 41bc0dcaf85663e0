"""
Cart response shape.

``CartSchema`` owns everything about how a cart is presented: the
response models, the published JSON Schema and the mapping from a
platform ``Cart``. Money values are strings in the currency's minor unit
(``"1050"`` is 10.50 with two decimals) so clients never parse decimals.
"""

from __future__ import annotations

import logging
from typing import List

from pydantic import BaseModel, ConfigDict

from ..catalog.projection import product_images, variation_label
from ..catalog.schemas import ProductImage
from ..config import Settings
from ..currency import currency_symbol, price_prefix_suffix, to_decimal, to_minor_units
from ..host import CatalogReader, MediaResolver
from ..models import Cart, CartItem, Product
from ..schema import api_field, item_schema

logger = logging.getLogger(__name__)

CART_SCHEMA_TITLE = "cart"


class CartItemTotals(BaseModel):
    model_config = ConfigDict(extra="forbid")

    line_subtotal: str = api_field(description="Line price subtotal (excluding coupons and discounts).", readonly=True)
    line_subtotal_tax: str = api_field(description="Line price subtotal tax.", readonly=True)
    line_total: str = api_field(description="Line price total (including coupons and discounts).", readonly=True)
    line_total_tax: str = api_field(description="Line price total tax.", readonly=True)


class CartItemResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    key: str = api_field(description="Unique identifier for the item within the cart.", readonly=True)
    id: int = api_field(description="The cart item product or variation ID.", readonly=True)
    quantity: int = api_field(description="Quantity of this item in the cart.")
    name: str = api_field(description="Product name.", readonly=True)
    sku: str = api_field(description="Stock keeping unit, if applicable.", readonly=True)
    permalink: str = api_field(description="Product URL.", readonly=True)
    images: List[ProductImage] = api_field(description="List of images.", readonly=True)
    variation: str = api_field(description="Chosen attributes (for variations).", readonly=True)
    totals: CartItemTotals = api_field(description="Item total amounts provided using the smallest unit of the currency.", readonly=True)


class CartTotals(BaseModel):
    model_config = ConfigDict(extra="forbid")

    currency_code: str = api_field(description="Currency code (in ISO format) for returned prices.", readonly=True)
    currency_symbol: str = api_field(description="Currency symbol for the currency.", readonly=True)
    currency_minor_unit: int = api_field(description="Currency minor unit (number of digits after the decimal separator).", readonly=True)
    currency_decimal_separator: str = api_field(description="Decimal separator for the currency.", readonly=True)
    currency_thousand_separator: str = api_field(description="Thousand separator for the currency.", readonly=True)
    currency_prefix: str = api_field(description="Price prefix for the currency.", readonly=True)
    currency_suffix: str = api_field(description="Price suffix for the currency.", readonly=True)
    total_items: str = api_field(description="Total price of items in the cart.", readonly=True)
    total_items_tax: str = api_field(description="Total tax on items in the cart.", readonly=True)
    total_fees: str = api_field(description="Total price of any applied fees.", readonly=True)
    total_fees_tax: str = api_field(description="Total tax on fees.", readonly=True)
    total_discount: str = api_field(description="Total discount from applied coupons.", readonly=True)
    total_discount_tax: str = api_field(description="Total tax removed due to discount from applied coupons.", readonly=True)
    total_shipping: str = api_field(description="Total price of shipping.", readonly=True)
    total_shipping_tax: str = api_field(description="Total tax on shipping.", readonly=True)
    total_tax: str = api_field(description="Total tax applied to items and shipping.", readonly=True)
    total_price: str = api_field(description="Total price the customer will pay.", readonly=True)


class CartResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    items: List[CartItemResponse] = api_field(description="List of cart items.", readonly=True)
    items_count: int = api_field(description="Number of items in the cart.", readonly=True)
    items_weight: float = api_field(description="Total weight of all products in the cart, in store weight units.", readonly=True)
    needs_shipping: bool = api_field(description="True if the cart needs shipping.", readonly=True)
    totals: CartTotals = api_field(description="Cart total amounts provided using the smallest unit of the currency.", readonly=True)


class CartSchema:
    def __init__(self, catalog: CatalogReader, media: MediaResolver, settings: Settings) -> None:
        self.catalog = catalog
        self.media = media
        self.settings = settings

    def get_item_schema(self):
        return item_schema(CartResponse, CART_SCHEMA_TITLE)

    def _money(self, amount: str) -> str:
        return to_minor_units(amount, self.settings.price_num_decimals)

    def _item_response(self, item: CartItem, product: Product) -> CartItemResponse:
        return CartItemResponse(
            key=item.key,
            id=product.id,
            quantity=item.quantity,
            name=product.name,
            sku=product.sku,
            permalink=product.permalink,
            images=product_images(self.media, product),
            variation=variation_label(self.catalog, product),
            totals=CartItemTotals(
                line_subtotal=self._money(item.line_subtotal),
                line_subtotal_tax=self._money(item.line_subtotal_tax),
                line_total=self._money(item.line_total),
                line_total_tax=self._money(item.line_tax),
            ),
        )

    def _totals(self, cart: Cart) -> CartTotals:
        prefix, suffix = price_prefix_suffix(self.settings)
        return CartTotals(
            currency_code=self.settings.currency,
            currency_symbol=currency_symbol(self.settings.currency),
            currency_minor_unit=self.settings.price_num_decimals,
            currency_decimal_separator=self.settings.price_decimal_sep,
            currency_thousand_separator=self.settings.price_thousand_sep,
            currency_prefix=prefix,
            currency_suffix=suffix,
            total_items=self._money(cart.subtotal),
            total_items_tax=self._money(cart.subtotal_tax),
            total_fees=self._money(cart.fee_total),
            total_fees_tax=self._money(cart.fee_tax),
            total_discount=self._money(cart.discount_total),
            total_discount_tax=self._money(cart.discount_tax),
            total_shipping=self._money(cart.shipping_total),
            total_shipping_tax=self._money(cart.shipping_tax),
            total_tax=self._money(cart.total_tax),
            total_price=self._money(cart.total),
        )

    def get_item_response(self, cart: Cart) -> CartResponse:
        items = []
        weight = to_decimal("0")
        needs_shipping = False
        for item in cart.items:
            product = self.catalog.get_product(item.product_id)
            if product is None:
                logger.warning("Cart item %s references missing product %s", item.key, item.product_id)
                continue
            items.append(self._item_response(item, product))
            weight += to_decimal(product.weight) * item.quantity
            needs_shipping = needs_shipping or not product.virtual

        return CartResponse(
            items=items,
            items_count=cart.get_cart_contents_count(),
            items_weight=float(weight),
            needs_shipping=needs_shipping,
            totals=self._totals(cart),
        )
