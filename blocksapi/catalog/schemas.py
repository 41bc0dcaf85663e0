"""
Pydantic response models for the products endpoint.

``ProductResponse`` is the flat projection sent to editor blocks: display
fields, a ``prices`` block with currency formatting metadata, the image
list and the add-to-cart button parameters. The same models produce the
JSON Schema served for ``OPTIONS`` requests, so the published schema and
the responses cannot drift apart.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..schema import VIEW_EDIT_EMBED, api_field

PRODUCT_SCHEMA_TITLE = "product_block_product"


class PriceRange(BaseModel):
    model_config = ConfigDict(extra="forbid")

    min_amount: str = api_field(description="Price amount.", readonly=True)
    max_amount: str = api_field(description="Price amount.", readonly=True)


class PriceBlock(BaseModel):
    """Prices for the configured tax display mode plus currency formatting.

    ``price_range`` is only set for variable products whose variations
    differ in price and for grouped products with at least one priced
    child.
    """

    model_config = ConfigDict(extra="forbid")

    currency_code: str = api_field(description="Currency code.", readonly=True)
    decimal_separator: str = api_field(description="Decimal separator.", readonly=True)
    thousand_separator: str = api_field(description="Thousand separator.", readonly=True)
    decimals: int = api_field(description="Number of decimal places.", readonly=True)
    price_prefix: str = api_field(description="Price prefix, e.g. currency.", readonly=True)
    price_suffix: str = api_field(description="Price suffix, e.g. currency.", readonly=True)
    price: str = api_field(description="Current product price.", readonly=True)
    regular_price: str = api_field(description="Regular product price.", readonly=True)
    sale_price: str = api_field(description="Sale product price, if applicable.", readonly=True)
    price_range: Optional[PriceRange] = api_field(None, description="Price range, if applicable.", readonly=True)


class ProductImage(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int = api_field(description="Image ID.")
    src: str = api_field(description="Full size image URL.")
    thumbnail: str = api_field(description="Thumbnail URL.")
    srcset: str = api_field(description="Thumbnail srcset for responsive images.")
    sizes: str = api_field(description="Thumbnail sizes for responsive images.")
    name: str = api_field(description="Image name.")
    alt: str = api_field(description="Image alternative text.")


class AddToCart(BaseModel):
    model_config = ConfigDict(extra="forbid")

    text: str = api_field(description="Button text.", readonly=True)
    description: str = api_field(description="Button description.", readonly=True)
    supports_ajax: bool = api_field(description="Whether or not AJAX is supported.", readonly=True)


class ProductResponse(BaseModel):
    model_config = ConfigDict(extra="forbid")

    id: int = api_field(description="Unique identifier for the resource.", context=VIEW_EDIT_EMBED, readonly=True)
    name: str = api_field(description="Product name.", context=VIEW_EDIT_EMBED)
    variation: str = api_field(description="Product variation attributes, if applicable.", context=VIEW_EDIT_EMBED)
    permalink: str = api_field(description="Product URL.", context=VIEW_EDIT_EMBED, readonly=True)
    sku: str = api_field(description="Unique identifier.")
    description: str = api_field(description="Short description or excerpt from description.", context=VIEW_EDIT_EMBED)
    onsale: bool = api_field(description="Is the product on sale?", readonly=True)
    price: str = api_field(description="Current product price.")
    price_html: str = api_field(description="Price formatted in HTML.", readonly=True)
    prices: PriceBlock = api_field(description="Price data.", readonly=True)
    images: List[ProductImage] = api_field(description="List of images.", context=VIEW_EDIT_EMBED)
    average_rating: str = api_field(description="Reviews average rating.", readonly=True)
    review_count: int = api_field(description="Amount of reviews that the product has.", readonly=True)
    add_to_cart: AddToCart = api_field(description="Add to cart button parameters.", readonly=True)
