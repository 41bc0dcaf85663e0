# blocksapi/models.py
"""
Host platform entities.

These are the read-side shapes the adapters consume: products (simple,
variable, variation, grouped, external), taxonomy terms, image
attachments, users and carts. Business rules such as sale detection or
add-to-cart wording live here as accessors, the same way the platform
exposes them; the API modules only read them.
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Set

from pydantic import BaseModel, Field
from typing_extensions import Literal

ProductType = Literal["simple", "variable", "variation", "grouped", "external"]
CatalogVisibility = Literal["visible", "catalog", "search", "hidden"]
StockStatus = Literal["instock", "outofstock", "onbackorder"]


def _as_decimal(value: str) -> Optional[Decimal]:
    if value in (None, ""):
        return None
    try:
        return Decimal(str(value))
    except InvalidOperation:
        return None


class Term(BaseModel):
    id: int
    taxonomy: str
    name: str
    slug: str
    parent: int = 0


class Attachment(BaseModel):
    id: int
    url: str
    width: int = 0
    height: int = 0
    thumbnail_url: str = ""
    thumbnail_width: int = 0
    thumbnail_height: int = 0
    mime_type: str = "image/jpeg"
    title: str = ""
    alt: str = ""

    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")


class Product(BaseModel):
    id: int
    name: str
    type: ProductType = "simple"
    status: str = "publish"
    slug: str = ""
    permalink: str = ""
    sku: str = ""
    description: str = ""
    short_description: str = ""
    # Active price. Left blank it is derived from regular/sale price;
    # variable and grouped parents carry the lowest child price here.
    price: str = ""
    regular_price: str = ""
    sale_price: str = ""
    tax_status: str = "taxable"
    featured: bool = False
    catalog_visibility: CatalogVisibility = "visible"
    stock_status: StockStatus = "instock"
    average_rating: str = "0"
    review_count: int = 0
    total_sales: int = 0
    menu_order: int = 0
    weight: str = ""
    virtual: bool = False
    date_created: datetime = Field(default_factory=datetime.now)
    parent_id: int = 0
    children: List[int] = Field(default_factory=list)
    # Variation attributes: attribute name (e.g. "pa_size") -> term slug or raw value.
    attributes: Dict[str, str] = Field(default_factory=dict)
    category_ids: List[int] = Field(default_factory=list)
    tag_ids: List[int] = Field(default_factory=list)
    attribute_term_ids: List[int] = Field(default_factory=list)
    image_id: Optional[int] = None
    gallery_image_ids: List[int] = Field(default_factory=list)
    button_text: str = ""
    product_url: str = ""

    def model_post_init(self, __context) -> None:
        if self.price == "" and self.type not in ("variable", "grouped"):
            self.price = self.sale_price if self._sale_active() else self.regular_price

    def is_type(self, *types: str) -> bool:
        return self.type in types

    def _sale_active(self) -> bool:
        sale = _as_decimal(self.sale_price)
        regular = _as_decimal(self.regular_price)
        return sale is not None and regular is not None and sale < regular

    def is_on_sale(self) -> bool:
        if self.is_type("variable", "grouped"):
            return False
        return self._sale_active()

    def is_visible(self) -> bool:
        return self.status == "publish"

    def is_in_stock(self) -> bool:
        return self.stock_status != "outofstock"

    def is_purchasable(self) -> bool:
        if self.is_type("external", "grouped"):
            return False
        return self.status == "publish" and self.price != ""

    def supports(self, feature: str) -> bool:
        if feature == "ajax_add_to_cart":
            return self.is_type("simple")
        return False

    def add_to_cart_text(self) -> str:
        if self.is_type("variable"):
            return "Select options" if self.children else "Read more"
        if self.is_type("grouped"):
            return "View products"
        if self.is_type("external"):
            return self.button_text or "Buy product"
        if self.is_purchasable() and self.is_in_stock():
            return "Add to cart"
        return "Read more"

    def add_to_cart_description(self) -> str:
        if self.is_type("variable"):
            return "Select options for “%s”" % self.name
        if self.is_type("grouped"):
            return "View products in the “%s” group" % self.name
        if self.is_type("external"):
            return self.button_text or "Buy product"
        if self.is_purchasable() and self.is_in_stock():
            return "Add “%s” to your cart" % self.name
        return "Read more about “%s”" % self.name

    def visibility_terms(self) -> Set[str]:
        terms: Set[str] = set()
        if self.catalog_visibility in ("search", "hidden"):
            terms.add("exclude-from-catalog")
        if self.catalog_visibility in ("catalog", "hidden"):
            terms.add("exclude-from-search")
        if self.featured:
            terms.add("featured")
        if self.stock_status == "outofstock":
            terms.add("outofstock")
        return terms


class User(BaseModel):
    id: int = 0
    login: str = ""
    capabilities: List[str] = Field(default_factory=list)

    @property
    def is_logged_in(self) -> bool:
        return self.id > 0

    def has_cap(self, capability: str) -> bool:
        return capability in self.capabilities


GUEST = User()


class CartItem(BaseModel):
    key: str
    product_id: int
    quantity: int = 1
    line_subtotal: str = "0"
    line_subtotal_tax: str = "0"
    line_total: str = "0"
    line_tax: str = "0"


class Cart(BaseModel):
    """Session cart as computed by the platform; totals are host-owned."""

    items: List[CartItem] = Field(default_factory=list)
    subtotal: str = "0"
    subtotal_tax: str = "0"
    fee_total: str = "0"
    fee_tax: str = "0"
    discount_total: str = "0"
    discount_tax: str = "0"
    shipping_total: str = "0"
    shipping_tax: str = "0"
    total_tax: str = "0"
    total: str = "0"

    def get_cart_contents_count(self) -> int:
        return sum(item.quantity for item in self.items)
