"""
Query parameter models for the products collection.

``CollectionParams`` is the default listing schema shared by product
collections. ``ProductCollectionParams`` extends it for the editor
blocks: two extra sort keys and four filter parameters with closed
enumerations. FastAPI validates incoming query strings against these
models, so an unknown operator is rejected before any query is built.
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing_extensions import Literal

BASE_ORDERBY = ("date", "id", "include", "title", "slug", "price", "popularity", "rating")
EXTRA_ORDERBY = ("menu_order", "comment_count")
OPERATORS = ("in", "not_in", "and")
CATALOG_VISIBILITY = ("any", "visible", "catalog", "search", "hidden")
POST_STATUSES = ("any", "future", "trash", "draft", "pending", "private", "publish")

Context = Literal["view", "edit"]
Operator = Literal[OPERATORS]

_UNSAFE_KEY_CHARS = re.compile(r"[^a-z0-9_\-]")


def sanitize_key(value: str) -> str:
    """Lower-case and strip everything outside ``[a-z0-9_-]``."""
    return _UNSAFE_KEY_CHARS.sub("", str(value).lower())


class ContextParams(BaseModel):
    context: Context = Field(default="view", description="Scope under which the request is made.")


class CollectionParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    context: Context = Field(default="view", description="Scope under which the request is made.")
    page: int = Field(default=1, ge=1, description="Current page of the collection.")
    per_page: int = Field(default=10, ge=1, le=100, description="Maximum number of items to be returned.")
    offset: Optional[int] = Field(default=None, ge=0, description="Offset the result set by a specific number of items.")
    search: Optional[str] = Field(default=None, description="Limit results to those matching a string.")
    order: Literal["asc", "desc"] = Field(default="desc", description="Order sort attribute ascending or descending.")
    orderby: Literal[BASE_ORDERBY] = Field(default="date", description="Sort collection by object attribute.")
    include: Optional[str] = Field(default=None, description="Limit result set to specific ids (comma separated).")
    exclude: Optional[str] = Field(default=None, description="Ensure result set excludes specific ids (comma separated).")
    slug: Optional[str] = Field(default=None, description="Limit result set to products with a specific slug.")
    type: Optional[Literal["simple", "grouped", "external", "variable"]] = Field(
        default=None, description="Limit result set to products assigned a specific type."
    )
    sku: Optional[str] = Field(default=None, description="Limit result set to products with a specific SKU.")
    featured: Optional[bool] = Field(default=None, description="Limit result set to featured products.")
    category: Optional[str] = Field(default=None, description="Limit result set to products assigned specific category ids.")
    tag: Optional[str] = Field(default=None, description="Limit result set to products assigned specific tag ids.")
    attribute: Optional[str] = Field(default=None, description="Limit result set to products with a specific attribute.")
    attribute_term: Optional[str] = Field(
        default=None, description="Limit result set to products with specific attribute term ids (requires attribute)."
    )
    on_sale: Optional[bool] = Field(default=None, description="Limit result set to products on sale.")
    min_price: Optional[Decimal] = Field(default=None, ge=0, description="Limit result set to products based on a minimum price.")
    max_price: Optional[Decimal] = Field(default=None, ge=0, description="Limit result set to products based on a maximum price.")
    stock_status: Optional[Literal["instock", "outofstock", "onbackorder"]] = Field(
        default=None, description="Limit result set to products with specified stock status."
    )
    status: Literal[POST_STATUSES] = Field(
        default="any", description="Limit result set to products assigned a specific status."
    )


class ProductCollectionParams(CollectionParams):
    orderby: Literal[BASE_ORDERBY + EXTRA_ORDERBY] = Field(
        default="date", description="Sort collection by object attribute."
    )
    category_operator: Operator = Field(default="in", description="Operator to compare product category terms.")
    tag_operator: Operator = Field(default="in", description="Operator to compare product tags.")
    attribute_operator: Operator = Field(default="in", description="Operator to compare product attribute terms.")
    catalog_visibility: Optional[Literal[CATALOG_VISIBILITY]] = Field(
        default=None, description="Determines if hidden or visible catalog products are shown."
    )

    @field_validator(
        "category_operator", "tag_operator", "attribute_operator", "catalog_visibility", mode="before"
    )
    @classmethod
    def _sanitize(cls, value):
        if isinstance(value, str):
            return sanitize_key(value)
        return value
