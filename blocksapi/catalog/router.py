"""
Route definitions for the products block API.

Endpoints under /wc/blocks:
- GET     /products        : list products (filters, block operators, visibility)
- GET     /products/{id}   : get one product
- OPTIONS /products[/{id}] : route index with the product JSON Schema

Both reads require the ``edit_posts`` capability; the API serves the
block editor, not shoppers.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, Response
from typing_extensions import Annotated

from ..config import Settings
from ..errors import RestError, authorization_required_code
from ..host import Platform, get_current_user, get_platform, get_store_settings
from ..models import User
from ..resource import ResourceController
from ..schema import args_schema
from .params import ContextParams, ProductCollectionParams
from .projection import ProductProjector
from .query import prepare_product_query
from .schemas import PRODUCT_SCHEMA_TITLE, ProductResponse

NAMESPACE = "wc/blocks"
REST_BASE = "products"
REQUIRED_CAPABILITY = "edit_posts"

router = APIRouter(prefix="/" + NAMESPACE, tags=["products"])


def can_edit_posts(user: User, action: str) -> Optional[RestError]:
    if user.has_cap(REQUIRED_CAPABILITY):
        return None
    if action == "list":
        message = "Sorry, you cannot list resources."
    else:
        message = "Sorry, you cannot view this resource."
    return RestError("woocommerce_rest_cannot_view", message, authorization_required_code(user))


def get_products_controller(
    platform: Platform = Depends(get_platform),
    settings: Settings = Depends(get_store_settings),
) -> ResourceController:
    catalog = platform.catalog
    projector = ProductProjector(catalog, platform.pricing, platform.media, settings)
    attribute_taxonomies = catalog.attribute_taxonomy_names()
    return ResourceController(
        namespace=NAMESPACE,
        rest_base=REST_BASE,
        item_model=ProductResponse,
        schema_title=PRODUCT_SCHEMA_TITLE,
        permission_check=can_edit_posts,
        prepare_query=lambda params: prepare_product_query(params, attribute_taxonomies),
        fetch_items=catalog.query_products,
        fetch_item=catalog.get_product,
        project=projector.project,
        invalid_id_code="woocommerce_rest_product_invalid_id",
    )


@router.get("/" + REST_BASE, response_model=List[ProductResponse])
def list_products(
    response: Response,
    params: Annotated[ProductCollectionParams, Query()],
    controller: ResourceController = Depends(get_products_controller),
    user: User = Depends(get_current_user),
):
    """
    Returns a page of products. Pagination totals are sent in the
    ``X-WP-Total`` and ``X-WP-TotalPages`` headers.
    """
    rows, total, total_pages = controller.get_items(params, user)
    response.headers["X-WP-Total"] = str(total)
    response.headers["X-WP-TotalPages"] = str(total_pages)
    return rows


@router.get("/" + REST_BASE + "/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: Annotated[int, Path(ge=0, description="Unique identifier for the resource.")],
    params: Annotated[ContextParams, Query()],
    controller: ResourceController = Depends(get_products_controller),
    user: User = Depends(get_current_user),
):
    return controller.get_item(product_id, params.context, user)


@router.options("/" + REST_BASE)
def describe_products(controller: ResourceController = Depends(get_products_controller)):
    endpoints = [{"methods": ["GET"], "args": args_schema(ProductCollectionParams)}]
    return controller.get_public_item_schema(endpoints)


@router.options("/" + REST_BASE + "/{product_id}")
def describe_product(
    product_id: int,
    controller: ResourceController = Depends(get_products_controller),
):
    args = {"id": {"description": "Unique identifier for the resource.", "type": "integer", "required": True}}
    args.update(args_schema(ContextParams))
    return controller.get_public_item_schema([{"methods": ["GET"], "args": args}])
