"""
Store API cart route.

- GET     /wc/store/cart : snapshot of the current session's cart
- OPTIONS /wc/store/cart : route index with the cart JSON Schema

The route only checks that the session produced a cart; the response
shape belongs to ``CartSchema``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request
from typing_extensions import Annotated

from ..catalog.params import ContextParams
from ..config import Settings
from ..errors import RestError
from ..host import Platform, get_platform, get_store_settings
from ..models import Cart
from ..schema import args_schema, public_item_schema
from .cart_schema import CartResponse, CartSchema

logger = logging.getLogger(__name__)

NAMESPACE = "wc/store"
REST_BASE = "cart"

router = APIRouter(prefix="/" + NAMESPACE, tags=["cart"])


def get_cart_schema(
    platform: Platform = Depends(get_platform),
    settings: Settings = Depends(get_store_settings),
) -> CartSchema:
    return CartSchema(platform.catalog, platform.media, settings)


@router.get("/" + REST_BASE, response_model=CartResponse)
def get_cart(
    request: Request,
    params: Annotated[ContextParams, Query()],
    platform: Platform = Depends(get_platform),
    cart_schema: CartSchema = Depends(get_cart_schema),
):
    cart = platform.sessions.get_cart(request)
    if cart is None or not isinstance(cart, Cart):
        logger.warning("Unable to retrieve cart, session returned %s", type(cart).__name__)
        raise RestError("woocommerce_rest_cart_error", "Unable to retrieve cart.", 500)
    return cart_schema.get_item_response(cart)


@router.options("/" + REST_BASE)
def describe_cart(cart_schema: CartSchema = Depends(get_cart_schema)):
    endpoints = [{"methods": ["GET"], "args": args_schema(ContextParams)}]
    return public_item_schema(NAMESPACE, endpoints, cart_schema.get_item_schema())
