"""
Collaborator interfaces for the host platform.

The adapters never reach into platform internals; they consume these
read-only services. ``blocksapi.storage.InMemoryPlatform`` implements all
of them; a deployment against a real store would provide its own object
with the same methods.

The FastAPI dependencies at the bottom fetch the platform and settings
from ``app.state`` so routes receive them explicitly, once per request.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple

from fastapi import Request
from typing_extensions import Protocol

from .config import Settings
from .models import Attachment, Product, User


class CatalogReader(Protocol):
    def query_products(self, query) -> Tuple[List[Product], int]: ...

    def get_product(self, product_id: int) -> Optional[Product]: ...

    def get_products(self, product_ids: Sequence[int]) -> List[Product]: ...

    def attribute_taxonomy_names(self) -> List[str]: ...

    def attribute_label(self, name: str) -> str: ...

    def term_name(self, taxonomy: str, slug: str) -> Optional[str]: ...


class PricingService(Protocol):
    def price_including_tax(self, product: Product, price: Optional[str] = None) -> Optional[Decimal]: ...

    def price_excluding_tax(self, product: Product, price: Optional[str] = None) -> Optional[Decimal]: ...

    def price_html(self, product: Product) -> str: ...


class MediaResolver(Protocol):
    def get_attachment(self, attachment_id: int) -> Optional[Attachment]: ...

    def image_src(self, attachment_id: int, size: str = "full") -> Optional[Tuple[str, int, int]]: ...

    def image_srcset(self, attachment_id: int, size: str = "full") -> str: ...

    def image_sizes(self, attachment_id: int, size: str = "full") -> str: ...


class SessionManager(Protocol):
    def current_user(self, request: Request) -> User: ...

    def get_cart(self, request: Request) -> Any: ...


class Platform(Protocol):
    catalog: CatalogReader
    pricing: PricingService
    media: MediaResolver
    sessions: SessionManager


def get_platform(request: Request) -> Platform:
    return request.app.state.platform


def get_store_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(request: Request) -> User:
    return get_platform(request).sessions.current_user(request)
