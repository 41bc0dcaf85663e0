# blocksapi/storage.py
"""
In-memory reference platform.

Implements the collaborator interfaces from ``blocksapi.host`` on plain
dictionaries so the API can run without a store behind it: product and
taxonomy reads (including evaluation of taxonomy clauses), tax-aware
prices, image attachments and session lookups. ``load_catalog`` seeds it
from the JSON sample dataset shipped in ``blocksapi/data``.

Nothing here mutates carts or computes totals; carts are stored exactly
as provided.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from fastapi import Request

from .config import Settings
from .currency import format_display_price, to_decimal
from .models import GUEST, Attachment, Cart, Product, Term, User

logger = logging.getLogger(__name__)

HIERARCHICAL_TAXONOMIES = {"product_cat"}
BUILTIN_TERMS: Dict[str, Tuple[str, ...]] = {
    "product_type": ("simple", "grouped", "external", "variable"),
    "product_visibility": ("exclude-from-catalog", "exclude-from-search", "featured", "outofstock"),
}

SESSION_COOKIE = "blocks_session"
SESSION_HEADER = "X-Session-Token"


class InMemoryCatalog:
    def __init__(self) -> None:
        self.products: Dict[int, Product] = {}
        self.terms: Dict[int, Term] = {}
        self.attributes: Dict[str, str] = {}

    # -- registration -----------------------------------------------------

    def register_attribute(self, name: str, label: str) -> None:
        if not name.startswith("pa_"):
            name = "pa_" + name
        self.attributes[name] = label

    def add_term(self, term: Term) -> Term:
        self.terms[term.id] = term
        return term

    def add_product(self, product: Product) -> Product:
        self.products[product.id] = product
        return product

    def sync_parent_prices(self) -> None:
        """Give variable and grouped parents the lowest published child price."""
        for product in self.products.values():
            if not product.is_type("variable", "grouped") or product.price != "":
                continue
            prices = [
                to_decimal(child.price)
                for child in self.get_products(product.children)
                if child.is_visible() and child.price != ""
            ]
            if prices:
                product.price = str(min(prices))

    # -- reads ------------------------------------------------------------

    def get_product(self, product_id: int) -> Optional[Product]:
        return self.products.get(product_id)

    def get_products(self, product_ids: Sequence[int]) -> List[Product]:
        return [self.products[pid] for pid in product_ids if pid in self.products]

    def attribute_taxonomy_names(self) -> List[str]:
        return list(self.attributes)

    def attribute_label(self, name: str) -> str:
        key = name[len("attribute_"):] if name.startswith("attribute_") else name
        if key in self.attributes:
            return self.attributes[key]
        if key.startswith("pa_"):
            key = key[3:]
        return key.replace("-", " ").replace("_", " ").capitalize()

    def term_name(self, taxonomy: str, slug: str) -> Optional[str]:
        for term in self.terms.values():
            if term.taxonomy == taxonomy and term.slug == slug:
                return term.name
        return None

    # -- taxonomy evaluation ----------------------------------------------

    def _find_term(self, taxonomy: str, field: str, value: Any) -> Optional[Term]:
        if taxonomy in BUILTIN_TERMS:
            if value in BUILTIN_TERMS[taxonomy]:
                return Term(id=0, taxonomy=taxonomy, name=value, slug=value)
            return None
        for term in self.terms.values():
            if term.taxonomy != taxonomy:
                continue
            if field == "term_id" and str(term.id) == str(value):
                return term
            if field == "slug" and term.slug == value:
                return term
            if field == "name" and term.name == value:
                return term
        return None

    def _descendants(self, term: Term) -> Set[str]:
        found: Set[str] = set()
        pending = [term.id]
        while pending:
            parent = pending.pop()
            for child in self.terms.values():
                if child.taxonomy == term.taxonomy and child.parent == parent and child.slug not in found:
                    found.add(child.slug)
                    pending.append(child.id)
        return found

    def _clause_slugs(self, clause) -> Tuple[Set[str], bool]:
        slugs: Set[str] = set()
        missing = False
        for value in clause.terms:
            term = self._find_term(clause.taxonomy, clause.field, value)
            if term is None:
                missing = True
                continue
            slugs.add(term.slug)
            if clause.include_children and clause.taxonomy in HIERARCHICAL_TAXONOMIES:
                slugs |= self._descendants(term)
        return slugs, missing

    def product_term_slugs(self, product: Product, taxonomy: str) -> Set[str]:
        if taxonomy == "product_type":
            return {product.type}
        if taxonomy == "product_visibility":
            return product.visibility_terms()
        if taxonomy == "product_cat":
            ids: Iterable[int] = product.category_ids
        elif taxonomy == "product_tag":
            ids = product.tag_ids
        else:
            ids = product.attribute_term_ids
        return {
            self.terms[tid].slug
            for tid in ids
            if tid in self.terms and self.terms[tid].taxonomy == taxonomy
        }

    def matches_clause(self, product: Product, clause) -> bool:
        wanted, missing = self._clause_slugs(clause)
        have = self.product_term_slugs(product, clause.taxonomy)
        if clause.operator == "IN":
            return bool(wanted & have)
        if clause.operator == "NOT IN":
            return not (wanted & have)
        if clause.operator == "AND":
            return not missing and bool(wanted) and wanted <= have
        raise ValueError("Unsupported taxonomy operator: %r" % (clause.operator,))

    # -- queries ----------------------------------------------------------

    def _matches(self, product: Product, query) -> bool:
        if product.is_type("variation"):
            return False
        if query.status == "any":
            if product.status == "trash":
                return False
        elif product.status != query.status:
            return False
        if query.include and product.id not in query.include:
            return False
        if product.id in query.exclude:
            return False
        if query.search:
            needle = query.search.lower()
            haystack = " ".join(
                [product.name, product.description, product.short_description, product.sku]
            ).lower()
            if needle not in haystack:
                return False
        if query.slug and product.slug != query.slug:
            return False
        if query.sku and product.sku != query.sku:
            return False
        if query.on_sale is not None and product.is_on_sale() != query.on_sale:
            return False
        if query.min_price is not None or query.max_price is not None:
            if product.price == "":
                return False
            price = to_decimal(product.price)
            if query.min_price is not None and price < query.min_price:
                return False
            if query.max_price is not None and price > query.max_price:
                return False
        if query.stock_status and product.stock_status != query.stock_status:
            return False
        return all(self.matches_clause(product, clause) for clause in query.tax_query)

    @staticmethod
    def _sort_key(query):
        orderby = query.orderby
        if orderby == "include":
            positions = {pid: i for i, pid in enumerate(query.include)}
            return lambda p: (positions.get(p.id, len(positions)), p.id)
        if orderby == "id":
            return lambda p: p.id
        if orderby == "title":
            return lambda p: (p.name.lower(), p.id)
        if orderby == "slug":
            return lambda p: (p.slug, p.id)
        if orderby == "price":
            return lambda p: (to_decimal(p.price), p.id)
        if orderby == "popularity":
            return lambda p: (p.total_sales, p.id)
        if orderby == "rating":
            return lambda p: (to_decimal(p.average_rating), p.id)
        if orderby == "menu_order":
            return lambda p: (p.menu_order, p.name.lower())
        if orderby == "comment_count":
            return lambda p: (p.review_count, p.id)
        return lambda p: (p.date_created, p.id)

    def query_products(self, query) -> Tuple[List[Product], int]:
        items = [p for p in self.products.values() if self._matches(p, query)]
        reverse = query.order == "desc" and query.orderby != "include"
        items.sort(key=self._sort_key(query), reverse=reverse)

        total = len(items)
        start = query.offset if query.offset is not None else (query.page - 1) * query.per_page
        return items[start:start + query.per_page], total


class InMemoryPricing:
    def __init__(self, settings: Settings, catalog: InMemoryCatalog) -> None:
        self.settings = settings
        self.catalog = catalog

    def _multiplier(self, product: Product) -> Decimal:
        if product.tax_status != "taxable":
            return Decimal("1")
        return Decimal("1") + self.settings.tax_rate / Decimal("100")

    def price_including_tax(self, product: Product, price: Optional[str] = None) -> Optional[Decimal]:
        price = product.price if price is None else price
        if price == "":
            return None
        amount = to_decimal(price)
        if self.settings.prices_include_tax:
            return amount
        return amount * self._multiplier(product)

    def price_excluding_tax(self, product: Product, price: Optional[str] = None) -> Optional[Decimal]:
        price = product.price if price is None else price
        if price == "":
            return None
        amount = to_decimal(price)
        if not self.settings.prices_include_tax:
            return amount
        return amount / self._multiplier(product)

    def price_to_display(self, product: Product, price: Optional[str] = None) -> Optional[Decimal]:
        if self.settings.display_prices_including_tax:
            return self.price_including_tax(product, price)
        return self.price_excluding_tax(product, price)

    def _amount_html(self, amount: Decimal) -> str:
        return '<span class="woocommerce-Price-amount amount">%s</span>' % format_display_price(
            amount, self.settings
        )

    def price_html(self, product: Product) -> str:
        if product.is_type("variable", "grouped"):
            prices = [
                self.price_to_display(child)
                for child in self.catalog.get_products(product.children)
                if child.is_visible() and child.price != ""
            ]
            if not prices:
                return ""
            low, high = min(prices), max(prices)
            if low == high:
                return self._amount_html(low)
            return "%s &ndash; %s" % (self._amount_html(low), self._amount_html(high))

        current = self.price_to_display(product)
        if current is None:
            return ""
        if product.is_on_sale():
            regular = self.price_to_display(product, product.regular_price)
            return "<del>%s</del> <ins>%s</ins>" % (self._amount_html(regular), self._amount_html(current))
        return self._amount_html(current)


class InMemoryMedia:
    THUMBNAIL_SIZES = ("thumbnail", "woocommerce_thumbnail")

    def __init__(self) -> None:
        self.attachments: Dict[int, Attachment] = {}

    def add_attachment(self, attachment: Attachment) -> Attachment:
        self.attachments[attachment.id] = attachment
        return attachment

    def get_attachment(self, attachment_id: int) -> Optional[Attachment]:
        attachment = self.attachments.get(attachment_id)
        if attachment is None or not attachment.is_image():
            return None
        return attachment

    def image_src(self, attachment_id: int, size: str = "full") -> Optional[Tuple[str, int, int]]:
        attachment = self.get_attachment(attachment_id)
        if attachment is None:
            return None
        if size in self.THUMBNAIL_SIZES and attachment.thumbnail_url:
            return attachment.thumbnail_url, attachment.thumbnail_width, attachment.thumbnail_height
        return attachment.url, attachment.width, attachment.height

    def image_srcset(self, attachment_id: int, size: str = "full") -> str:
        attachment = self.get_attachment(attachment_id)
        if attachment is None or not attachment.thumbnail_url or not attachment.width:
            return ""
        return "%s %dw, %s %dw" % (
            attachment.url,
            attachment.width,
            attachment.thumbnail_url,
            attachment.thumbnail_width,
        )

    def image_sizes(self, attachment_id: int, size: str = "full") -> str:
        src = self.image_src(attachment_id, size)
        if src is None or not src[1]:
            return ""
        return "(max-width: {0}px) 100vw, {0}px".format(src[1])


@dataclass
class Session:
    user: User
    cart: Any = None


class InMemorySessions:
    def __init__(self) -> None:
        self.sessions: Dict[str, Session] = {}

    def open_session(self, user: Optional[User] = None, cart: Any = None, token: Optional[str] = None) -> str:
        token = token or uuid.uuid4().hex
        self.sessions[token] = Session(user=user or GUEST, cart=cart)
        return token

    def _session(self, request: Request) -> Optional[Session]:
        token = request.cookies.get(SESSION_COOKIE) or request.headers.get(SESSION_HEADER)
        if not token:
            return None
        return self.sessions.get(token)

    def current_user(self, request: Request) -> User:
        session = self._session(request)
        return session.user if session else GUEST

    def get_cart(self, request: Request) -> Any:
        session = self._session(request)
        return session.cart if session else None


class InMemoryPlatform:
    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.catalog = InMemoryCatalog()
        self.pricing = InMemoryPricing(settings, self.catalog)
        self.media = InMemoryMedia()
        self.sessions = InMemorySessions()


def load_catalog(settings: Settings, path: Optional[Path] = None) -> InMemoryPlatform:
    """Build a platform seeded from a JSON catalog file.

    Parameters
    ----------
    settings : Settings
        Store settings used by the pricing service.
    path : Optional[Path]
        Catalog file; defaults to ``settings.catalog_file``. A missing
        file yields an empty platform.

    Returns
    -------
    InMemoryPlatform
        The populated platform.
    """
    platform = InMemoryPlatform(settings)
    path = path or settings.catalog_file
    if path is None or not Path(path).exists():
        logger.warning("Catalog file %s not found, starting with an empty catalog", path)
        return platform

    with Path(path).open("r", encoding="utf-8") as f:
        raw = json.load(f)

    for name, label in (raw.get("attributes") or {}).items():
        platform.catalog.register_attribute(name, label)
    for entry in raw.get("terms") or []:
        platform.catalog.add_term(Term(**entry))
    for entry in raw.get("attachments") or []:
        platform.media.add_attachment(Attachment(**entry))
    for entry in raw.get("products") or []:
        platform.catalog.add_product(Product(**entry))
    platform.catalog.sync_parent_prices()

    users = {entry["id"]: User(**entry) for entry in raw.get("users") or []}
    for entry in raw.get("sessions") or []:
        cart = Cart(**entry["cart"]) if entry.get("cart") is not None else None
        platform.sessions.open_session(users.get(entry.get("user_id")), cart, token=entry["token"])

    logger.info(
        "Loaded catalog from %s: %d products, %d terms, %d attachments",
        path,
        len(platform.catalog.products),
        len(platform.catalog.terms),
        len(platform.media.attachments),
    )
    return platform
