"""
Translate validated collection parameters into a catalog query.

``prepare_objects_query`` is the default translation shared by product
listings: pagination, sort, plain filters and one taxonomy clause per
term filter. ``augment_query`` layers the block-specific behaviour on
top: comparison operators for category, tag and attribute clauses and
the catalog visibility clause.

Clauses are kept in order and handed to the catalog as-is; nothing here
checks that the clauses coming out of the base translation are well
formed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from .params import CollectionParams, ProductCollectionParams

logger = logging.getLogger(__name__)

OPERATOR_MAPPING = {
    "in": "IN",
    "not_in": "NOT IN",
    "and": "AND",
}

VISIBILITY_OPTIONS = ("visible", "catalog", "search", "hidden")

CATEGORY_TAXONOMY = "product_cat"
TAG_TAXONOMY = "product_tag"
TYPE_TAXONOMY = "product_type"
VISIBILITY_TAXONOMY = "product_visibility"


@dataclass(frozen=True)
class TaxClause:
    taxonomy: str
    field: str
    terms: Tuple[Union[int, str], ...]
    operator: str = "IN"
    include_children: bool = True


@dataclass(frozen=True)
class ProductQuery:
    page: int = 1
    per_page: int = 10
    offset: Optional[int] = None
    order: str = "desc"
    orderby: str = "date"
    search: str = ""
    include: Tuple[int, ...] = ()
    exclude: Tuple[int, ...] = ()
    slug: str = ""
    sku: str = ""
    on_sale: Optional[bool] = None
    min_price: Optional[Decimal] = None
    max_price: Optional[Decimal] = None
    stock_status: str = ""
    status: str = "any"
    tax_query: Tuple[TaxClause, ...] = field(default_factory=tuple)


def parse_id_list(value: Optional[str]) -> Tuple[int, ...]:
    """``"3, 1,3 7"`` -> ``(3, 1, 7)``; non-numeric parts are ignored."""
    if not value:
        return ()
    ids: List[int] = []
    for part in re.split(r"[\s,]+", str(value)):
        if not part.lstrip("-").isdigit():
            continue
        number = abs(int(part))
        if number and number not in ids:
            ids.append(number)
    return tuple(ids)


def prepare_objects_query(params: CollectionParams, attribute_taxonomies: Sequence[str]) -> ProductQuery:
    clauses: List[TaxClause] = []

    category_ids = parse_id_list(params.category)
    if category_ids:
        clauses.append(TaxClause(CATEGORY_TAXONOMY, "term_id", category_ids))

    tag_ids = parse_id_list(params.tag)
    if tag_ids:
        clauses.append(TaxClause(TAG_TAXONOMY, "term_id", tag_ids))

    if params.type:
        clauses.append(TaxClause(TYPE_TAXONOMY, "slug", (params.type,)))

    if params.attribute and params.attribute in attribute_taxonomies:
        term_ids = parse_id_list(params.attribute_term)
        if term_ids:
            clauses.append(TaxClause(params.attribute, "term_id", term_ids))

    if params.featured is not None:
        clauses.append(
            TaxClause(
                VISIBILITY_TAXONOMY,
                "name",
                ("featured",),
                operator="IN" if params.featured else "NOT IN",
            )
        )

    return ProductQuery(
        page=params.page,
        per_page=params.per_page,
        offset=params.offset,
        order=params.order,
        orderby=params.orderby,
        search=(params.search or "").strip(),
        include=parse_id_list(params.include),
        exclude=parse_id_list(params.exclude),
        slug=params.slug or "",
        sku=params.sku or "",
        on_sale=params.on_sale,
        min_price=params.min_price,
        max_price=params.max_price,
        stock_status=params.stock_status or "",
        status=params.status,
        tax_query=tuple(clauses),
    )


def _override_operator(
    clauses: Iterable[TaxClause],
    matches: Callable[[str], bool],
    operator: str,
    hierarchical: bool = False,
) -> Tuple[TaxClause, ...]:
    result = []
    for clause in clauses:
        if matches(clause.taxonomy):
            changes = {"operator": operator}
            if hierarchical:
                # AND needs an exact term intersection; child terms would widen it.
                changes["include_children"] = operator != "AND"
            clause = replace(clause, **changes)
        result.append(clause)
    return tuple(result)


def visibility_clause(catalog_visibility: str) -> TaxClause:
    exclude_from_catalog = "" if catalog_visibility == "search" else "exclude-from-catalog"
    exclude_from_search = "" if catalog_visibility == "catalog" else "exclude-from-search"
    return TaxClause(
        VISIBILITY_TAXONOMY,
        "name",
        (exclude_from_catalog, exclude_from_search),
        operator="AND" if catalog_visibility == "hidden" else "NOT IN",
    )


def augment_query(
    query: ProductQuery,
    params: ProductCollectionParams,
    attribute_taxonomies: Sequence[str],
) -> ProductQuery:
    """Apply block operators and catalog visibility to a base query.

    Operator values are looked up in ``OPERATOR_MAPPING`` directly; the
    parameter model only admits mapped values, so a miss here is a bug
    and surfaces as ``KeyError``.
    """
    clauses = query.tax_query

    if params.category_operator:
        clauses = _override_operator(
            clauses,
            lambda taxonomy: taxonomy == CATEGORY_TAXONOMY,
            OPERATOR_MAPPING[params.category_operator],
            hierarchical=True,
        )

    if params.tag_operator:
        clauses = _override_operator(
            clauses,
            lambda taxonomy: taxonomy == TAG_TAXONOMY,
            OPERATOR_MAPPING[params.tag_operator],
        )

    if params.attribute_operator:
        attribute_names = set(attribute_taxonomies)
        clauses = _override_operator(
            clauses,
            lambda taxonomy: taxonomy in attribute_names,
            OPERATOR_MAPPING[params.attribute_operator],
        )

    if params.catalog_visibility in VISIBILITY_OPTIONS:
        clauses = clauses + (visibility_clause(params.catalog_visibility),)

    logger.debug("Product tax query: %s", clauses)
    return replace(query, tax_query=clauses)


def prepare_product_query(params: ProductCollectionParams, attribute_taxonomies: Sequence[str]) -> ProductQuery:
    return augment_query(prepare_objects_query(params, attribute_taxonomies), params, attribute_taxonomies)
