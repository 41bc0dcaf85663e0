from __future__ import annotations

import pytest
from pydantic import ValidationError

from blocksapi.catalog.params import CollectionParams, ProductCollectionParams, sanitize_key
from blocksapi.catalog.query import (
    ProductQuery,
    TaxClause,
    augment_query,
    parse_id_list,
    prepare_objects_query,
    prepare_product_query,
)

ATTRIBUTES = ["pa_size", "pa_color"]


def _clauses(query: ProductQuery, taxonomy: str):
    return [clause for clause in query.tax_query if clause.taxonomy == taxonomy]


@pytest.mark.parametrize(
    "operator, expected_operator, expected_children",
    [("and", "AND", False), ("in", "IN", True), ("not_in", "NOT IN", True)],
)
def test_category_operator_sets_include_children(operator, expected_operator, expected_children):
    params = ProductCollectionParams(category="4,7", category_operator=operator)
    query = prepare_product_query(params, ATTRIBUTES)

    [clause] = _clauses(query, "product_cat")
    assert clause.terms == (4, 7)
    assert clause.operator == expected_operator
    assert clause.include_children is expected_children


def test_tag_operator_only_touches_tag_clauses():
    params = ProductCollectionParams(category="1", tag="10,11", tag_operator="and")
    query = prepare_product_query(params, ATTRIBUTES)

    assert _clauses(query, "product_tag")[0].operator == "AND"
    assert _clauses(query, "product_cat")[0].operator == "IN"


def test_attribute_operator_targets_registered_attribute_taxonomies():
    base = ProductQuery(
        tax_query=(
            TaxClause("pa_size", "term_id", (20, 21)),
            TaxClause("pa_material", "term_id", (30,)),
        )
    )
    params = ProductCollectionParams(attribute_operator="not_in")

    query = augment_query(base, params, ATTRIBUTES)

    assert _clauses(query, "pa_size")[0].operator == "NOT IN"
    # Not a registered attribute taxonomy: passed through untouched.
    assert _clauses(query, "pa_material")[0].operator == "IN"


def test_attribute_filter_ignored_for_unknown_attribute():
    params = ProductCollectionParams(attribute="pa_weight", attribute_term="5")
    query = prepare_objects_query(params, ATTRIBUTES)
    assert query.tax_query == ()


@pytest.mark.parametrize("visibility", ["visible", "catalog", "search", "hidden"])
def test_catalog_visibility_appends_exactly_one_clause(visibility):
    params = ProductCollectionParams(category="1", catalog_visibility=visibility)
    base = prepare_objects_query(params, ATTRIBUTES)

    query = augment_query(base, params, ATTRIBUTES)

    assert len(query.tax_query) == len(base.tax_query) + 1
    clause = query.tax_query[-1]
    assert clause.taxonomy == "product_visibility"
    assert clause.field == "name"
    assert clause.operator == ("AND" if visibility == "hidden" else "NOT IN")


@pytest.mark.parametrize("visibility", ["any", None])
def test_catalog_visibility_any_appends_nothing(visibility):
    params = ProductCollectionParams(category="1", catalog_visibility=visibility)
    base = prepare_objects_query(params, ATTRIBUTES)

    query = augment_query(base, params, ATTRIBUTES)

    assert len(query.tax_query) == len(base.tax_query)


@pytest.mark.parametrize(
    "visibility, terms",
    [
        ("visible", ("exclude-from-catalog", "exclude-from-search")),
        ("catalog", ("exclude-from-catalog", "")),
        ("search", ("", "exclude-from-search")),
        ("hidden", ("exclude-from-catalog", "exclude-from-search")),
    ],
)
def test_catalog_visibility_terms(visibility, terms):
    query = prepare_product_query(ProductCollectionParams(catalog_visibility=visibility), ATTRIBUTES)
    assert query.tax_query[-1].terms == terms


def test_augment_returns_new_query_and_keeps_foreign_clauses():
    foreign = TaxClause("product_brand", "slug", ("acme",), operator="EXISTS")
    base = ProductQuery(tax_query=(TaxClause("product_cat", "term_id", (1,)), foreign))
    params = ProductCollectionParams(category_operator="and", catalog_visibility="hidden")

    query = augment_query(base, params, ATTRIBUTES)

    assert base.tax_query[0].operator == "IN"
    assert query.tax_query[0].operator == "AND"
    assert query.tax_query[1] is foreign
    assert len(query.tax_query) == 3


def test_base_translation_builds_clauses_in_order():
    params = ProductCollectionParams(
        category="2",
        tag="10",
        type="simple",
        attribute="pa_size",
        attribute_term="20,21",
        featured=True,
        include="3, 1,3",
        orderby="menu_order",
        order="asc",
        page=2,
        per_page=5,
    )

    query = prepare_objects_query(params, ATTRIBUTES)

    assert [c.taxonomy for c in query.tax_query] == [
        "product_cat",
        "product_tag",
        "product_type",
        "pa_size",
        "product_visibility",
    ]
    assert query.tax_query[2] == TaxClause("product_type", "slug", ("simple",))
    assert query.tax_query[4].terms == ("featured",)
    assert query.include == (3, 1)
    assert (query.page, query.per_page, query.orderby, query.order) == (2, 5, "menu_order", "asc")


def test_featured_false_excludes_featured_term():
    query = prepare_objects_query(ProductCollectionParams(featured=False), ATTRIBUTES)
    assert query.tax_query == (TaxClause("product_visibility", "name", ("featured",), operator="NOT IN"),)


def test_parse_id_list():
    assert parse_id_list("3, 1,3 7") == (3, 1, 7)
    assert parse_id_list("abc,-4,0") == (4,)
    assert parse_id_list(None) == ()


def test_sanitize_key():
    assert sanitize_key(" NOT_IN ") == "not_in"
    assert sanitize_key("Hid<den>") == "hidden"


def test_operator_params_are_sanitized_before_validation():
    params = ProductCollectionParams(category_operator=" Not_In", catalog_visibility="HIDDEN")
    assert params.category_operator == "not_in"
    assert params.catalog_visibility == "hidden"


@pytest.mark.parametrize("value", ["", "or", "nand"])
def test_unknown_operator_is_a_validation_error(value):
    with pytest.raises(ValidationError):
        ProductCollectionParams(tag_operator=value)


def test_operators_default_to_in():
    params = ProductCollectionParams()
    assert (params.category_operator, params.tag_operator, params.attribute_operator) == ("in", "in", "in")
    assert params.catalog_visibility is None


def test_extra_sort_keys_only_on_product_params():
    assert ProductCollectionParams(orderby="comment_count").orderby == "comment_count"
    assert ProductCollectionParams(orderby="menu_order").orderby == "menu_order"
    with pytest.raises(ValidationError):
        CollectionParams(orderby="menu_order")


def test_status_defaults_to_any_and_reaches_query():
    assert prepare_objects_query(ProductCollectionParams(), ATTRIBUTES).status == "any"
    assert prepare_objects_query(ProductCollectionParams(status="draft"), ATTRIBUTES).status == "draft"
    with pytest.raises(ValidationError):
        ProductCollectionParams(status="archived")
