import pytest
from pydantic import ValidationError

from gardencart.schemas.cart_schema import (
    FlatCartResponse,
    NestedCartResponse,
    UnrecognizedCartResponse,
    classify_cart_response,
)

from conftest import line

ITEMS = [line("i1", "p1", 100, 2), line("i2", "p2", 250, 1)]


def test_both_shapes_normalize_to_the_same_items():
    nested = classify_cart_response({"success": True, "cart": {"items": ITEMS}})
    flat = classify_cart_response({"success": True, "items": ITEMS})
    assert isinstance(nested, NestedCartResponse)
    assert isinstance(flat, FlatCartResponse)
    assert nested.items == flat.items
    assert [it.id for it in flat.items] == ["i1", "i2"]


def test_nested_wins_when_both_present():
    res = classify_cart_response({"cart": {"items": ITEMS[:1]}, "items": ITEMS})
    assert isinstance(res, NestedCartResponse)
    assert len(res.items) == 1


def test_nested_cart_without_items_is_empty():
    res = classify_cart_response({"cart": {}})
    assert isinstance(res, NestedCartResponse)
    assert res.items == []


def test_empty_flat_list_is_recognized():
    assert isinstance(classify_cart_response({"items": []}), FlatCartResponse)


def test_unrecognized_shapes():
    for payload in ({"success": True, "message": "added"}, None, [], {"items": "nope"}):
        assert isinstance(classify_cart_response(payload), UnrecognizedCartResponse)


def test_line_item_accepts_numeric_ids_and_computes_total():
    res = classify_cart_response({"items": [{"id": 7, "product": {"id": 3, "price": "12.5"}, "quantity": 4}]})
    item = res.items[0]
    assert item.id == "7"
    assert item.product.id == "3"
    assert item.line_total == 50


@pytest.mark.parametrize("quantity", [0, -2])
def test_line_item_quantity_must_be_positive(quantity):
    with pytest.raises(ValidationError):
        classify_cart_response({"items": [line("i1", "p1", 100, quantity)]})
