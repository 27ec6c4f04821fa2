# tests/test_cart.py
import pytest

from boutique.cart import NO_OPTION, UNSELECTED, CartEngine, can_add
from boutique.models import Product, ProductOptions


@pytest.fixture
def bracelet():
    return Product(id="1", name="Silver Bracelet", price=3500, stock=10,
                   options=ProductOptions(label="Size", values=["16cm", "18cm"]))


@pytest.fixture
def necklace():
    return Product(id="2", name="Gold Necklace", price=8900, stock=5)


def test_repeated_adds_merge_into_one_line(cart, necklace):
    for _ in range(4):
        cart.add_item(necklace)
    assert len(cart.items) == 1
    assert cart.items[0].quantity == 4
    assert cart.items[0].selected_option is NO_OPTION


def test_different_options_are_different_lines(cart, bracelet):
    cart.add_item(bracelet, "16cm")
    cart.add_item(bracelet, "18cm")
    cart.add_item(bracelet, "16cm")
    assert [(i.selected_option, i.quantity) for i in cart.items] == [("16cm", 2), ("18cm", 1)]


def test_no_option_and_unselected_are_distinct_keys(cart, necklace):
    # The engine accepts both; keeping them apart is what lets views tell them apart.
    cart.add_item(necklace, NO_OPTION)
    cart.add_item(necklace, UNSELECTED)
    assert len(cart.items) == 2


def test_add_snapshots_price_and_name(cart, necklace):
    cart.add_item(necklace)
    repriced = necklace.model_copy(update={"price": 1, "name": "Renamed"})
    cart.add_item(repriced)
    item = cart.find("2")
    assert item.quantity == 2
    assert item.price == 8900
    assert item.name == "Gold Necklace"


def test_change_quantity_updates_in_place(cart, bracelet):
    cart.add_item(bracelet, "16cm")
    cart.change_quantity("1", "16cm", 2)
    assert cart.find("1", "16cm").quantity == 3
    cart.change_quantity("1", "16cm", -1)
    assert cart.find("1", "16cm").quantity == 2


@pytest.mark.parametrize("delta", [-1, -5])
def test_change_quantity_to_zero_or_below_removes(cart, bracelet, necklace, delta):
    cart.add_item(bracelet, "16cm")
    cart.add_item(necklace)
    cart.change_quantity("1", "16cm", delta)
    assert cart.find("1", "16cm") is None
    assert [i.product_id for i in cart.items] == ["2"]
    assert all(i.quantity > 0 for i in cart.items)


def test_change_quantity_unknown_line_is_noop(cart, bracelet):
    cart.add_item(bracelet, "16cm")
    cart.change_quantity("1", "18cm", 1)
    cart.change_quantity("9", NO_OPTION, -1)
    assert [(i.selected_option, i.quantity) for i in cart.items] == [("16cm", 1)]


def test_totals(cart, bracelet, necklace):
    assert cart.total() == 0
    assert cart.item_count() == 0
    cart.add_item(bracelet, "16cm")
    cart.add_item(bracelet, "16cm")
    cart.add_item(necklace)
    assert cart.total() == 3500 * 2 + 8900
    assert cart.item_count() == 3


def test_clear(cart, necklace):
    cart.add_item(necklace)
    cart.clear()
    assert cart.is_empty()
    assert cart.total() == 0


def test_items_are_copies(cart, necklace):
    cart.add_item(necklace)
    cart.items[0].quantity = 99
    assert cart.find("2").quantity == 1


def test_can_add_requires_stock(bracelet, necklace):
    sold_out = necklace.model_copy(update={"stock": 0})
    assert not can_add(sold_out)
    assert not can_add(bracelet.model_copy(update={"stock": 0}), "16cm")


def test_can_add_requires_a_valid_choice_when_options_exist(bracelet):
    assert not can_add(bracelet, NO_OPTION)
    assert not can_add(bracelet, UNSELECTED)
    assert not can_add(bracelet, "20cm")
    assert can_add(bracelet, "18cm")


def test_can_add_without_options(necklace):
    assert can_add(necklace)
    assert not can_add(necklace, "16cm")


def test_new_engine_is_empty():
    assert CartEngine().is_empty()
