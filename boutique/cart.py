# boutique/cart.py
from typing import List, Optional, Tuple

from .log import get_logger
from .models import CartItem, Product

logger = get_logger(__name__)

# The product has no variant axis.
NO_OPTION: Optional[str] = None
# The product has a variant axis but the shopper has not picked a value yet.
UNSELECTED = ""


def can_add(product: Product, selected_option: Optional[str] = NO_OPTION) -> bool:
    """Whether a view should offer "add to cart" for this product and selection.

    The cart itself accepts anything; this is the contract the storefront
    enforces before calling ``CartEngine.add_item``.
    """
    if product.stock <= 0:
        return False
    if product.options is None:
        return selected_option is NO_OPTION
    if selected_option is NO_OPTION or selected_option == UNSELECTED:
        return False
    return selected_option in product.options.values


class CartEngine:
    """The shopper's line items, keyed by (product id, selected option)."""

    def __init__(self):
        self._items: List[CartItem] = []

    @property
    def items(self) -> Tuple[CartItem, ...]:
        return tuple(item.model_copy() for item in self._items)

    def find(self, product_id: str, selected_option: Optional[str] = NO_OPTION) -> Optional[CartItem]:
        for item in self._items:
            if item.product_id == product_id and item.selected_option == selected_option:
                return item.model_copy()
        return None

    def is_empty(self) -> bool:
        return not self._items

    def add_item(self, product: Product, selected_option: Optional[str] = NO_OPTION) -> CartItem:
        for index, item in enumerate(self._items):
            if item.product_id == product.id and item.selected_option == selected_option:
                merged = item.model_copy(update={"quantity": item.quantity + 1})
                self._items[index] = merged
                logger.debug("cart line merged", product_id=product.id, option=selected_option,
                             quantity=merged.quantity)
                return merged.model_copy()

        # price and name are snapshotted here and never re-read
        item = CartItem(
            product_id=product.id,
            selected_option=selected_option,
            quantity=1,
            price=product.price,
            name=product.name,
        )
        self._items.append(item)
        logger.debug("cart line added", product_id=product.id, option=selected_option)
        return item.model_copy()

    def change_quantity(self, product_id: str, selected_option: Optional[str], delta: int) -> None:
        updated: List[CartItem] = []
        for item in self._items:
            if item.product_id == product_id and item.selected_option == selected_option:
                quantity = item.quantity + delta
                if quantity <= 0:
                    logger.debug("cart line removed", product_id=product_id, option=selected_option)
                    continue
                item = item.model_copy(update={"quantity": quantity})
            updated.append(item)
        self._items = updated

    def total(self) -> int:
        return sum(item.price * item.quantity for item in self._items)

    def item_count(self) -> int:
        return sum(item.quantity for item in self._items)

    def clear(self) -> None:
        self._items = []
