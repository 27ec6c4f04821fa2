# boutique/shop.py
from typing import Iterable, List, Optional

from pydantic import BaseModel

from .cart import NO_OPTION, CartEngine, can_add
from .catalog import CatalogStore
from .checkout import CheckoutSequencer
from .database import Storage
from .log import get_logger
from .models import CartItem, Product
from .seed import seed_products

# This file ties the stores together for one shopper session; the HTTP routes
# and the terminal shop both call into it.

logger = get_logger(__name__)


class ShopError(Exception):
    status_code = 400


class ProductNotFound(ShopError):
    status_code = 404

    def __init__(self, product_id: str):
        super().__init__("product not found")
        self.product_id = product_id


class CannotAddToCart(ShopError):
    status_code = 409


class EmptyCart(ShopError):
    status_code = 409

    def __init__(self):
        super().__init__("cart empty")


class CartView(BaseModel):
    items: List[CartItem]
    total: int
    item_count: int


class Storefront:
    def __init__(self, storage: Storage, seed: Optional[Iterable[Product]] = None):
        self.storage = storage
        self._seed = seed
        self.cart = CartEngine()
        self.catalog = self._load_catalog()
        self.checkout = CheckoutSequencer(self.catalog, self.cart)

    def _load_catalog(self) -> CatalogStore:
        seed = seed_products() if self._seed is None else list(self._seed)
        return CatalogStore.load(self.storage, seed=seed)

    def reload(self) -> None:
        """Re-read the catalog record, e.g. after admin edits. The cart is kept."""
        self.catalog = self._load_catalog()
        self.checkout.catalog = self.catalog

    # ---------------------------
    # Catalog
    # ---------------------------
    def products(self, available_only: bool = False) -> List[Product]:
        out = self.catalog.list()
        if available_only:
            out = [p for p in out if p.in_stock]
        return out

    def product(self, product_id: str) -> Product:
        p = self.catalog.get(product_id)
        if p is None:
            raise ProductNotFound(product_id)
        return p

    # ---------------------------
    # Cart
    # ---------------------------
    def add_to_cart(self, product_id: str, selected_option: Optional[str] = NO_OPTION) -> CartItem:
        product = self.product(product_id)
        if not can_add(product, selected_option):
            if not product.in_stock:
                raise CannotAddToCart("sold out")
            if product.options is not None:
                raise CannotAddToCart(f"choose a {product.options.label.lower()} first")
            raise CannotAddToCart("product has no options")
        return self.cart.add_item(product, selected_option)

    def change_quantity(self, product_id: str, selected_option: Optional[str], delta: int) -> None:
        self.cart.change_quantity(product_id, selected_option, delta)

    def cart_view(self) -> CartView:
        return CartView(
            items=list(self.cart.items),
            total=self.cart.total(),
            item_count=self.cart.item_count(),
        )

    def start_checkout(self) -> None:
        if self.cart.is_empty():
            raise EmptyCart()
        self.checkout.proceed_to_summary()
