# boutique/catalog.py
import uuid
from typing import Any, Iterable, List, Mapping, Optional, Union

from pydantic import TypeAdapter, ValidationError

from .core import ProductIn, _make_product
from .database import PRODUCTS_KEY, Storage
from .log import get_logger
from .models import Product

logger = get_logger(__name__)

_catalog_adapter = TypeAdapter(List[Product])

# Persisted JSON keeps the camelCase key.
_ALIASES = {"detailUrl": "detail_url"}


def _normalize(products: Iterable[Product]) -> List[Product]:
    """Default a missing ``order`` to the positional index, then stable-sort by it."""
    out = [
        p if p.order is not None else p.model_copy(update={"order": index})
        for index, p in enumerate(products)
    ]
    out.sort(key=lambda p: p.order)
    return out


def _dedupe(products: List[Product]) -> List[Product]:
    seen = set()
    out = []
    for p in products:
        if p.id in seen:
            logger.warning("duplicate product id in stored catalog, dropping", product_id=p.id)
            continue
        seen.add(p.id)
        out.append(p)
    return out


def read_catalog(storage: Storage) -> Optional[List[Product]]:
    """Return the stored catalog, or None when the slot is empty or unreadable."""
    raw = storage.read(PRODUCTS_KEY)
    if raw is None:
        return None
    try:
        products = _catalog_adapter.validate_json(raw)
    except ValidationError as e:
        logger.warning("stored catalog is malformed, treating as absent", errors=e.error_count())
        return None
    return _dedupe(products)


class CatalogStore:
    """The product list, its stock levels and its display order.

    Every mutation re-normalizes the whole list and writes it back as one
    snapshot. Operations on an unknown id are silent no-ops.
    """

    def __init__(self, storage: Storage, products: Optional[Iterable[Product]] = None):
        self.storage = storage
        self._products: List[Product] = _normalize(products or [])

    @classmethod
    def load(cls, storage: Storage, seed: Optional[Iterable[Product]] = None) -> "CatalogStore":
        """Deserialize the catalog once.

        With no usable record, the storefront passes ``seed`` and it is written
        back immediately; the admin passes nothing and starts empty.
        """
        products = read_catalog(storage)
        if products is not None:
            return cls(storage, products)
        if seed is None:
            return cls(storage, [])
        store = cls(storage, seed)
        store._persist()
        logger.info("catalog seeded", count=len(store))
        return store

    def __len__(self) -> int:
        return len(self._products)

    # ---------------------------
    # Queries
    # ---------------------------
    def list(self) -> List[Product]:
        return [p.model_copy(deep=True) for p in self._products]

    def get(self, product_id: str) -> Optional[Product]:
        index = self._index(product_id)
        if index is None:
            return None
        return self._products[index].model_copy(deep=True)

    # ---------------------------
    # Admin commands
    # ---------------------------
    def add(self, data: Union[ProductIn, Mapping[str, Any]]) -> Product:
        if not isinstance(data, ProductIn):
            data = ProductIn.model_validate(data)
        pid = uuid.uuid4().hex
        while self._index(pid) is not None:
            pid = uuid.uuid4().hex
        product = _make_product(pid, data, order=len(self._products))
        self._save(self._products + [product])
        logger.info("product added", product_id=pid, name=product.name, order=product.order)
        return product.model_copy(deep=True)

    def update(self, product_id: str, fields: Mapping[str, Any]) -> Optional[Product]:
        index = self._index(product_id)
        if index is None:
            logger.debug("update on unknown product ignored", product_id=product_id)
            return None

        current = self._products[index]
        merged = current.model_dump()
        for key, value in fields.items():
            merged[_ALIASES.get(key, key)] = value
        merged["id"] = current.id
        updated = Product.model_validate(merged)

        products = list(self._products)
        products[index] = updated
        self._save(products)
        logger.info("product updated", product_id=product_id, fields=sorted(fields))
        return updated.model_copy(deep=True)

    def remove(self, product_id: str) -> None:
        if self._index(product_id) is None:
            logger.debug("remove on unknown product ignored", product_id=product_id)
            return
        self._save([p for p in self._products if p.id != product_id])
        logger.info("product removed", product_id=product_id)

    def move_up(self, product_id: str) -> None:
        index = self._index(product_id)
        if index is None or index == 0:
            return
        self._swap_order(index - 1, index)

    def move_down(self, product_id: str) -> None:
        index = self._index(product_id)
        if index is None or index == len(self._products) - 1:
            return
        self._swap_order(index, index + 1)

    # ---------------------------
    # Checkout
    # ---------------------------
    def decrement_stock(self, product_id: str, amount: int) -> None:
        if amount < 0:
            raise ValueError("amount must be >= 0")
        index = self._index(product_id)
        if index is None:
            logger.debug("stock decrement on unknown product ignored", product_id=product_id)
            return
        current = self._products[index]
        stock = max(0, current.stock - amount)
        products = list(self._products)
        products[index] = current.model_copy(update={"stock": stock})
        self._save(products)
        logger.info("stock decremented", product_id=product_id, amount=amount, stock=stock)

    # ---------------------------
    # Helpers
    # ---------------------------
    def _index(self, product_id: str) -> Optional[int]:
        for index, p in enumerate(self._products):
            if p.id == product_id:
                return index
        return None

    def _swap_order(self, upper: int, lower: int) -> None:
        # Swap the two order values only; the rest of the list keeps its numbers.
        a, b = self._products[upper], self._products[lower]
        products = list(self._products)
        products[upper] = a.model_copy(update={"order": b.order})
        products[lower] = b.model_copy(update={"order": a.order})
        self._save(products)
        logger.info("products reordered", first=b.id, second=a.id)

    def _save(self, products: List[Product]) -> None:
        self._products = _normalize(products)
        self._persist()

    def _persist(self) -> None:
        blob = _catalog_adapter.dump_json(self._products, by_alias=True, exclude_none=True)
        self.storage.write(PRODUCTS_KEY, blob.decode("utf-8"))
