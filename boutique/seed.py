# boutique/seed.py
from typing import List

from .models import Product, ProductOptions

# Catalog used when no durable record exists yet.

SEED_PRODUCTS: List[Product] = [
    Product(
        id="1",
        name="Silver Bracelet",
        price=3500,
        image="/silver-bracelet.png",
        stock=10,
        options=ProductOptions(label="Size", values=["16cm", "18cm"]),
        detail_url="https://example.com/silver-bracelet-details",
    ),
    Product(
        id="2",
        name="Gold Necklace",
        price=8900,
        image="/gold-necklace.png",
        stock=5,
        detail_url="https://example.com/gold-necklace-details",
    ),
    Product(
        id="3",
        name="Pearl Earrings",
        price=4200,
        image="/pearl-earrings-jewelry.jpg",
        stock=0,
        detail_url="https://example.com/pearl-earrings-details",
    ),
]


def seed_products() -> List[Product]:
    """Fresh copies, so callers can't mutate the module-level seed."""
    return [p.model_copy(deep=True) for p in SEED_PRODUCTS]
