#!/usr/bin/env python
import tempfile

from boutique.auth import AdminSession
from boutique.database import FileStorage, MemoryStorage
from boutique.shop import Storefront


def main():
    storage = FileStorage(tempfile.mkdtemp(prefix="boutique-demo-"))

    # -----------------------------
    # First visit: seed catalog
    # -----------------------------
    print("Loading storefront...")
    shop = Storefront(storage)
    for p in shop.products():
        print(f"  {p.name}: ¥{p.price:,} (stock {p.stock})")

    # -----------------------------
    # Build a cart
    # -----------------------------
    print("\nAdding Silver Bracelet (16cm) twice...")
    shop.add_to_cart("1", "16cm")
    shop.add_to_cart("1", "16cm")
    print(shop.cart_view().model_dump())

    # -----------------------------
    # Admin changes the price
    # -----------------------------
    print("\nAdmin raises the bracelet price to ¥5,000...")
    admin = AdminSession(MemoryStorage(), "admin123")
    admin.login("admin123")
    shop.catalog.update("1", {"price": 5000})
    print("Catalog price:", shop.product("1").price, "| cart total:", shop.cart.total())

    # -----------------------------
    # Checkout
    # -----------------------------
    print("\nChecking out...")
    shop.start_checkout()
    print(shop.checkout.summary().model_dump())
    shop.checkout.proceed_to_payment()
    receipt = shop.checkout.confirm_payment()
    print(receipt.model_dump())

    # -----------------------------
    # Reload
    # -----------------------------
    print("\nReloading storefront...")
    shop = Storefront(storage)
    print("Silver Bracelet stock:", shop.product("1").stock)


if __name__ == "__main__":
    main()
