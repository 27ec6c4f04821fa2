# boutique/main.py
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from .auth import LOGIN_FAILED_MESSAGE, AdminSession
from .checkout import PAYMENT_INSTRUCTIONS, InvalidTransition
from .config import Settings, get_settings
from .core import AddToCartIn, ChangeQuantityIn, LoginIn, ProductIn, ProductPatch
from .database import FileStorage, MemoryStorage, Storage
from .log import add_context, configure_logging, get_logger
from .models import Product
from .shop import ShopError, Storefront

logger = get_logger(__name__)


def create_app(
    storage: Optional[Storage] = None,
    session_storage: Optional[Storage] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    settings = settings or get_settings()
    if storage is None:
        storage = FileStorage(settings.storage_dir)
    if session_storage is None:
        session_storage = MemoryStorage()

    app = FastAPI(title="boutique (storefront + admin)")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # One shopper session and one admin session per process.
    app.state.storefront = Storefront(storage)
    app.state.admin = AdminSession(session_storage, settings.admin_password)

    _register_storefront_routes(app)
    _register_admin_routes(app)
    return app


def _storefront(request: Request) -> Storefront:
    return request.app.state.storefront


def _admin(request: Request) -> AdminSession:
    return request.app.state.admin


def require_admin(admin: AdminSession = Depends(_admin)) -> AdminSession:
    if not admin.is_authenticated():
        raise HTTPException(status_code=401, detail="admin login required")
    return admin


def _http_error(e: Exception) -> HTTPException:
    # Store refusals are ShopErrors; a checkout step out of order is a conflict.
    status_code = e.status_code if isinstance(e, ShopError) else 409
    return HTTPException(status_code=status_code, detail=str(e))


def _dump(products: List[Product]) -> List[Dict[str, Any]]:
    return [p.model_dump(by_alias=True, exclude_none=True) for p in products]


def _register_storefront_routes(app: FastAPI) -> None:
    # ---------------------------
    # Product endpoints
    # ---------------------------
    @app.get("/products")
    def list_products(available_only: bool = False, shop: Storefront = Depends(_storefront)):
        return _dump(shop.products(available_only=available_only))

    @app.get("/products/{product_id}")
    def get_product(product_id: str, shop: Storefront = Depends(_storefront)):
        try:
            return _dump([shop.product(product_id)])[0]
        except ShopError as e:
            raise _http_error(e)

    # ---------------------------
    # Cart endpoints
    # ---------------------------
    @app.get("/cart")
    def view_cart(shop: Storefront = Depends(_storefront)):
        return shop.cart_view()

    @app.post("/cart/add")
    def cart_add(payload: AddToCartIn, shop: Storefront = Depends(_storefront)):
        try:
            shop.add_to_cart(payload.product_id, payload.selected_option)
        except ShopError as e:
            raise _http_error(e)
        return shop.cart_view()

    @app.post("/cart/quantity")
    def cart_quantity(payload: ChangeQuantityIn, shop: Storefront = Depends(_storefront)):
        shop.change_quantity(payload.product_id, payload.selected_option, payload.delta)
        return shop.cart_view()

    # ---------------------------
    # Checkout (simulated payment)
    # ---------------------------
    @app.get("/checkout")
    def checkout_state(shop: Storefront = Depends(_storefront)):
        return shop.checkout.summary()

    @app.post("/checkout/summary")
    def checkout_summary(shop: Storefront = Depends(_storefront)):
        try:
            shop.start_checkout()
        except (ShopError, InvalidTransition) as e:
            raise _http_error(e)
        return shop.checkout.summary()

    @app.post("/checkout/payment")
    def checkout_payment(shop: Storefront = Depends(_storefront)):
        try:
            shop.checkout.proceed_to_payment()
        except InvalidTransition as e:
            raise _http_error(e)
        summary = shop.checkout.summary().model_dump()
        summary["payment_instructions"] = list(PAYMENT_INSTRUCTIONS)
        return summary

    @app.post("/checkout/confirm")
    def checkout_confirm(shop: Storefront = Depends(_storefront)):
        try:
            receipt = shop.checkout.confirm_payment()
        except InvalidTransition as e:
            raise _http_error(e)
        return {"status": "paid", "message": "Payment complete. Thank you!", "receipt": receipt}

    @app.post("/checkout/back")
    def checkout_back(shop: Storefront = Depends(_storefront)):
        shop.checkout.back()
        return shop.checkout.summary()


def _register_admin_routes(app: FastAPI) -> None:
    # ---------------------------
    # Admin session
    # ---------------------------
    @app.post("/admin/login")
    def admin_login(payload: LoginIn, admin: AdminSession = Depends(_admin)):
        if not admin.login(payload.password):
            raise HTTPException(status_code=401, detail=LOGIN_FAILED_MESSAGE)
        return {"status": "authenticated"}

    @app.post("/admin/logout")
    def admin_logout(admin: AdminSession = Depends(_admin)):
        admin.logout()
        return {"status": "logged out"}

    # ---------------------------
    # Catalog management
    # ---------------------------
    @app.get("/admin/products", dependencies=[Depends(require_admin)])
    def admin_products(shop: Storefront = Depends(_storefront)):
        return _dump(shop.catalog.list())

    @app.post("/admin/products", status_code=201, dependencies=[Depends(require_admin)])
    def admin_add_product(payload: ProductIn, shop: Storefront = Depends(_storefront)):
        product = shop.catalog.add(payload)
        return {"product_id": product.id, "product": _dump([product])[0]}

    @app.patch("/admin/products/{product_id}", dependencies=[Depends(require_admin)])
    def admin_update_product(product_id: str, payload: ProductPatch,
                                   shop: Storefront = Depends(_storefront)):
        shop.catalog.update(product_id, payload.changes())
        return _dump(shop.catalog.list())

    @app.delete("/admin/products/{product_id}", dependencies=[Depends(require_admin)])
    def admin_remove_product(product_id: str, shop: Storefront = Depends(_storefront)):
        shop.catalog.remove(product_id)
        return _dump(shop.catalog.list())

    @app.post("/admin/products/{product_id}/up", dependencies=[Depends(require_admin)])
    def admin_move_up(product_id: str, shop: Storefront = Depends(_storefront)):
        shop.catalog.move_up(product_id)
        return _dump(shop.catalog.list())

    @app.post("/admin/products/{product_id}/down", dependencies=[Depends(require_admin)])
    def admin_move_down(product_id: str, shop: Storefront = Depends(_storefront)):
        shop.catalog.move_down(product_id)
        return _dump(shop.catalog.list())


def main() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.environment, settings.log_level)
    add_context(surface="http")
    logger.info("starting server", host=settings.host, port=settings.port, storage=settings.storage_dir)
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
