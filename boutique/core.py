# boutique/core.py
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import Product, ProductOptions

# Admin form input is validated here, before it reaches the catalog.

DEFAULT_IMAGE = "/diverse-products-still-life.png"

_NULLABLE = ("options", "detail_url")


def _whole_number(value: Any) -> Any:
    # Form fields arrive as text; bools would otherwise coerce to 0/1.
    if isinstance(value, bool):
        raise ValueError("must be a whole number")
    if isinstance(value, str):
        value = value.strip()
        if not value:
            raise ValueError("must be a whole number")
    return value


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _image_or_default(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return DEFAULT_IMAGE
    return value


def _check_options(value: Optional[ProductOptions]) -> Optional[ProductOptions]:
    if value is None:
        return None
    values = [v.strip() for v in value.values if v.strip()]
    if not values:
        raise ValueError("options need at least one value")
    return ProductOptions(label=value.label.strip(), values=values)


class ProductIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: str = Field(..., min_length=1)
    price: int = Field(..., ge=0)
    stock: int = Field(..., ge=0)
    image: str = DEFAULT_IMAGE
    options: Optional[ProductOptions] = None
    detail_url: Optional[str] = Field(None, alias="detailUrl")

    @field_validator("price", "stock", mode="before")
    @classmethod
    def check_whole_numbers(cls, value: Any) -> Any:
        return _whole_number(value)

    @field_validator("detail_url", mode="before")
    @classmethod
    def blank_detail_url(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("options")
    @classmethod
    def check_options(cls, value: Optional[ProductOptions]) -> Optional[ProductOptions]:
        return _check_options(value)

    @field_validator("image", mode="before")
    @classmethod
    def default_image(cls, value: Any) -> Any:
        if value is None:
            return DEFAULT_IMAGE
        return _image_or_default(value)


class ProductPatch(BaseModel):
    """Edit form: only the fields actually submitted are applied."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1)
    price: Optional[int] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)
    image: Optional[str] = None
    options: Optional[ProductOptions] = None
    detail_url: Optional[str] = Field(None, alias="detailUrl")

    @field_validator("price", "stock", mode="before")
    @classmethod
    def check_whole_numbers(cls, value: Any) -> Any:
        return _whole_number(value)

    @field_validator("detail_url", mode="before")
    @classmethod
    def blank_detail_url(cls, value: Any) -> Any:
        return _blank_to_none(value)

    @field_validator("options")
    @classmethod
    def check_options(cls, value: Optional[ProductOptions]) -> Optional[ProductOptions]:
        return _check_options(value)

    @field_validator("image", mode="before")
    @classmethod
    def default_image(cls, value: Any) -> Any:
        return _image_or_default(value)

    def changes(self) -> Dict[str, Any]:
        data = self.model_dump(exclude_unset=True)
        # Only the optional product fields may be cleared.
        return {k: v for k, v in data.items() if v is not None or k in _NULLABLE}


class AddToCartIn(BaseModel):
    product_id: str
    selected_option: Optional[str] = None


class ChangeQuantityIn(BaseModel):
    product_id: str
    selected_option: Optional[str] = None
    delta: int


class LoginIn(BaseModel):
    password: str


def parse_option_values(label: str, raw_values: str) -> Optional[ProductOptions]:
    """Turn a label and a comma-separated value list into an options axis.

    A blank label means the product has no variant axis.
    """
    label = (label or "").strip()
    if not label:
        return None
    values: List[str] = [v.strip() for v in (raw_values or "").split(",") if v.strip()]
    return ProductOptions(label=label, values=values)


def _make_product(product_id: str, p: ProductIn, order: int) -> Product:
    return Product(
        id=product_id,
        name=p.name,
        price=p.price,
        image=p.image,
        stock=p.stock,
        options=p.options,
        detail_url=p.detail_url,
        order=order,
    )
