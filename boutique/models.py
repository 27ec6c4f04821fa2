# boutique/models.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProductOptions(BaseModel):
    """A single variant axis, e.g. label "Size" with values ["16cm", "18cm"]."""

    label: str
    values: List[str]


class Product(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    price: int = Field(..., ge=0)
    image: str = ""
    stock: int = Field(..., ge=0)
    options: Optional[ProductOptions] = None
    detail_url: Optional[str] = Field(None, alias="detailUrl")
    order: Optional[int] = None

    @property
    def in_stock(self) -> bool:
        return self.stock > 0


class CartItem(BaseModel):
    product_id: str
    # None means the product has no variant axis.
    selected_option: Optional[str] = None
    quantity: int = Field(..., gt=0)
    # Snapshot taken when the item was first added.
    price: int
    name: str

    @property
    def line_total(self) -> int:
        return self.price * self.quantity
