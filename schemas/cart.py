from pydantic import BaseModel
from typing import List


class CartLineIn(BaseModel):
    product_id: int
    # Range is checked by the cart service so errors come back in the envelope
    quantity: int = 1


class CartLineUpdate(BaseModel):
    quantity: int


class CartLineOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    quantity: int
    unit_price: float
    line_total: float
    stock_quantity: int
    is_active: bool


class CartOut(BaseModel):
    tenant_id: int
    items: List[CartLineOut]
    item_count: int
    subtotal: float
