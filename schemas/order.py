from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List, Literal, Optional

PHONE_PATTERN = r"^\+?[0-9][0-9 -]{7,}$"


class CheckoutRequest(BaseModel):
    tenant_id: int
    tenant_slug: str = Field(min_length=1)
    customer_name: str = Field(min_length=1, max_length=200)
    customer_phone: str = Field(pattern=PHONE_PATTERN, max_length=30)
    customer_email: Optional[EmailStr] = None
    delivery_address: str = Field(min_length=10)
    wilaya: str = Field(min_length=1)
    commune: str = Field(min_length=1)
    notes: Optional[str] = None
    payment_method: Literal["cash", "card"] = "cash"

    @field_validator("customer_email", "notes", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("customer_name", "delivery_address", "wilaya", "commune", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @property
    def flattened_address(self) -> str:
        return f"{self.delivery_address}, {self.commune}, {self.wilaya}"


class OrderSummary(BaseModel):
    id: int
    order_number: str
    total: float


class OrderItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    quantity: int
    unit_price: float
    total_price: float

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: int
    tenant_id: int
    order_number: str
    status: str
    payment_status: str
    payment_method: str
    customer_name: str
    customer_phone: str
    customer_email: Optional[str] = None
    delivery_address: str
    notes: Optional[str] = None
    delivery_fee: float
    subtotal: float
    total: float
    created_at: datetime
    updated_at: datetime
    items: List[OrderItemOut]

    class Config:
        from_attributes = True


class OrderListItem(BaseModel):
    id: int
    tenant_id: int
    order_number: str
    status: str
    payment_status: str
    total: float
    created_at: datetime

    class Config:
        from_attributes = True
