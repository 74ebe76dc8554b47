from pydantic import BaseModel, Field
from typing import Optional


class ProductCreate(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    name_ar: Optional[str] = None
    name_fr: Optional[str] = None
    description: Optional[str] = None
    price: float = Field(gt=0)
    stock_quantity: int = Field(default=0, ge=0)
    is_active: bool = True


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    name_ar: Optional[str] = None
    name_fr: Optional[str] = None
    description: Optional[str] = None
    price: Optional[float] = Field(default=None, gt=0)
    stock_quantity: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class ProductOut(BaseModel):
    id: int
    tenant_id: int
    name: str
    name_ar: Optional[str] = None
    name_fr: Optional[str] = None
    description: Optional[str] = None
    price: float
    stock_quantity: int
    is_active: bool

    class Config:
        from_attributes = True
