from pydantic import BaseModel
from typing import Optional


class TenantOut(BaseModel):
    id: int
    name: str
    name_ar: Optional[str] = None
    name_fr: Optional[str] = None
    slug: str
    domain: Optional[str] = None
    delivery_fee: Optional[float] = None
    minimum_order: float
    currency: str

    class Config:
        from_attributes = True
