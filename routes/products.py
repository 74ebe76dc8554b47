from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from typing import List

from core.db import get_db
from core.tenancy import get_current_tenant, require_capability
from models.tenant import Tenant
from models.product import Product
from schemas.product import ProductCreate, ProductUpdate, ProductOut

router = APIRouter(prefix="/products", tags=["products"])


def _get_tenant_product(db: Session, tenant: Tenant, product_id: int) -> Product:
    product = db.query(Product).filter(Product.tenant_id == tenant.id, Product.id == product_id).one_or_none()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.get("/", response_model=List[ProductOut])
def list_products(tenant: Tenant = Depends(get_current_tenant), db: Session = Depends(get_db)):
    qs = db.query(Product).filter(Product.tenant_id == tenant.id, Product.is_active.is_(True))
    return qs.order_by(Product.name).all()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, tenant: Tenant = Depends(get_current_tenant), db: Session = Depends(get_db)):
    product = _get_tenant_product(db, tenant, product_id)
    if not product.is_active:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/", response_model=ProductOut, status_code=201)
def create_product(
    data: ProductCreate,
    tenant: Tenant = Depends(require_capability("products")),
    db: Session = Depends(get_db),
):
    product = Product(tenant_id=tenant.id, **data.model_dump())
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@router.patch("/{product_id}", response_model=ProductOut)
def update_product(
    product_id: int,
    data: ProductUpdate,
    tenant: Tenant = Depends(require_capability("products")),
    db: Session = Depends(get_db),
):
    product = _get_tenant_product(db, tenant, product_id)
    # Existing order items keep their own price/name snapshot
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return product


@router.delete("/{product_id}", status_code=204)
def delete_product(
    product_id: int,
    tenant: Tenant = Depends(require_capability("products")),
    db: Session = Depends(get_db),
):
    product = _get_tenant_product(db, tenant, product_id)
    db.delete(product)
    db.commit()
    return None
