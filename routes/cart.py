from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.db import get_db
from core.tenancy import get_current_tenant
from models.tenant import Tenant
from models.user import User
from routes.auth import get_optional_user
from schemas.cart import CartLineIn, CartLineUpdate
from services.cart import cart_service

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("/")
def get_cart(
    tenant: Tenant = Depends(get_current_tenant),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return cart_service.list_lines(db, user, tenant.id).to_response()


@router.post("/items")
def add_to_cart(data: CartLineIn, user: Optional[User] = Depends(get_optional_user), db: Session = Depends(get_db)):
    return cart_service.add_line(db, user, data.product_id, data.quantity).to_response(201)


@router.patch("/items/{line_id}")
def update_cart_item(
    line_id: int,
    data: CartLineUpdate,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return cart_service.update_line(db, user, line_id, data.quantity).to_response()


@router.delete("/items/{line_id}")
def remove_from_cart(line_id: int, user: Optional[User] = Depends(get_optional_user), db: Session = Depends(get_db)):
    return cart_service.remove_line(db, user, line_id).to_response()


@router.delete("/")
def clear_cart(
    tenant_id: Optional[int] = None,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return cart_service.clear(db, user, tenant_id).to_response()
