from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from core.db import get_db
from core.tenancy import require_capability
from models.order import OrderStatus
from models.tenant import Tenant
from models.user import User
from routes.auth import get_optional_user
from schemas.order import OrderOut
from services.lifecycle import order_lifecycle, allowed_targets
from services.orders import order_service

router = APIRouter(prefix="/orders", tags=["orders"])
admin_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@router.post("/checkout")
def checkout(
    payload: Dict[str, Any] = Body(...),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    # The raw body is validated by the service so field errors come back in the envelope
    return order_service.assemble_order(db, user, payload).to_response(201)


@router.get("/")
def list_my_orders(
    tenant_slug: Optional[str] = None,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return order_service.list_user_orders(db, user, tenant_slug).to_response()


@router.get("/{order_id}")
def get_my_order(order_id: int, user: Optional[User] = Depends(get_optional_user), db: Session = Depends(get_db)):
    return order_service.get_order(db, user, order_id).to_response()


@router.post("/{order_id}/cancel")
def cancel_order(order_id: int, user: Optional[User] = Depends(get_optional_user), db: Session = Depends(get_db)):
    return order_lifecycle.cancel(db, user, order_id).to_response()


@router.patch("/{order_id}/status")
def update_order_status(
    order_id: int,
    payload: Dict[str, Any] = Body(...),
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return order_lifecycle.transition(db, user, order_id, payload.get("status", "")).to_response()


@admin_router.get("/", response_model=List[OrderOut])
def list_store_orders(
    status: Optional[OrderStatus] = Query(default=None),
    tenant: Tenant = Depends(require_capability("orders")),
    db: Session = Depends(get_db),
):
    return order_service.list_tenant_orders(db, tenant, status.value if status else None)


@admin_router.get("/statuses")
def status_transitions(tenant: Tenant = Depends(require_capability("orders"))):
    """Statuses an order can move to from each status, for the staff panel."""
    return {s.value: sorted(t.value for t in allowed_targets(s)) for s in OrderStatus}
