"""
Order status lifecycle.

    pending -> confirmed -> preparing -> out_for_delivery -> delivered
    pending | confirmed -> cancelled

Staff with the ``orders`` capability may move an order to any later status
in the chain, or cancel it while it is still pending or confirmed.
Customers may only cancel their own orders, under the same condition.
``delivered`` and ``cancelled`` are final. Payment status is a separate
axis and is never touched here.
"""
import logging
from datetime import datetime
from typing import Dict, FrozenSet, Optional, Union

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import (
    InvalidTransition,
    NotAuthorized,
    OrderNotFound,
    OrderUpdateFailed,
    Unauthenticated,
    ValidationFailed,
)
from core.tenancy import has_capability
from models.order import Order, OrderStatus
from models.user import User
from schemas.envelope import ActionResult
from services.actions import run_action
from services.notifications import notify_status_changed

logger = logging.getLogger("grocer.lifecycle")

S = OrderStatus

TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    S.PENDING: frozenset({S.CONFIRMED, S.PREPARING, S.OUT_FOR_DELIVERY, S.DELIVERED, S.CANCELLED}),
    S.CONFIRMED: frozenset({S.PREPARING, S.OUT_FOR_DELIVERY, S.DELIVERED, S.CANCELLED}),
    S.PREPARING: frozenset({S.OUT_FOR_DELIVERY, S.DELIVERED}),
    S.OUT_FOR_DELIVERY: frozenset({S.DELIVERED}),
    S.DELIVERED: frozenset(),
    S.CANCELLED: frozenset(),
}


def allowed_targets(current: Union[OrderStatus, str]) -> FrozenSet[OrderStatus]:
    try:
        return TRANSITIONS[OrderStatus(current)]
    except ValueError:
        return frozenset()


def can_transition(current: Union[OrderStatus, str], target: Union[OrderStatus, str]) -> bool:
    try:
        return OrderStatus(target) in allowed_targets(current)
    except ValueError:
        return False


def _parse_status(value: Union[OrderStatus, str]) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in OrderStatus)
        raise ValidationFailed([{"path": "status", "message": f"Status must be one of: {allowed}"}])


class OrderLifecycle:

    def transition(
        self, db: Session, principal: Optional[User], order_id: int, target: Union[OrderStatus, str]
    ) -> ActionResult:
        return run_action(db, "order status update", self._transition, db, principal, order_id, target)

    def cancel(self, db: Session, principal: Optional[User], order_id: int) -> ActionResult:
        return self.transition(db, principal, order_id, OrderStatus.CANCELLED)

    def _transition(
        self, db: Session, principal: Optional[User], order_id: int, target: Union[OrderStatus, str]
    ) -> ActionResult:
        if principal is None:
            raise Unauthenticated()
        target = _parse_status(target)

        order = db.get(Order, order_id)
        if not order:
            raise OrderNotFound()

        if not has_capability(principal, order.tenant_id, "orders", db):
            if order.user_id != principal.id:
                raise NotAuthorized("Not authorized to update this order")
            if target is not OrderStatus.CANCELLED:
                raise NotAuthorized("Customers can only cancel their orders")

        current = order.status
        if not can_transition(current, target):
            raise InvalidTransition(current, target.value)

        order.status = target.value
        order.updated_at = datetime.utcnow()
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Status update of order %s failed: %s", order_id, exc)
            raise OrderUpdateFailed() from exc

        logger.info("Order %s: %s -> %s by user %s", order.order_number, current, target.value, principal.id)
        notify_status_changed(order)
        return ActionResult.ok(data={"id": order.id, "order_number": order.order_number, "status": order.status})


# Singleton
order_lifecycle = OrderLifecycle()
