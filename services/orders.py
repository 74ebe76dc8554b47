"""
Order Module - Service Layer
===============================
Checkout (cart -> order) and order queries.

Checkout runs as a sequence of separately committed steps, there is no
transaction around the whole flow:

1. validate the request, load the cart and check every line against the
   live product (active, enough stock), snapshotting name and price
2. check the tenant's minimum order, add the delivery fee
3. insert the order, then its items; if the items fail the order row is
   deleted again so no order exists without items
4. decrement stock and clear the cart; failures here are logged and the
   order stands
"""
import logging
import uuid
from datetime import datetime
from typing import Any, List, NamedTuple, Optional, Tuple, Union

from pydantic import ValidationError
from sqlalchemy import delete, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.errors import (
    BelowMinimumOrder,
    EmptyCart,
    InsufficientStock,
    OrderCreateFailed,
    OrderItemsFailed,
    OrderNotFound,
    PaymentMethodUnavailable,
    ProductUnavailable,
    TenantNotFound,
    Unauthenticated,
    ValidationFailed,
)
from core.money import format_amount, from_minor, to_minor
from models.cart_item import CartItem
from models.order import Order, OrderStatus, PaymentStatus
from models.order_item import OrderItem
from models.product import Product
from models.tenant import Tenant
from models.user import User
from schemas.envelope import ActionResult, validation_errors
from schemas.order import CheckoutRequest, OrderListItem, OrderOut, OrderSummary
from services.actions import run_action
from services.cart import cart_service
from services.notifications import notify_order_created

logger = logging.getLogger("grocer.orders")


class ItemSnapshot(NamedTuple):
    """Product name and price as validated at checkout."""
    product_id: int
    product_name: str
    quantity: int
    unit_price: int
    line_total: int


def generate_order_number(now: Optional[datetime] = None) -> str:
    """``ORD-<UTC timestamp>-<10 hex chars of a uuid4>``.

    The timestamp keeps numbers sortable; 40 random bits per second make a
    collision negligible. The unique index on ``orders.order_number`` is the
    backstop.
    """
    now = now or datetime.utcnow()
    return f"{settings.ORDER_NUMBER_PREFIX}-{now:%Y%m%d%H%M%S}-{uuid.uuid4().hex[:10].upper()}"


def price_lines(lines: List[CartItem]) -> Tuple[List[ItemSnapshot], int]:
    """Validate cart lines against their products, in cart order.

    Returns the item snapshots and the subtotal in minor units. Raises on
    the first unavailable or understocked product.
    """
    snapshots: List[ItemSnapshot] = []
    subtotal = 0
    for line in lines:
        product = line.product
        if product is None or not product.is_active:
            raise ProductUnavailable(product.name if product else None)
        if product.stock_quantity < line.quantity:
            raise InsufficientStock(product.name, product.stock_quantity)

        unit_price = to_minor(product.price)
        line_total = unit_price * line.quantity
        subtotal += line_total
        snapshots.append(ItemSnapshot(product.id, product.name, line.quantity, unit_price, line_total))
    return snapshots, subtotal


class OrderService:

    # ==========================================
    # Checkout
    # ==========================================

    def assemble_order(
        self, db: Session, principal: Optional[User], details: Union[CheckoutRequest, dict, Any]
    ) -> ActionResult:
        """Turn the principal's cart in one tenant into a pending order."""
        return run_action(db, "checkout", self._assemble, db, principal, details)

    def _assemble(self, db: Session, principal: Optional[User], details) -> ActionResult:
        request = self._validate(details)
        if principal is None:
            raise Unauthenticated()
        if request.payment_method != "cash":
            raise PaymentMethodUnavailable()

        tenant = db.get(Tenant, request.tenant_id)
        if not tenant or not tenant.is_active:
            raise TenantNotFound()
        if tenant.slug != request.tenant_slug.lower():
            raise ValidationFailed([{"path": "tenant_slug", "message": "Store slug does not match tenant_id"}])

        lines =cart_service.lines_for(db, principal.id, tenant.id)
        if not lines:
            raise EmptyCart()
        snapshots, subtotal = price_lines(lines)

        minimum_order = to_minor(tenant.minimum_order)
        if subtotal < minimum_order:
            raise BelowMinimumOrder(format_amount(minimum_order), tenant.currency)

        delivery_fee = to_minor(tenant.delivery_fee)
        total = subtotal + delivery_fee

        order = self._insert_order(db, principal, tenant, request, subtotal, delivery_fee, total)
        self._insert_items(db, order, snapshots)

        # The order is durable from here on; bookkeeping failures are non-fatal
        self._decrement_stock(db, order, snapshots)
        self._clear_cart(db, principal.id, tenant.id)
        notify_order_created(order)

        logger.info(
            "Order %s created for user %s in tenant %s (total %s)",
            order.order_number, principal.id, tenant.id, format_amount(total),
        )
        summary = OrderSummary(id=order.id, order_number=order.order_number, total=float(from_minor(total)))
        return ActionResult.ok(order=summary)

    def _validate(self, details) -> CheckoutRequest:
        if isinstance(details, CheckoutRequest):
            return details
        try:
            return CheckoutRequest.model_validate(details)
        except ValidationError as exc:
            raise ValidationFailed(validation_errors(exc)) from exc

    def _insert_order(
        self,
        db: Session,
        principal: User,
        tenant: Tenant,
        request: CheckoutRequest,
        subtotal: int,
        delivery_fee: int,
        total: int,
    ) -> Order:
        order = Order(
            tenant_id=tenant.id,
            user_id=principal.id,
            order_number=generate_order_number(),
            status=OrderStatus.PENDING.value,
            # Cash on delivery is the only payment path
            payment_status=PaymentStatus.PENDING.value,
            payment_method=request.payment_method,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            customer_email=request.customer_email,
            delivery_address=request.flattened_address,
            notes=request.notes,
            delivery_fee=from_minor(delivery_fee),
            subtotal=from_minor(subtotal),
            total=from_minor(total),
        )
        db.add(order)
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Order insert failed for user %s: %s", principal.id, exc)
            raise OrderCreateFailed() from exc
        return order

    def _insert_items(self, db: Session, order: Order, snapshots: List[ItemSnapshot]) -> None:
        """Insert the order items; on any failure delete the order again."""
        order_id = order.id
        try:
            self._write_items(db, order_id, snapshots)
        except Exception as exc:
            db.rollback()
            logger.error("Order items insert failed for order %s, removing order: %s", order_id, exc)
            self._delete_order(db, order_id)
            raise OrderItemsFailed() from exc

    def _write_items(self, db: Session, order_id: int, snapshots: List[ItemSnapshot]) -> None:
        db.add_all([
            OrderItem(
                order_id=order_id,
                product_id=snap.product_id,
                product_name=snap.product_name,
                quantity=snap.quantity,
                unit_price=from_minor(snap.unit_price),
                total_price=from_minor(snap.line_total),
            )
            for snap in snapshots
        ])
        db.commit()

    def _delete_order(self, db: Session, order_id: int) -> None:
        try:
            db.execute(delete(OrderItem).where(OrderItem.order_id == order_id))
            db.execute(delete(Order).where(Order.id == order_id))
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.critical("Could not remove order %s after its items failed", order_id, exc_info=True)

    def _decrement_stock(self, db: Session, order: Order, snapshots: List[ItemSnapshot]) -> None:
        """Conditionally decrement stock; a product that no longer has enough is left as is."""
        for snap in snapshots:
            try:
                result = db.execute(
                    update(Product)
                    .where(Product.id == snap.product_id, Product.stock_quantity >= snap.quantity)
                    .values(stock_quantity=Product.stock_quantity - snap.quantity)
                    .execution_options(synchronize_session="fetch")
                )
                db.commit()
            except SQLAlchemyError:
                db.rollback()
                logger.warning(
                    "Stock decrement failed for product %s (order %s)",
                    snap.product_id, order.order_number, exc_info=True,
                )
                continue
            if result.rowcount == 0:
                logger.warning(
                    "Stock of product %s below %s, not decremented for order %s",
                    snap.product_id, snap.quantity, order.order_number,
                )

    def _clear_cart(self, db: Session, user_id: int, tenant_id: int) -> None:
        try:
            db.query(CartItem).filter(
                CartItem.user_id == user_id,
                CartItem.tenant_id == tenant_id,
            ).delete(synchronize_session=False)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            logger.warning("Cart of user %s in tenant %s not cleared", user_id, tenant_id, exc_info=True)

    # ==========================================
    # Queries
    # ==========================================

    def get_order(self, db: Session, principal: Optional[User], order_id: int) -> ActionResult:
        return run_action(db, "get order", self._get_order, db, principal, order_id)

    def list_user_orders(self, db: Session, principal: Optional[User], tenant_slug: Optional[str] = None) -> ActionResult:
        return run_action(db, "list orders", self._list_user_orders, db, principal, tenant_slug)

    def _get_order(self, db: Session, principal: Optional[User], order_id: int) -> ActionResult:
        if principal is None:
            raise Unauthenticated()
        order = (
            db.query(Order)
            .options(selectinload(Order.items))
            .filter(Order.id == order_id, Order.user_id == principal.id)
            .one_or_none()
        )
        if not order:
            raise OrderNotFound()
        return ActionResult.ok(order=OrderOut.model_validate(order))

    def _list_user_orders(self, db: Session, principal: Optional[User], tenant_slug: Optional[str]) -> ActionResult:
        if principal is None:
            raise Unauthenticated()
        query = db.query(Order).filter(Order.user_id == principal.id)
        if tenant_slug:
            query = query.join(Tenant, Tenant.id == Order.tenant_id).filter(Tenant.slug == tenant_slug.lower())
        orders = query.order_by(Order.created_at.desc(), Order.id.desc()).all()
        return ActionResult.ok(orders=[OrderListItem.model_validate(o) for o in orders])

    def list_tenant_orders(self, db: Session, tenant: Tenant, status: Optional[str] = None) -> List[Order]:
        """Orders of a tenant for the staff panel, newest first."""
        query = db.query(Order).options(selectinload(Order.items)).filter(Order.tenant_id == tenant.id)
        if status:
            query = query.filter(Order.status == status)
        return query.order_by(Order.created_at.desc(), Order.id.desc()).all()


# Singleton
order_service = OrderService()
