"""
Cart service: per-user, per-tenant cart lines.

A user has at most one line per product; adding a product that is already
in the cart increases that line's quantity instead of inserting another.
"""
import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from core.errors import (
    CartLineNotFound,
    CartWriteFailed,
    InsufficientStock,
    ProductNotFound,
    ProductUnavailable,
    Unauthenticated,
    ValidationFailed,
)
from core.money import from_minor, to_minor
from models.cart_item import CartItem
from models.product import Product
from models.user import User
from schemas.cart import CartLineOut, CartOut
from schemas.envelope import ActionResult
from services.actions import run_action

logger = logging.getLogger("grocer.cart")


def _require_quantity(quantity) -> int:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise ValidationFailed([{"path": "quantity", "message": "Quantity must be a positive integer"}])
    return quantity


def line_out(line: CartItem) -> CartLineOut:
    product = line.product
    unit = to_minor(product.price)
    return CartLineOut(
        id=line.id,
        product_id=product.id,
        product_name=product.name,
        quantity=line.quantity,
        unit_price=float(from_minor(unit)),
        line_total=float(from_minor(unit * line.quantity)),
        stock_quantity=product.stock_quantity,
        is_active=product.is_active,
    )


class CartService:

    # ==========================================
    # Public actions
    # ==========================================

    def list_lines(self, db: Session, principal: Optional[User], tenant_id: int) -> ActionResult:
        return run_action(db, "list cart", self._list_lines, db, principal, tenant_id)

    def add_line(self, db: Session, principal: Optional[User], product_id: int, quantity: int) -> ActionResult:
        return run_action(db, "add cart item", self._add_line, db, principal, product_id, quantity)

    def update_line(self, db: Session, principal: Optional[User], line_id: int, quantity: int) -> ActionResult:
        return run_action(db, "update cart item", self._update_line, db, principal, line_id, quantity)

    def remove_line(self, db: Session, principal: Optional[User], line_id: int) -> ActionResult:
        return run_action(db, "remove cart item", self._remove_line, db, principal, line_id)

    def clear(self, db: Session, principal: Optional[User], tenant_id: Optional[int] = None) -> ActionResult:
        return run_action(db, "clear cart", self._clear, db, principal, tenant_id)

    # ==========================================
    # Implementation
    # ==========================================

    def lines_for(self, db: Session, user_id: int, tenant_id: int) -> List[CartItem]:
        """Cart lines of a user in one tenant, oldest first, with products loaded."""
        return (
            db.query(CartItem)
            .options(joinedload(CartItem.product))
            .filter(CartItem.user_id == user_id, CartItem.tenant_id == tenant_id)
            .order_by(CartItem.id)
            .all()
        )

    def _list_lines(self, db: Session, principal: Optional[User], tenant_id: int) -> ActionResult:
        if principal is None:
            raise Unauthenticated("Not authenticated")
        items = [line_out(line) for line in self.lines_for(db, principal.id, tenant_id) if line.product]
        subtotal = sum(to_minor(item.line_total) for item in items)
        cart = CartOut(
            tenant_id=tenant_id,
            items=items,
            item_count=sum(item.quantity for item in items),
            subtotal=float(from_minor(subtotal)),
        )
        return ActionResult.ok(data=cart)

    def _add_line(self, db: Session, principal: Optional[User], product_id: int, quantity: int) -> ActionResult:
        if principal is None:
            raise Unauthenticated("Not authenticated")
        quantity = _require_quantity(quantity)

        product = db.get(Product, product_id)
        if not product:
            raise ProductNotFound()
        if not product.is_active:
            raise ProductUnavailable(product.name)

        existing = db.query(CartItem).filter(
            CartItem.user_id == principal.id,
            CartItem.product_id == product.id,
        ).one_or_none()

        # The merged quantity is what has to fit in stock
        new_quantity = quantity + (existing.quantity if existing else 0)
        if new_quantity > product.stock_quantity:
            raise InsufficientStock(product.name, product.stock_quantity)

        if existing:
            existing.quantity = new_quantity
            line = existing
        else:
            line = CartItem(
                user_id=principal.id,
                tenant_id=product.tenant_id,
                product_id=product.id,
                quantity=new_quantity,
            )
            db.add(line)

        self._commit(db)
        logger.debug("Cart of user %s: product %s -> %s", principal.id, product.id, new_quantity)
        return ActionResult.ok(data=line_out(line))

    def _update_line(self, db: Session, principal: Optional[User], line_id: int, quantity: int) -> ActionResult:
        if principal is None:
            raise Unauthenticated("Not authenticated")
        line = self._owned_line(db, principal, line_id)

        # Zero or negative means "remove"
        if isinstance(quantity, int) and not isinstance(quantity, bool) and quantity <= 0:
            db.delete(line)
            self._commit(db)
            return ActionResult.ok()

        quantity = _require_quantity(quantity)
        product = line.product
        if not product.is_active:
            raise ProductUnavailable(product.name)
        if quantity > product.stock_quantity:
            raise InsufficientStock(product.name, product.stock_quantity)

        line.quantity = quantity
        self._commit(db)
        return ActionResult.ok(data=line_out(line))

    def _remove_line(self, db: Session, principal: Optional[User], line_id: int) -> ActionResult:
        if principal is None:
            raise Unauthenticated("Not authenticated")
        db.delete(self._owned_line(db, principal, line_id))
        self._commit(db)
        return ActionResult.ok()

    def _clear(self, db: Session, principal: Optional[User], tenant_id: Optional[int]) -> ActionResult:
        if principal is None:
            raise Unauthenticated("Not authenticated")
        query = db.query(CartItem).filter(CartItem.user_id == principal.id)
        if tenant_id is not None:
            query = query.filter(CartItem.tenant_id == tenant_id)
        removed = query.delete(synchronize_session=False)
        self._commit(db)
        return ActionResult.ok(data={"removed": removed})

    # ==========================================
    # Private helpers
    # ==========================================

    def _owned_line(self, db: Session, principal: User, line_id: int) -> CartItem:
        line = db.query(CartItem).filter(
            CartItem.id == line_id,
            CartItem.user_id == principal.id,
        ).one_or_none()
        if not line:
            raise CartLineNotFound()
        return line

    def _commit(self, db: Session) -> None:
        try:
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("Cart write failed: %s", exc)
            raise CartWriteFailed() from exc


# Singleton
cart_service = CartService()
