import pytest
from datetime import datetime
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from models.cart_item import CartItem
from models.order import Order, OrderStatus, PaymentStatus
from models.order_item import OrderItem
from models.store_admin import StoreAdmin
from models.user import User


class TestUser:
    """Test cases for User model"""

    def test_user_defaults(self, db):
        user = User(first_name="Jane", last_name="Smith", email="jane@example.com", password_hash="hash")
        db.add(user)
        db.commit()
        db.refresh(user)

        assert user.is_superadmin is False
        assert user.phone is None
        assert isinstance(user.created_at, datetime)
        assert user.full_name == "Jane Smith"

    def test_user_email_uniqueness(self, db, customer):
        db.add(User(first_name="Jane", last_name="Doe", email=customer.email, password_hash="hash2"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestStoreAdmin:

    @pytest.mark.parametrize("permissions,capability,granted", [
        ({"orders": True}, "orders", True),
        ({"orders": False}, "orders", False),
        ({"orders": "yes"}, "orders", False),
        ({}, "products", False),
        (None, "orders", False),
    ])
    def test_grants(self, permissions, capability, granted):
        assignment = StoreAdmin(user_id=1, tenant_id=1, permissions=permissions, is_active=True)
        assert assignment.grants(capability) is granted

    def test_inactive_assignment_grants_nothing(self):
        assignment = StoreAdmin(user_id=1, tenant_id=1, permissions={"orders": True}, is_active=False)
        assert assignment.grants("orders") is False

    def test_one_assignment_per_user_and_tenant(self, db, staff, tenant):
        db.add(StoreAdmin(user_id=staff.id, tenant_id=tenant.id, permissions={}))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestCartItem:

    def test_one_line_per_product(self, db, customer, make_product, put_in_cart):
        product = make_product()
        put_in_cart(customer, product, 1)
        db.add(CartItem(user_id=customer.id, tenant_id=product.tenant_id, product_id=product.id, quantity=2))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_quantity_must_be_positive(self, db, customer, make_product):
        product = make_product()
        db.add(CartItem(user_id=customer.id, tenant_id=product.tenant_id, product_id=product.id, quantity=0))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()


class TestOrder:

    def _order(self, tenant, customer, number="ORD-1"):
        return Order(
            tenant_id=tenant.id,
            user_id=customer.id,
            order_number=number,
            customer_name="Amina",
            customer_phone="0555123456",
            delivery_address="12 Rue Didouche Mourad, Alger Centre, Alger",
            subtotal=Decimal("300"),
            delivery_fee=Decimal("200"),
            total=Decimal("500"),
        )

    def test_defaults(self, db, tenant, customer):
        order = self._order(tenant, customer)
        db.add(order)
        db.commit()
        db.refresh(order)

        assert order.status == OrderStatus.PENDING.value
        assert order.payment_status == PaymentStatus.PENDING.value
        assert order.payment_method == "cash"
        assert order.items == []

    def test_order_number_is_unique(self, db, tenant, customer):
        db.add(self._order(tenant, customer, "ORD-DUP"))
        db.commit()
        db.add(self._order(tenant, customer, "ORD-DUP"))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_item_keeps_snapshot_after_product_deleted(self, db, tenant, customer, make_product):
        product = make_product(name="Tomates", price="150")
        order = self._order(tenant, customer)
        order.items.append(OrderItem(
            product_id=product.id,
            product_name=product.name,
            quantity=2,
            unit_price=Decimal("150"),
            total_price=Decimal("300"),
        ))
        db.add(order)
        db.commit()

        db.delete(product)
        db.commit()
        db.expire_all()

        item = db.query(OrderItem).one()
        assert item.product_id is None
        assert item.product_name == "Tomates"
        assert Decimal(item.unit_price) == Decimal("150")
