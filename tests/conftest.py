from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from main import app
from core.db import Base, build_engine, get_db
from core import config as core_config
from models.cart_item import CartItem
from models.product import Product
from models.store_admin import StoreAdmin
from models.tenant import Tenant
from models.user import User
from security.password import hash_password
from security import jwt as jwt_utils
from services import email as email_service


@pytest.fixture(scope="session", autouse=True)
def test_settings():
    core_config.settings.JWT_SECRET = "test-secret"
    core_config.settings.REFRESH_SECRET = "test-refresh"
    core_config.settings.TESTING = True
    core_config.settings.ORDER_EMAILS_ENABLED = True
    yield


@pytest.fixture()
def db():
    """Fresh in-memory database shared by the test and the app."""
    engine = build_engine("sqlite:///:memory:")
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()

    def _get_db():
        yield session

    app.dependency_overrides[get_db] = _get_db
    try:
        yield session
    finally:
        session.close()
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(autouse=True)
def sent_emails(monkeypatch):
    sent = []

    def _fake_send(to_email: str, subject: str, body: str) -> None:
        sent.append({"to": to_email, "subject": subject, "body": body})

    monkeypatch.setattr(email_service, "send_email", _fake_send)
    return sent


@pytest.fixture()
def client(db):
    with TestClient(app) as c:
        yield c


def _make_user(db, email: str, first_name: str = "Test", is_superadmin: bool = False) -> User:
    user = User(
        first_name=first_name,
        last_name="User",
        email=email,
        password_hash=hash_password("testpass123"),
        is_superadmin=is_superadmin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def tenant(db):
    """Store with delivery_fee=200 and minimum_order=100."""
    store = Tenant(
        name="Epicerie Test",
        name_ar="بقالة",
        name_fr="Epicerie Test",
        slug="epicerie",
        domain="epicerie.example.com",
        delivery_fee=Decimal("200"),
        minimum_order=Decimal("100"),
        currency="DZD",
        is_active=True,
    )
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


@pytest.fixture
def other_tenant(db):
    store = Tenant(name="Autre", slug="autre", delivery_fee=0, minimum_order=0, is_active=True)
    db.add(store)
    db.commit()
    db.refresh(store)
    return store


@pytest.fixture
def customer(db):
    return _make_user(db, "customer@example.com", first_name="Amina")


@pytest.fixture
def other_customer(db):
    return _make_user(db, "other@example.com", first_name="Karim")


@pytest.fixture
def staff(db, tenant):
    """User with the orders and products capabilities in ``tenant``."""
    user = _make_user(db, "staff@example.com", first_name="Staff")
    db.add(StoreAdmin(
        user_id=user.id,
        tenant_id=tenant.id,
        role="admin",
        permissions={"products": True, "orders": True, "customers": False, "settings": False},
        is_active=True,
    ))
    db.commit()
    return user


@pytest.fixture
def superadmin(db):
    return _make_user(db, "root@example.com", first_name="Root", is_superadmin=True)


@pytest.fixture
def make_product(db, tenant):
    def _make(name="Tomates", price="150", stock=10, is_active=True, store=None):
        product = Product(
            tenant_id=(store or tenant).id,
            name=name,
            name_fr=name,
            price=Decimal(str(price)),
            stock_quantity=stock,
            is_active=is_active,
        )
        db.add(product)
        db.commit()
        db.refresh(product)
        return product
    return _make


@pytest.fixture
def put_in_cart(db):
    """Insert a cart line directly, bypassing the cart service checks."""
    def _put(user, product, quantity):
        line = CartItem(user_id=user.id, tenant_id=product.tenant_id, product_id=product.id, quantity=quantity)
        db.add(line)
        db.commit()
        db.refresh(line)
        return line
    return _put


@pytest.fixture
def checkout_payload(tenant):
    return {
        "tenant_id": tenant.id,
        "tenant_slug": tenant.slug,
        "customer_name": "Amina Benali",
        "customer_phone": "0555 12 34 56",
        "customer_email": "amina@example.com",
        "delivery_address": "12 Rue Didouche Mourad",
        "wilaya": "Alger",
        "commune": "Alger Centre",
        "notes": "Sonner deux fois",
        "payment_method": "cash",
    }


def headers_for(user: User, tenant: Tenant | None = None) -> dict:
    headers = {"Authorization": f"Bearer {jwt_utils.create_access_token(str(user.id))}"}
    if tenant is not None:
        headers["X-Store-Slug"] = tenant.slug
    return headers


@pytest.fixture
def make_headers():
    return headers_for


@pytest.fixture
def auth_headers(customer, tenant):
    return headers_for(customer, tenant)


@pytest.fixture
def staff_headers(staff, tenant):
    return headers_for(staff, tenant)
