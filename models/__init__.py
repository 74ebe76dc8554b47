# Import models so that SQLAlchemy metadata includes them on app startup
from .user import User  # noqa: F401
from .tenant import Tenant  # noqa: F401
from .store_admin import StoreAdmin  # noqa: F401
from .product import Product  # noqa: F401
from .cart_item import CartItem  # noqa: F401
from .order import Order, OrderStatus, PaymentStatus  # noqa: F401
from .order_item import OrderItem  # noqa: F401
