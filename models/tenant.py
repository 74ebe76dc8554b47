from sqlalchemy import String, Boolean, Numeric
from sqlalchemy.orm import Mapped, mapped_column

from core.db import Base, TimestampMixin


class Tenant(TimestampMixin, Base):
    __tablename__ = "tenants"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(150), index=True)
    name_ar: Mapped[str | None] = mapped_column(String(150), nullable=True)
    name_fr: Mapped[str | None] = mapped_column(String(150), nullable=True)
    slug: Mapped[str] = mapped_column(String(100), unique=True, index=True)
    domain: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True, index=True)

    # Checkout policy
    delivery_fee: Mapped[float | None] = mapped_column(Numeric(12, 2), nullable=True, default=0)
    minimum_order: Mapped[float] = mapped_column(Numeric(12, 2), default=0)
    currency: Mapped[str] = mapped_column(String(3), default="DZD")

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
