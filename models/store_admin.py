from datetime import datetime

from sqlalchemy import String, Boolean, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db import Base

# Staff capability keys stored in ``StoreAdmin.permissions``
CAPABILITIES = ("products", "orders", "customers", "settings")


class StoreAdmin(Base):
    """Staff assignment of a user to a tenant with a capability set."""

    __tablename__ = "store_admins"
    __table_args__ = (UniqueConstraint("user_id", "tenant_id", name="uq_store_admin_user_tenant"),)

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    tenant_id: Mapped[int] = mapped_column(ForeignKey("tenants.id", ondelete="CASCADE"), index=True)
    role: Mapped[str] = mapped_column(String(50), default="admin")
    permissions: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    user = relationship("User", back_populates="store_roles")
    tenant = relationship("Tenant")

    def grants(self, capability: str) -> bool:
        return bool(self.is_active and (self.permissions or {}).get(capability) is True)
