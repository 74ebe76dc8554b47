from typing import Optional
from fastapi import Header, HTTPException, status, Request, Depends
from sqlalchemy.orm import Session

from core.db import get_db
from models.store_admin import StoreAdmin, CAPABILITIES
from models.tenant import Tenant
from models.user import User
from routes.auth import get_current_user


def resolve_domain(request: Request, x_store_domain: Optional[str] = None) -> str:
    """Resolve store domain from X-Store-Domain header or Host header."""
    if x_store_domain:
        return x_store_domain.lower()
    host = request.headers.get("host") or request.headers.get("Host")
    if not host:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing store domain")
    return host.split(":")[0].lower()


def find_tenant(db: Session, slug: Optional[str] = None, domain: Optional[str] = None) -> Optional[Tenant]:
    """Look a tenant up by slug, then exact domain, then first domain label."""
    if slug:
        return db.query(Tenant).filter(Tenant.slug == slug.lower()).one_or_none()
    if not domain:
        return None

    # Try exact domain match first
    tenant = db.query(Tenant).filter(Tenant.domain == domain).one_or_none()

    # If not found, try subdomain match (e.g., mystore.platform.com)
    if not tenant and "." in domain:
        tenant = db.query(Tenant).filter(Tenant.slug == domain.split(".")[0]).one_or_none()
    return tenant


def get_current_tenant(
    request: Request,
    x_store_slug: Optional[str] = Header(default=None, alias="X-Store-Slug"),
    x_store_domain: Optional[str] = Header(default=None, alias="X-Store-Domain"),
    db: Session = Depends(get_db),
) -> Tenant:
    """FastAPI dependency that returns the Tenant for the current request."""
    if x_store_slug:
        tenant = find_tenant(db, slug=x_store_slug)
    else:
        tenant = find_tenant(db, domain=resolve_domain(request, x_store_domain))

    if not tenant:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Store not found")

    # Check if store is active
    if not tenant.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Store is inactive")

    return tenant


def get_store_admin(user_id: int, tenant_id: int, db: Session) -> Optional[StoreAdmin]:
    """Get the active staff assignment of a user in a tenant."""
    return db.query(StoreAdmin).filter(
        StoreAdmin.user_id == user_id,
        StoreAdmin.tenant_id == tenant_id,
        StoreAdmin.is_active.is_(True),
    ).one_or_none()


def has_capability(user: Optional[User], tenant_id: int, capability: str, db: Session) -> bool:
    """Check if user is staff of the tenant with the given capability."""
    if capability not in CAPABILITIES:
        raise ValueError(f"Unknown capability: {capability}")
    if user is None:
        return False
    if user.is_superadmin:
        return True

    assignment = get_store_admin(user.id, tenant_id, db)
    return assignment is not None and assignment.grants(capability)


def require_capability(capability: str):
    """Dependency to require a staff capability in the current tenant."""
    def _check_capability(
        tenant: Tenant = Depends(get_current_tenant),
        user: User = Depends(get_current_user),
        db: Session = Depends(get_db),
    ) -> Tenant:
        if not has_capability(user, tenant.id, capability, db):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires {capability} permission",
            )
        return tenant
    return _check_capability
