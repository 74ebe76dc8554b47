from fastapi import APIRouter, Depends

from core.tenancy import get_current_tenant
from models.tenant import Tenant
from schemas.tenant import TenantOut

router = APIRouter(prefix="/stores", tags=["stores"])


@router.get("/current", response_model=TenantOut)
def get_store(tenant: Tenant = Depends(get_current_tenant)):
    return tenant
