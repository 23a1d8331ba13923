from fastapi import APIRouter, Depends

from ..auth.capabilities import Capabilities
from ..auth.rbac import has_permission
from ..auth.session import AccessContext
from ..dependencies import get_access_context, get_capabilities
from ..schemas.capabilities import CapabilitySummary, PermissionCheckResponse

router = APIRouter(prefix="/session", tags=["session"])


@router.get("/capabilities", response_model=CapabilitySummary)
async def read_capabilities(
    capabilities: Capabilities = Depends(get_capabilities),
) -> CapabilitySummary:
    return capabilities.summary()


@router.get("/permissions/check", response_model=PermissionCheckResponse)
async def check_permission(
    page: str | None = None,
    feature: str | None = None,
    action: str | None = None,
    context: AccessContext = Depends(get_access_context),
) -> PermissionCheckResponse:
    # Unknown keys raise ValueError and surface as 400
    allowed = has_permission(context.policy, context.roles, page, feature, action)
    return PermissionCheckResponse(allowed=allowed)
