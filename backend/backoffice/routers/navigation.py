from fastapi import APIRouter, Depends

from ..auth.capabilities import Capabilities
from ..auth.routing import page_path, resolve_landing_page
from ..config import settings
from ..dependencies import get_capabilities
from ..schemas.navigation import NavigationItem, NavigationResponse

router = APIRouter(prefix="/navigation", tags=["navigation"])


@router.get("", response_model=NavigationResponse)
async def read_navigation(
    capabilities: Capabilities = Depends(get_capabilities),
) -> NavigationResponse:
    items = [
        NavigationItem(page=page.value, path=page_path(page))
        for page in capabilities.accessible_pages
    ]
    landing = resolve_landing_page(capabilities, settings.landing_fallback_page)
    return NavigationResponse(items=items, landing=page_path(landing))
