from fastapi import APIRouter, Depends, status
from fastapi.responses import RedirectResponse

from ..auth.capabilities import Capabilities
from ..auth.routing import guard_page, page_for_slug, page_path, resolve_landing_page
from ..config import settings
from ..dependencies import get_capabilities
from ..errors import NotFoundError, PageRedirect, PermissionError
from ..schemas.navigation import PageDescriptor

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("", include_in_schema=False)
async def admin_index(
    capabilities: Capabilities = Depends(get_capabilities),
) -> RedirectResponse:
    landing = resolve_landing_page(capabilities, settings.landing_fallback_page)
    return RedirectResponse(
        url=page_path(landing), status_code=status.HTTP_307_TEMPORARY_REDIRECT
    )


@router.get("/{slug}", response_model=PageDescriptor)
async def read_page(
    slug: str,
    capabilities: Capabilities = Depends(get_capabilities),
) -> PageDescriptor:
    page = page_for_slug(slug)
    if page is None:
        raise NotFoundError(f"Unknown page '{slug}'")

    decision = guard_page(capabilities, page, settings.rbac_fallback_page)
    if not decision.allowed:
        # Redirecting to the page that was just denied would loop
        if decision.redirect_to == page_path(page):
            raise PermissionError(f"Page '{page.value}' is not accessible")
        raise PageRedirect(decision.redirect_to)

    return PageDescriptor(
        page=page.value,
        path=page_path(page),
        capabilities=capabilities.summary(),
    )
