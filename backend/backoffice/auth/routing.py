"""Route guard and landing-page resolution for the /admin area."""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Final

from .capabilities import Capabilities
from .rbac_contract import ALL_PAGES, Page, validate_page

logger = logging.getLogger("backoffice.routing")

ADMIN_PREFIX: Final[str] = "/admin"

PAGE_PATHS: Final[Mapping[Page, str]] = MappingProxyType({
    **{page: page.value for page in ALL_PAGES},
    Page.INVOICE_REQUESTS: "invoice-requests",
    Page.REVIEW_ORDERS: "review-orders",
    Page.SALES_REPORT: "sales-report",
})

_PAGES_BY_SLUG: Final[Mapping[str, Page]] = MappingProxyType(
    {slug: page for page, slug in PAGE_PATHS.items()}
)

# First accessible entry becomes the landing page
LANDING_PRIORITY: Final[tuple[Page, ...]] = (
    Page.DASHBOARD,
    Page.CUSTOMERS,
    Page.QUOTATIONS,
    Page.ORDERS,
    Page.INVOICES,
    Page.RECEIPTS,
    Page.EXPENSES,
    Page.INVENTORY,
    Page.EMPLOYEES,
    Page.SUPPLIERS,
    Page.INVOICE_REQUESTS,
    Page.REVIEW_ORDERS,
    Page.ANALYTICS,
)


def page_path(page: Page | str) -> str:
    return f"{ADMIN_PREFIX}/{PAGE_PATHS[validate_page(page)]}"


def page_for_slug(slug: str) -> Page | None:
    return _PAGES_BY_SLUG.get(slug)


@dataclass(frozen=True)
class RouteDecision:
    page: Page
    allowed: bool
    redirect_to: str | None = None


def guard_page(capabilities: Capabilities, page: Page | str, fallback: Page | str) -> RouteDecision:
    """Allow the page, or name the fallback path to redirect to instead."""
    page = validate_page(page)
    if capabilities.can_access_page(page):
        return RouteDecision(page=page, allowed=True)
    logger.info(
        "Page '%s' hidden for roles %s, redirecting to '%s'",
        page.value,
        [role.value for role in capabilities.user_roles],
        validate_page(fallback).value,
    )
    return RouteDecision(page=page, allowed=False, redirect_to=page_path(fallback))


def resolve_landing_page(capabilities: Capabilities, fallback: Page | str) -> Page:
    """
    Return the first page of LANDING_PRIORITY the principal may open.

    A principal without roles has no access and lands on the fallback. Held
    roles that open no priority page point at a policy gap and log a warning.
    """
    for page in LANDING_PRIORITY:
        if capabilities.can_access_page(page):
            return page
    fallback = validate_page(fallback)
    if not capabilities.user_roles:
        logger.info("No roles held, landing on '%s'", fallback.value)
        return fallback
    logger.warning(
        "No accessible landing page for roles %s, falling back to '%s'",
        [role.value for role in capabilities.user_roles],
        fallback.value,
    )
    return fallback
