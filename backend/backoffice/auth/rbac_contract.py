"""
RBAC Contract - closed vocabulary of roles, pages, features and actions.

This module defines the permission schema every policy entry is checked
against:
- Roles are a closed set (ADMIN, SALES, FINANCE)
- Pages are visibility flags for back-office screens
- Features carry a fixed, per-feature list of actions

Adding a page, feature or action means extending this module AND giving the
new key an explicit value in every role of the policy table. The table is
validated against this schema when it is built, so a forgotten key fails at
import time instead of silently reading as "denied".
"""
from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from types import MappingProxyType
from typing import Final


# ============================================================================
# ROLES
# ============================================================================

class Role(str, Enum):
    """Authority class held by a back-office principal."""
    ADMIN = "ADMIN"
    SALES = "SALES"
    FINANCE = "FINANCE"


ALL_ROLES: Final[frozenset[str]] = frozenset(role.value for role in Role)


# ============================================================================
# PAGES - declaration order is the canonical page order
# ============================================================================

class Page(str, Enum):
    DASHBOARD = "dashboard"
    INVENTORY = "inventory"
    CUSTOMERS = "customers"
    QUOTATIONS = "quotations"
    ORDERS = "orders"
    INVOICES = "invoices"
    RECEIPTS = "receipts"
    EXPENSES = "expenses"
    EMPLOYEES = "employees"
    ANALYTICS = "analytics"
    SUPPLIERS = "suppliers"
    INVOICE_REQUESTS = "invoiceRequests"
    REVIEW_ORDERS = "reviewOrders"
    SALES_REPORT = "salesReport"


ALL_PAGES: Final[tuple[Page, ...]] = tuple(Page)


# ============================================================================
# FEATURES AND ACTIONS
# ============================================================================

class Feature(str, Enum):
    INVENTORY = "inventory"
    CUSTOMERS = "customers"
    INVOICES = "invoices"
    QUOTATIONS = "quotations"
    ORDERS = "orders"
    RECEIPTS = "receipts"
    EXPENSES = "expenses"
    EMPLOYEES = "employees"
    ANALYTICS = "analytics"
    INVOICE_REQUESTS = "invoiceRequests"
    REVIEW_ORDERS = "reviewOrders"


class Action(str, Enum):
    VIEW = "view"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    VIEW_COST_PRICE = "viewCostPrice"
    EXPORT_EXCEL = "exportExcel"
    APPROVE = "approve"
    EDIT_APPROVED = "editApproved"
    DELETE_APPROVED = "deleteApproved"
    EXPORT = "export"
    REJECT = "reject"


CRUD_ACTIONS: Final[tuple[Action, ...]] = (
    Action.VIEW,
    Action.ADD,
    Action.EDIT,
    Action.DELETE,
)

REVIEW_ACTIONS: Final[tuple[Action, ...]] = (
    Action.VIEW,
    Action.APPROVE,
    Action.REJECT,
)

# The only valid (feature, action) pairs. Anything else is a call-site bug.
FEATURE_ACTIONS: Final[Mapping[Feature, tuple[Action, ...]]] = MappingProxyType({
    Feature.INVENTORY: (*CRUD_ACTIONS, Action.VIEW_COST_PRICE),
    Feature.CUSTOMERS: CRUD_ACTIONS,
    Feature.INVOICES: (*CRUD_ACTIONS, Action.EXPORT_EXCEL),
    Feature.QUOTATIONS: CRUD_ACTIONS,
    Feature.ORDERS: CRUD_ACTIONS,
    Feature.RECEIPTS: CRUD_ACTIONS,
    Feature.EXPENSES: (
        *CRUD_ACTIONS,
        Action.APPROVE,
        Action.EDIT_APPROVED,
        Action.DELETE_APPROVED,
    ),
    Feature.EMPLOYEES: CRUD_ACTIONS,
    Feature.ANALYTICS: (Action.VIEW, Action.EXPORT),
    Feature.INVOICE_REQUESTS: REVIEW_ACTIONS,
    Feature.REVIEW_ORDERS: REVIEW_ACTIONS,
})


# ============================================================================
# VALIDATION - FAIL-FAST
# ============================================================================

def parse_role(name: object) -> Role | None:
    """
    Map a free-form role name onto the closed Role set.

    Names are compared case-insensitively after stripping whitespace.
    Anything that does not name a known role returns None; this never raises.
    """
    if isinstance(name, Role):
        return name
    if not isinstance(name, str):
        return None
    normalized = name.strip().upper()
    if normalized not in ALL_ROLES:
        return None
    return Role(normalized)


def validate_page(page: Page | str) -> Page:
    """
    Coerce a page key into a Page.

    Raises:
        ValueError: If the page key is not part of the schema
    """
    try:
        return Page(page)
    except ValueError:
        raise ValueError(
            f"Invalid page '{page}'. "
            f"Must be one of: {', '.join(p.value for p in ALL_PAGES)}"
        ) from None


def validate_feature(feature: Feature | str) -> Feature:
    """
    Coerce a feature key into a Feature.

    Raises:
        ValueError: If the feature key is not part of the schema
    """
    try:
        return Feature(feature)
    except ValueError:
        raise ValueError(
            f"Invalid feature '{feature}'. "
            f"Must be one of: {', '.join(f.value for f in Feature)}"
        ) from None


def validate_feature_action(
    feature: Feature | str,
    action: Action | str,
) -> tuple[Feature, Action]:
    """
    Coerce a (feature, action) pair, rejecting actions the feature does not declare.

    Raises:
        ValueError: If the feature is unknown or the action is not declared for it
    """
    resolved_feature = validate_feature(feature)
    allowed = FEATURE_ACTIONS[resolved_feature]
    try:
        resolved_action = Action(action)
    except ValueError:
        resolved_action = None
    if resolved_action is None or resolved_action not in allowed:
        raise ValueError(
            f"Invalid action '{getattr(action, 'value', action)}' for feature '{resolved_feature.value}'. "
            f"Allowed actions: {', '.join(a.value for a in allowed)}"
        )
    return resolved_feature, resolved_action
