"""
Policy Table - the authoritative, compiled-in role -> permission mapping.

Every role carries a COMPLETE record: each page key and each declared
(feature, action) pair is spelled out as True or False. A missing key is a
configuration error and fails table construction; it is never read as an
implicit False.

The table is read-only after import. Decision functions receive it as an
explicit argument (see backoffice.auth.rbac) instead of importing it.
"""
from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Final

from .rbac_contract import (
    ALL_PAGES,
    ALL_ROLES,
    FEATURE_ACTIONS,
    Action,
    Feature,
    Page,
    Role,
)

logger = logging.getLogger("backoffice.rbac")


@dataclass(frozen=True)
class RolePermissions:
    """Immutable permission record for a single role."""

    pages: Mapping[Page, bool]
    features: Mapping[Feature, Mapping[Action, bool]]

    @classmethod
    def build(
        cls,
        pages: Mapping[Page | str, bool],
        features: Mapping[Feature | str, Mapping[Action | str, bool]],
    ) -> "RolePermissions":
        return cls(
            pages=MappingProxyType(dict(pages)),
            features=MappingProxyType(
                {feature: MappingProxyType(dict(actions)) for feature, actions in features.items()}
            ),
        )

    def can_see(self, page: Page) -> bool:
        return self.pages.get(page, False) is True

    def allows(self, feature: Feature, action: Action) -> bool:
        actions = self.features.get(feature)
        if actions is None:
            return False
        return actions.get(action, False) is True

    def allows_any(self, feature: Feature) -> bool:
        actions = self.features.get(feature)
        if actions is None:
            return False
        return any(value is True for value in actions.values())

    def granted_pages(self) -> tuple[Page, ...]:
        return tuple(Page(page) for page, visible in self.pages.items() if visible is True)


EMPTY_PERMISSIONS: Final[RolePermissions] = RolePermissions.build(
    pages={page: False for page in ALL_PAGES},
    features={
        feature: {action: False for action in actions}
        for feature, actions in FEATURE_ACTIONS.items()
    },
)


def _key(value: object) -> object:
    return value.value if isinstance(value, Enum) else value


def _check_flags(
    label: str,
    flags: Mapping[object, object],
    expected: tuple[Enum, ...],
    check_values: bool = True,
) -> list[str]:
    errors = []
    present = {_key(name) for name in flags}
    wanted = {member.value for member in expected}

    for name in sorted(wanted - present):
        errors.append(f"{label} is missing '{name}'")
    for name in sorted(str(name) for name in present - wanted):
        errors.append(f"{label} has unknown key '{name}'")
    for name, value in flags.items():
        if check_values and _key(name) in wanted and type(value) is not bool:
            errors.append(f"{label} '{_key(name)}' must be a bool, got {value!r}")
    return errors


def validate_policy_table(entries: Mapping[object, RolePermissions]) -> list[str]:
    """
    Check a policy table against the schema.

    Returns a list of human-readable problems; an empty list means the table
    is complete and well-formed. Checks:
    - every role in the closed set has an entry and no unknown roles appear
    - every page key is present, known and boolean
    - every feature and every declared action is present, known and boolean
    - ADMIN grants every page and every action
    """
    errors: list[str] = []
    seen_roles = {_key(role) for role in entries}

    for role in sorted(ALL_ROLES - seen_roles):
        errors.append(f"Role '{role}' missing from policy table")

    for role, permissions in entries.items():
        role_name = _key(role)
        if role_name not in ALL_ROLES:
            errors.append(f"Invalid role in policy table: {role_name}")
            continue

        errors.extend(_check_flags(f"Role '{role_name}' pages", permissions.pages, ALL_PAGES))

        errors.extend(
            _check_flags(
                f"Role '{role_name}' features",
                permissions.features,
                tuple(Feature),
                check_values=False,
            )
        )
        for feature, actions in permissions.features.items():
            feature_name = _key(feature)
            if feature_name not in {f.value for f in Feature}:
                continue
            errors.extend(
                _check_flags(
                    f"Role '{role_name}' feature '{feature_name}'",
                    actions,
                    FEATURE_ACTIONS[Feature(feature_name)],
                )
            )

        if role_name == Role.ADMIN.value:
            denied_pages = [_key(page) for page, value in permissions.pages.items() if value is not True]
            if denied_pages:
                errors.append(f"Role 'ADMIN' must see every page, denied: {denied_pages}")
            for feature, actions in permissions.features.items():
                denied = [_key(action) for action, value in actions.items() if value is not True]
                if denied:
                    errors.append(
                        f"Role 'ADMIN' must be granted every action of '{_key(feature)}', denied: {denied}"
                    )

    return errors


class PolicyTable(Mapping[Role, RolePermissions]):
    """
    Read-only role -> RolePermissions mapping, validated on construction.

    Raises:
        RuntimeError: If the entries are incomplete or malformed
    """

    def __init__(self, entries: Mapping[Role | str, RolePermissions]):
        errors = validate_policy_table(entries)
        if errors:
            raise RuntimeError(
                "Policy table validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        self._entries: Mapping[Role, RolePermissions] = MappingProxyType(
            {Role(_key(role)): permissions for role, permissions in entries.items()}
        )

    def __getitem__(self, role: Role) -> RolePermissions:
        return self._entries[role]

    def __iter__(self) -> Iterator[Role]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def for_role(self, role: object) -> RolePermissions:
        """Return the role's record, or an all-false record for an unknown role."""
        try:
            return self._entries[Role(role)]
        except (KeyError, ValueError):
            logger.debug("Unknown role '%s' contributes no permissions", role)
            return EMPTY_PERMISSIONS


# ============================================================================
# SHIPPED POLICY
# ============================================================================

ROLE_PERMISSIONS: Final[Mapping[Role, RolePermissions]] = MappingProxyType({
    Role.ADMIN: RolePermissions.build(
        pages={
            Page.DASHBOARD: True,
            Page.INVENTORY: True,
            Page.CUSTOMERS: True,
            Page.QUOTATIONS: True,
            Page.ORDERS: True,
            Page.INVOICES: True,
            Page.RECEIPTS: True,
            Page.EXPENSES: True,
            Page.EMPLOYEES: True,
            Page.ANALYTICS: True,
            Page.SUPPLIERS: True,
            Page.INVOICE_REQUESTS: True,
            Page.REVIEW_ORDERS: True,
            Page.SALES_REPORT: True,
        },
        features={
            Feature.INVENTORY: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
                Action.VIEW_COST_PRICE: True,
            },
            Feature.CUSTOMERS: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
            },
            Feature.INVOICES: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
                Action.EXPORT_EXCEL: True,
            },
            Feature.QUOTATIONS: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
            },
            Feature.ORDERS: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
            },
            Feature.RECEIPTS: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
            },
            Feature.EXPENSES: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
                Action.APPROVE: True,
                Action.EDIT_APPROVED: True,
                Action.DELETE_APPROVED: True,
            },
            Feature.EMPLOYEES: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
            },
            Feature.ANALYTICS: {
                Action.VIEW: True,
                Action.EXPORT: True,
            },
            Feature.INVOICE_REQUESTS: {
                Action.VIEW: True,
                Action.APPROVE: True,
                Action.REJECT: True,
            },
            Feature.REVIEW_ORDERS: {
                Action.VIEW: True,
                Action.APPROVE: True,
                Action.REJECT: True,
            },
        },
    ),

    Role.SALES: RolePermissions.build(
        pages={
            Page.DASHBOARD: False,  # admin only
            Page.INVENTORY: True,
            Page.CUSTOMERS: True,
            Page.QUOTATIONS: True,
            Page.ORDERS: True,
            Page.INVOICES: True,
            Page.RECEIPTS: False,  # admin only
            Page.EXPENSES: False,
            Page.EMPLOYEES: False,
            Page.ANALYTICS: False,
            Page.SUPPLIERS: False,
            Page.INVOICE_REQUESTS: True,
            Page.REVIEW_ORDERS: False,
            Page.SALES_REPORT: True,
        },
        features={
            Feature.INVENTORY: {
                Action.VIEW: True,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
                Action.VIEW_COST_PRICE: False,
            },
            Feature.CUSTOMERS: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: False,
            },
            Feature.INVOICES: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
                Action.EXPORT_EXCEL: False,
            },
            Feature.QUOTATIONS: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
            },
            Feature.ORDERS: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
            },
            Feature.RECEIPTS: {
                Action.VIEW: False,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
            },
            # Expense actions stay granted but the expenses page is hidden,
            # so page-gated checks deny them.
            Feature.EXPENSES: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
                Action.APPROVE: False,
                Action.EDIT_APPROVED: False,
                Action.DELETE_APPROVED: False,
            },
            Feature.EMPLOYEES: {
                Action.VIEW: False,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
            },
            Feature.ANALYTICS: {
                Action.VIEW: False,
                Action.EXPORT: False,
            },
            Feature.INVOICE_REQUESTS: {
                Action.VIEW: True,
                Action.APPROVE: False,
                Action.REJECT: False,
            },
            Feature.REVIEW_ORDERS: {
                Action.VIEW: False,
                Action.APPROVE: False,
                Action.REJECT: False,
            },
        },
    ),

    Role.FINANCE: RolePermissions.build(
        pages={
            Page.DASHBOARD: False,  # admin only
            Page.INVENTORY: False,
            Page.CUSTOMERS: True,
            Page.QUOTATIONS: False,
            Page.ORDERS: False,
            Page.INVOICES: True,
            Page.RECEIPTS: False,  # admin only
            Page.EXPENSES: True,
            Page.EMPLOYEES: False,
            Page.ANALYTICS: True,
            Page.SUPPLIERS: False,
            Page.INVOICE_REQUESTS: True,
            Page.REVIEW_ORDERS: False,
            Page.SALES_REPORT: False,  # admin only
        },
        features={
            Feature.INVENTORY: {
                Action.VIEW: False,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
                Action.VIEW_COST_PRICE: False,
            },
            # Detail view only
            Feature.CUSTOMERS: {
                Action.VIEW: True,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
            },
            Feature.INVOICES: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
                Action.EXPORT_EXCEL: False,
            },
            Feature.QUOTATIONS: {
                Action.VIEW: False,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
            },
            Feature.ORDERS: {
                Action.VIEW: False,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
            },
            Feature.RECEIPTS: {
                Action.VIEW: False,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
            },
            Feature.EXPENSES: {
                Action.VIEW: True,
                Action.ADD: True,
                Action.EDIT: True,
                Action.DELETE: True,
                Action.APPROVE: False,
                Action.EDIT_APPROVED: False,
                Action.DELETE_APPROVED: False,
            },
            Feature.EMPLOYEES: {
                Action.VIEW: False,
                Action.ADD: False,
                Action.EDIT: False,
                Action.DELETE: False,
            },
            Feature.ANALYTICS: {
                Action.VIEW: True,
                Action.EXPORT: True,
            },
            Feature.INVOICE_REQUESTS: {
                Action.VIEW: True,
                Action.APPROVE: True,
                Action.REJECT: True,
            },
            Feature.REVIEW_ORDERS: {
                Action.VIEW: False,
                Action.APPROVE: False,
                Action.REJECT: False,
            },
        },
    ),
})


# Validated on import (fail-fast)
DEFAULT_POLICY: Final[PolicyTable] = PolicyTable(ROLE_PERMISSIONS)
