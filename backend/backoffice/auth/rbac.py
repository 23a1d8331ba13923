"""
Decision functions over a policy table.

Both functions are pure: the result depends only on the policy passed in,
the principal's roles and the selectors. The effective permission of a
principal is the union across held roles, except that ADMIN short-circuits
to full access.

All ambiguity resolves to "no access". Unknown role names contribute
nothing. A call with no page and no feature selects nothing, so only ADMIN
passes it. Unknown keys and actions a feature does not declare are call-site
bugs and raise ValueError once ADMIN has been ruled out.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from .policy_table import PolicyTable
from .rbac_contract import (
    ALL_PAGES,
    Action,
    Feature,
    Page,
    Role,
    validate_feature,
    validate_feature_action,
    validate_page,
)

logger = logging.getLogger("backoffice.rbac")


def _holds_admin(roles: Iterable[Role | str]) -> bool:
    return any(role == Role.ADMIN for role in roles)


def has_permission(
    policy: PolicyTable,
    roles: Iterable[Role | str],
    page: Page | str | None = None,
    feature: Feature | str | None = None,
    action: Action | str | None = None,
) -> bool:
    """
    Decide whether any held role satisfies every given selector.

    A role grants access only if it passes all selectors supplied: when a
    page is given, the role must see that page before its feature actions are
    considered. With a feature but no action, any true action of that feature
    counts.

    Args:
        policy: The policy table to resolve roles against
        roles: Roles held by the principal (duplicates are harmless)
        page: Page the principal must be able to see
        feature: Feature the action belongs to
        action: Action within the feature; ignored without ``feature``

    Returns:
        bool: True if access is granted

    Raises:
        ValueError: If a selector is not part of the schema and the principal
            is not ADMIN
    """
    roles = tuple(roles)
    if _holds_admin(roles):
        return True
    if page is None and feature is None:
        return False

    page_key = validate_page(page) if page is not None else None
    feature_key: Feature | None = None
    action_key: Action | None = None
    if feature is not None and action is not None:
        feature_key, action_key = validate_feature_action(feature, action)
    elif feature is not None:
        feature_key = validate_feature(feature)

    for role in roles:
        permissions = policy.for_role(role)

        if page_key is not None and not permissions.can_see(page_key):
            continue

        if feature_key is not None and action_key is not None:
            if permissions.allows(feature_key, action_key):
                return True
        elif feature_key is not None:
            if permissions.allows_any(feature_key):
                return True
        else:
            return True

    logger.debug(
        "Denied roles=%s page=%s feature=%s action=%s",
        [getattr(role, "value", role) for role in roles],
        getattr(page_key, "value", None),
        getattr(feature_key, "value", None),
        getattr(action_key, "value", None),
    )
    return False


def get_accessible_pages(
    policy: PolicyTable,
    roles: Iterable[Role | str],
) -> list[Page]:
    """
    Return the union of visible pages across the held roles.

    Pages appear in order of first appearance and without duplicates. An
    ADMIN principal gets every page in schema order regardless of the table.
    """
    roles = tuple(roles)
    if _holds_admin(roles):
        return list(ALL_PAGES)

    accessible: list[Page] = []
    for role in roles:
        for page in policy.for_role(role).granted_pages():
            if page not in accessible:
                accessible.append(page)
    return accessible
