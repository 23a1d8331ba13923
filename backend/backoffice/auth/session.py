"""
Session role resolution - normalization boundary between identity and RBAC.

The session user carries free-form role objects ({"name": "sales", ...}).
Only names matching the closed Role set survive; anything else is dropped
so a principal with no valid roles degrades to "no access", not an error.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from .policy_table import DEFAULT_POLICY, PolicyTable
from .rbac_contract import Role, parse_role

logger = logging.getLogger("backoffice.session")


def _raw_role_names(user: object) -> list[object]:
    if user is None:
        return []
    if isinstance(user, Mapping):
        raw_roles = user.get("roles")
    else:
        raw_roles = getattr(user, "roles", None)
    if not isinstance(raw_roles, (list, tuple)):
        return []

    names: list[object] = []
    for entry in raw_roles:
        if isinstance(entry, Mapping):
            names.append(entry.get("name"))
        elif isinstance(entry, str):
            names.append(entry)
        else:
            names.append(getattr(entry, "name", None))
    return names


def resolve_roles(user: object) -> tuple[Role, ...]:
    """
    Extract the principal's role set from a session user.

    Accepts a SessionUser, a plain mapping in the same shape, or None.
    Role names are upper-cased; unknown names and duplicates are dropped and
    the order of first appearance is kept.
    """
    resolved: list[Role] = []
    for name in _raw_role_names(user):
        role = parse_role(name)
        if role is None:
            logger.warning("Dropping unrecognized role name %r", name)
            continue
        if role not in resolved:
            resolved.append(role)
    return tuple(resolved)


@dataclass(frozen=True)
class AccessContext:
    """Policy and role set threaded through a single request or render."""

    policy: PolicyTable
    roles: tuple[Role, ...] = ()

    @classmethod
    def from_user(cls, user: object, policy: PolicyTable = DEFAULT_POLICY) -> "AccessContext":
        return cls(policy=policy, roles=resolve_roles(user))
