"""
Capability façade - named predicates for views and route guards.

Each predicate binds the arguments of a single has_permission call (two for
can_manage_inventory). Call sites ask "can this principal view cost price?"
and never spell out page/feature/action triples themselves.
"""
from __future__ import annotations

from ..schemas.capabilities import CapabilitySummary
from .rbac import get_accessible_pages, has_permission
from .rbac_contract import FEATURE_ACTIONS, Action, Feature, Page, Role
from .session import AccessContext


class Capabilities:
    def __init__(self, context: AccessContext):
        self.context = context

    @property
    def user_roles(self) -> tuple[Role, ...]:
        return self.context.roles

    @property
    def is_admin(self) -> bool:
        return Role.ADMIN in self.context.roles

    @property
    def accessible_pages(self) -> list[Page]:
        return get_accessible_pages(self.context.policy, self.context.roles)

    def _check(
        self,
        page: Page | str | None = None,
        feature: Feature | str | None = None,
        action: Action | str | None = None,
    ) -> bool:
        return has_permission(self.context.policy, self.context.roles, page, feature, action)

    def can_access_page(self, page: Page | str) -> bool:
        return self._check(page=page)

    def can_access_feature(self, feature: Feature | str, action: Action | str) -> bool:
        return self._check(feature=feature, action=action)

    def can_view_feature(self, feature: Feature | str) -> bool:
        return self._check(feature=feature, action=Action.VIEW)

    def can_add_feature(self, feature: Feature | str) -> bool:
        return self._check(feature=feature, action=Action.ADD)

    def can_edit_feature(self, feature: Feature | str) -> bool:
        return self._check(feature=feature, action=Action.EDIT)

    def can_delete_feature(self, feature: Feature | str) -> bool:
        return self._check(feature=feature, action=Action.DELETE)

    # Page-gated checks for specific buttons

    def can_approve_expenses(self) -> bool:
        return self._check(Page.EXPENSES, Feature.EXPENSES, Action.APPROVE)

    def can_export_invoices(self) -> bool:
        return self._check(Page.INVOICES, Feature.INVOICES, Action.EXPORT_EXCEL)

    def can_view_cost_price(self) -> bool:
        return self._check(Page.INVENTORY, Feature.INVENTORY, Action.VIEW_COST_PRICE)

    def can_manage_inventory(self) -> bool:
        return (
            self._check(Page.INVENTORY, Feature.INVENTORY, Action.ADD)
            or self._check(Page.INVENTORY, Feature.INVENTORY, Action.EDIT)
        )

    def can_delete_customers(self) -> bool:
        return self._check(Page.CUSTOMERS, Feature.CUSTOMERS, Action.DELETE)

    def can_edit_approved_expenses(self) -> bool:
        return self._check(Page.EXPENSES, Feature.EXPENSES, Action.EDIT_APPROVED)

    def can_delete_approved_expenses(self) -> bool:
        return self._check(Page.EXPENSES, Feature.EXPENSES, Action.DELETE_APPROVED)

    def summary(self) -> CapabilitySummary:
        """Snapshot every predicate for a client that renders from one payload."""
        return CapabilitySummary(
            roles=[role.value for role in self.user_roles],
            is_admin=self.is_admin,
            accessible_pages=[page.value for page in self.accessible_pages],
            features={
                feature.value: {
                    action.value: self.can_access_feature(feature, action)
                    for action in actions
                }
                for feature, actions in FEATURE_ACTIONS.items()
            },
            can_approve_expenses=self.can_approve_expenses(),
            can_export_invoices=self.can_export_invoices(),
            can_view_cost_price=self.can_view_cost_price(),
            can_manage_inventory=self.can_manage_inventory(),
            can_delete_customers=self.can_delete_customers(),
            can_edit_approved_expenses=self.can_edit_approved_expenses(),
            can_delete_approved_expenses=self.can_delete_approved_expenses(),
        )
