from pydantic import BaseModel, Field


class CapabilitySummary(BaseModel):
    roles: list[str] = Field(default_factory=list)
    is_admin: bool = False
    accessible_pages: list[str] = Field(default_factory=list)
    features: dict[str, dict[str, bool]] = Field(default_factory=dict)
    can_approve_expenses: bool = False
    can_export_invoices: bool = False
    can_view_cost_price: bool = False
    can_manage_inventory: bool = False
    can_delete_customers: bool = False
    can_edit_approved_expenses: bool = False
    can_delete_approved_expenses: bool = False


class PermissionCheckResponse(BaseModel):
    allowed: bool
