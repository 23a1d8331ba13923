from typing import Literal

from pydantic import BaseModel, Field


class SessionRole(BaseModel):
    id: str | None = Field(default=None, alias="_id")
    name: str | None = None
    permissions: list[str] = Field(default_factory=list)
    description: str | None = None

    class Config:
        populate_by_name = True


class SessionUser(BaseModel):
    id: str | None = Field(default=None, alias="_id")
    name: str | None = None
    email: str | None = None
    type: Literal["admin", "employee"] | None = None
    status: str | None = None
    role_ids: list[str] = Field(default_factory=list, alias="roleIds")
    roles: list[SessionRole] = Field(default_factory=list)

    class Config:
        populate_by_name = True
