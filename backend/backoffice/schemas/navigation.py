from pydantic import BaseModel, Field

from .capabilities import CapabilitySummary


class NavigationItem(BaseModel):
    page: str
    path: str


class NavigationResponse(BaseModel):
    items: list[NavigationItem] = Field(default_factory=list)
    landing: str


class PageDescriptor(BaseModel):
    page: str
    path: str
    capabilities: CapabilitySummary
