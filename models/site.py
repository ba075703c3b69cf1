# models/site.py

from typing import Optional
from pydantic import BaseModel, Field
from models.enums import SitePriority


class SiteBase(BaseModel):
    """Base site model."""
    name: str = Field(..., min_length=1, max_length=200, description="Site name (required)")
    address: str = Field(..., min_length=1, description="Street address (required)")
    priority: SitePriority = SitePriority.medium
    size_sqft: Optional[int] = Field(None, ge=0)
    typical_salt_usage_kg: Optional[float] = Field(None, ge=0)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    contact_phone: Optional[str] = None
    special_instructions: Optional[str] = None


class SiteCreate(SiteBase):
    """Create site model."""
    pass


class SiteUpdate(BaseModel):
    """Update site model - all fields optional."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = Field(None, min_length=1)
    priority: Optional[SitePriority] = None
    size_sqft: Optional[int] = Field(None, ge=0)
    typical_salt_usage_kg: Optional[float] = Field(None, ge=0)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    contact_phone: Optional[str] = None
    special_instructions: Optional[str] = None
