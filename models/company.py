# models/company.py

from typing import Optional
from pydantic import BaseModel, Field, EmailStr


class CompanyBase(BaseModel):
    """Base company (tenant) model."""
    name: str = Field(..., min_length=1, max_length=200, description="Company display name")
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None


class CompanyCreate(CompanyBase):
    """Create company model. The slug is globally unique."""
    slug: str = Field(..., min_length=2, max_length=50, description="URL slug (lowercase letters, digits, hyphens)")


class CompanyUpdate(BaseModel):
    """
    Settings update - all fields optional.
    Plan, limits and is_active are not client-editable.
    """
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    logo_url: Optional[str] = None


class JoinCompanyRequest(BaseModel):
    invitationCode: str = Field(..., min_length=1, max_length=32)
