# models/user.py

from pydantic import BaseModel, Field, field_validator


class UserProfileUpdate(BaseModel):
    """Profile fields the user may change themselves."""
    display_name: str = Field(..., max_length=100, description="Shown on reports and exports")

    @field_validator("display_name")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("display_name cannot be empty")
        return value
