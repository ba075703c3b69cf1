# models/invitation.py

from pydantic import BaseModel, EmailStr
from models.enums import InvitableRole


class InvitationCreate(BaseModel):
    email: EmailStr
    role: InvitableRole = InvitableRole.employee
