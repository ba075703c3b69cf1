# models/employee.py

from typing import List, Optional
from pydantic import BaseModel
from models.enums import InvitableRole


class EmployeeUpdate(BaseModel):
    """
    Role and site-assignment changes by an admin.
    Owner can never be granted or revoked here.
    """
    role: Optional[InvitableRole] = None
    site_assignments: Optional[List[str]] = None
