# -------------------------
# User Models
# -------------------------
from .user import UserProfileUpdate

# -------------------------
# Company Models
# -------------------------
from .company import (
    CompanyBase,
    CompanyCreate,
    CompanyUpdate,
    JoinCompanyRequest,
)

# -------------------------
# Employee / Invitation Models
# -------------------------
from .employee import EmployeeUpdate
from .invitation import InvitationCreate

# -------------------------
# Site / Report Models
# -------------------------
from .site import SiteBase, SiteCreate, SiteUpdate
from .report import ReportCreate, ReportUpdate

# -------------------------
# Enums
# -------------------------
from .enums import (
    CompanyRole,
    InvitableRole,
    InvitationStatus,
    ReportStatus,
    SitePriority,
    SubscriptionPlan,
)
