# ============================================
# CENTRALIZED ROLE → PERMISSIONS MAP
# ============================================
#
# Roles are strictly nested: every role holds all capabilities of the
# roles below it. ROLE_PERMISSIONS is built cumulatively from
# ROLE_GRANTS so the nesting cannot drift.

# Least → most privileged
ROLES = ["employee", "manager", "admin", "owner"]

# Roles that can be granted through an invitation
INVITABLE_ROLES = ["employee", "manager", "admin"]


# Capabilities
REPORTS_OWN = "reports:own"
REPORTS_VIEW_ALL = "reports:view_all"
SITES_MANAGE = "sites:manage"
DATA_EXPORT = "data:export"
EMPLOYEES_MANAGE = "employees:manage"
COMPANY_SETTINGS = "company:settings"
BILLING_VIEW = "billing:view"
COMPANY_DELETE = "company:delete"


# Capabilities each role ADDS on top of the role below it
ROLE_GRANTS = {

    # =====================================================
    # EMPLOYEE: files and edits their own reports
    # =====================================================
    "employee": [
        REPORTS_OWN,
    ],

    # =====================================================
    # MANAGER: runs day-to-day operations
    # =====================================================
    "manager": [
        REPORTS_VIEW_ALL,
        SITES_MANAGE,
        DATA_EXPORT,
    ],

    # =====================================================
    # ADMIN: manages people and company settings
    # =====================================================
    "admin": [
        EMPLOYEES_MANAGE,
        COMPANY_SETTINGS,
    ],

    # =====================================================
    # OWNER: billing + company lifecycle
    # =====================================================
    "owner": [
        BILLING_VIEW,
        COMPANY_DELETE,
    ],
}


def _build_role_permissions() -> dict:
    permissions = {}
    inherited = []
    for role in ROLES:
        inherited = inherited + ROLE_GRANTS[role]
        permissions[role] = list(inherited)
    return permissions


ROLE_PERMISSIONS = _build_role_permissions()
