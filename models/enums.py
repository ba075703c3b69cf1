from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# COMPANY ROLE
# -----------------------------------------------------
class CompanyRole(BaseStrEnum):
    """Role carried by an employee binding (least → most privileged)."""

    employee = "employee"
    manager = "manager"
    admin = "admin"
    owner = "owner"


class InvitableRole(BaseStrEnum):
    """Owner is never granted through an invitation."""

    employee = "employee"
    manager = "manager"
    admin = "admin"


# -----------------------------------------------------
# SUBSCRIPTION
# -----------------------------------------------------
class SubscriptionPlan(BaseStrEnum):
    trial = "trial"
    basic = "basic"
    premium = "premium"
    enterprise = "enterprise"


# -----------------------------------------------------
# INVITATION STATUS (computed, not stored)
# -----------------------------------------------------
class InvitationStatus(BaseStrEnum):
    pending = "pending"
    accepted = "accepted"
    expired = "expired"


# -----------------------------------------------------
# SITE PRIORITY
# -----------------------------------------------------
class SitePriority(BaseStrEnum):
    high = "high"
    medium = "medium"
    low = "low"


# -----------------------------------------------------
# REPORT FIELDS
# -----------------------------------------------------
class WeatherCondition(BaseStrEnum):
    clear = "clear"
    rain = "rain"
    drifting_snow = "driftingSnow"
    light_snow = "lightSnow"
    heavy_snow = "heavySnow"
    freezing_rain = "freezingRain"
    sleet = "sleet"


class SnowRemovalMethod(BaseStrEnum):
    plow = "plow"
    shovel = "shovel"
    no_action = "noAction"
    salt = "salt"
    combination = "combination"


class FollowUpPlan(BaseStrEnum):
    all_clear = "allClear"
    active_snowfall = "activeSnowfall"
    monitor_conditions = "monitorConditions"
    return_in_hour = "returnInHour"
    call_supervisor = "callSupervisor"


class WeatherTrend(BaseStrEnum):
    up = "up"
    down = "down"
    steady = "steady"


class ReportStatus(BaseStrEnum):
    """Export filter on is_draft."""

    draft = "draft"
    submitted = "submitted"
