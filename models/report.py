# models/report.py

from typing import Optional
import datetime as dt
from pydantic import BaseModel, Field
from models.enums import (
    WeatherCondition,
    SnowRemovalMethod,
    FollowUpPlan,
    WeatherTrend,
)


class ReportFields(BaseModel):
    """
    Editable report fields. Drafts may be saved with most fields empty;
    required fields are checked when a report is submitted.
    """
    # General information
    truck: Optional[str] = None
    tractor: Optional[str] = None
    handwork: Optional[str] = None
    dispatched_for: Optional[str] = Field(None, description="HH:MM")
    start_time: Optional[str] = Field(None, description="HH:MM")
    finish_time: Optional[str] = Field(None, description="HH:MM")

    # Conditions
    conditions_upon_arrival: Optional[WeatherCondition] = None
    follow_up_plans: Optional[FollowUpPlan] = None
    precipitation_type: Optional[WeatherCondition] = None
    temperature_trend: Optional[WeatherTrend] = None

    # Weather readings
    air_temperature: Optional[float] = None
    daytime_high: Optional[float] = None
    daytime_low: Optional[float] = None
    snowfall_accumulation_cm: Optional[float] = Field(None, ge=0)

    # Materials
    snow_removal_method: Optional[SnowRemovalMethod] = None
    salt_used_kg: Optional[float] = Field(None, ge=0)
    deicing_material_kg: Optional[float] = Field(None, ge=0)
    salt_alternative_kg: Optional[float] = Field(None, ge=0)

    # Geolocation
    gps_latitude: Optional[float] = Field(None, ge=-90, le=90)
    gps_longitude: Optional[float] = Field(None, ge=-180, le=180)
    gps_accuracy: Optional[float] = Field(None, ge=0)

    comments: Optional[str] = None


class ReportCreate(ReportFields):
    site_id: str
    date: dt.date
    is_draft: bool = True
    weather_data: Optional[dict] = None


class ReportUpdate(ReportFields):
    is_draft: Optional[bool] = None
