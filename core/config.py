from typing import List, Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    # -------------------------------------------------
    # General
    # -------------------------------------------------
    PROJECT_NAME: str = "SlipCheck API"
    ENV: str = "development"
    LOG_LEVEL: str = Field("INFO", env="LOG_LEVEL")

    # Front end that receives invitation links
    APP_BASE_URL: str = Field("https://app.slipcheck.io", env="APP_BASE_URL")

    # -------------------------------------------------
    # Front end Domains
    # -------------------------------------------------
    # Comma separated list of extra origins (preview deploys, localhost)
    FRONTEND_ORIGINS: Optional[str] = Field(None, env="FRONTEND_ORIGINS")

    SLIPCHECK_DOMAINS: List[str] = [
        "https://slipcheck.io",
        "https://www.slipcheck.io",
        "https://app.slipcheck.io",
    ]

    # -------------------------------------------------
    # CORS (auto-built below)
    # -------------------------------------------------
    BACKEND_CORS_ORIGINS: List[str] = []

    # -------------------------------------------------
    # Supabase (Primary DB & Auth)
    # -------------------------------------------------
    SUPABASE_URL: Optional[str] = Field(None, env="SUPABASE_URL")
    SUPABASE_ANON_KEY: Optional[str] = Field(None, env="SUPABASE_ANON_KEY")
    SUPABASE_SERVICE_ROLE_KEY: Optional[str] = Field(None, env="SUPABASE_SERVICE_ROLE_KEY")

    # -------------------------------------------------
    # SMTP Email Notifications
    # -------------------------------------------------
    SMTP_HOST: Optional[str] = Field(None, env="SMTP_HOST")
    SMTP_PORT: Optional[int] = Field(None, env="SMTP_PORT")
    SMTP_USER: Optional[str] = Field(None, env="SMTP_USER")
    SMTP_PASS: Optional[str] = Field(None, env="SMTP_PASS")
    EMAIL_FROM: Optional[str] = Field(None, env="EMAIL_FROM")

    # -------------------------------------------------
    # Stripe Payment Processing
    # -------------------------------------------------
    STRIPE_SECRET_KEY: Optional[str] = Field(None, env="STRIPE_SECRET_KEY")
    STRIPE_WEBHOOK_SECRET: Optional[str] = Field(None, env="STRIPE_WEBHOOK_SECRET")

    # -------------------------------------------------
    # Weather (OpenWeatherMap)
    # -------------------------------------------------
    OPENWEATHER_API_KEY: Optional[str] = Field(None, env="OPENWEATHER_API_KEY")
    OPENWEATHER_BASE_URL: str = "https://api.openweathermap.org/data/2.5"
    WEATHER_TIMEOUT_SECONDS: int = 10

    # -------------------------------------------------
    # Tenancy defaults
    # -------------------------------------------------
    # Applies to both new user trials and new company trials
    TRIAL_PERIOD_DAYS: int = Field(30, env="TRIAL_PERIOD_DAYS", description="Length of the free trial window (default: 30)")
    INVITATION_EXPIRY_DAYS: int = Field(7, env="INVITATION_EXPIRY_DAYS", description="Days before an invitation expires (default: 7)")
    DEFAULT_MAX_EMPLOYEES: int = 10
    DEFAULT_MAX_SITES: int = 25

    # Companies younger than this are skipped by the orphan reconciliation job
    ORPHAN_GRACE_MINUTES: int = 10

    # -------------------------------------------------
    # Rate limits (process local)
    # -------------------------------------------------
    RATE_LIMIT_MUTATION_MAX: int = 50
    RATE_LIMIT_MUTATION_WINDOW_SECONDS: int = 300

    # -------------------------------------------------
    # Model Config
    # -------------------------------------------------
    class Config:
        case_sensitive = True
        # Real environment variables only, no .env file


# Instantiate settings
settings = Settings()

# -------------------------------------------------
# Build CORS list dynamically after loading settings
# -------------------------------------------------
cors_origins = []

# 1) add extra front end origins
if settings.FRONTEND_ORIGINS:
    for origin in settings.FRONTEND_ORIGINS.split(","):
        origin = origin.strip()
        if not origin:
            continue
        if not origin.startswith("http"):
            origin = f"https://{origin}"
        cors_origins.append(origin.rstrip("/"))

# 2) add SlipCheck domains
cors_origins.extend([d.rstrip("/") for d in settings.SLIPCHECK_DOMAINS])

# 3) remove duplicates
settings.BACKEND_CORS_ORIGINS = sorted(list(set(cors_origins)))
