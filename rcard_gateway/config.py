"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./rcard.db"
    create_tables_on_startup: bool = True

    # Service
    service_name: str = "rcard-gateway"
    log_level: str = "INFO"

    # Auth tokens
    jwt_secret_key: str = "change-this-key-in-production-minimum-32-characters"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Card catalog (None = packaged catalog)
    policy_catalog_path: str | None = None

    # Loan defaults, applied when a catalog entry omits the field
    default_min_interest_days: int = 5
    default_max_yearly_loans: float = 1000
    default_interest_rate_monthly: float = 10  # percent

    # "Today" for due dates and accrual is taken in this zone
    business_timezone: str = "America/Chicago"

    # Rate limits (attempts per window)
    login_max_attempts: int = 5
    login_window_seconds: int = 300
    loan_create_max_attempts: int = 3
    loan_create_window_seconds: int = 60

    # Count original rather than outstanding principal toward the yearly cap
    yearly_limit_uses_original_principal: bool = False


settings = Settings()
