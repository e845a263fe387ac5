
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "TrustEstate Registry API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"

    # OpenAI (document / identity verification oracle)
    openai_api_key: str | None = Field(default=None, alias="OPENAI_API_KEY")
    openai_model: str = Field(default="gpt-4.1-mini", alias="OPENAI_MODEL")
    openai_max_tokens: int = Field(default=500, alias="OPENAI_MAX_TOKENS")
    openai_timeout: int = Field(default=60, alias="OPENAI_TIMEOUT")
    openai_vision_detail: str = Field(
        default="high", alias="OPENAI_VISION_DETAIL",
    )  # "low" | "high" | "auto"

    # Verification acceptance thresholds (0-100)
    ownership_match_threshold: int = Field(default=90, alias="OWNERSHIP_MATCH_THRESHOLD")
    identity_match_threshold: int = Field(default=90, alias="IDENTITY_MATCH_THRESHOLD")
    face_match_threshold: int = Field(default=85, alias="FACE_MATCH_THRESHOLD")

    # Risk gate thresholds (strictly greater than)
    user_flag_threshold: int = Field(default=20, alias="USER_FLAG_THRESHOLD")
    property_flag_threshold: int = Field(default=20, alias="PROPERTY_FLAG_THRESHOLD")
    critical_risk_threshold: int = Field(default=70, alias="CRITICAL_RISK_THRESHOLD")

    suspension_months: int = Field(default=3, alias="SUSPENSION_MONTHS")
    audit_log_limit: int = Field(default=100, alias="AUDIT_LOG_LIMIT")

    # Actor name written to the lifecycle log when no user is present
    system_actor: str = Field(default="System Registry", alias="SYSTEM_ACTOR")

    # Reject transitions outside ALLOWED_TRANSITIONS (off: any change is logged)
    enforce_transition_table: bool = Field(default=False, alias="ENFORCE_TRANSITION_TABLE")

    # Database (PostgreSQL via asyncpg or SQLite for local dev)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./trustestate_dev.db",
        alias="DATABASE_URL",
    )

    # Seeded system administrator
    admin_email: str = Field(default="admin@trustestate.com", alias="ADMIN_EMAIL")
    admin_name: str = Field(default="System Admin", alias="ADMIN_NAME")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def ai_enabled(self) -> bool:
        """AI verification is available only when an OpenAI key is configured."""
        return bool(self.openai_api_key)

settings = Settings()
