from pathlib import Path
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# -------------------------------------------------
# Explicitly load .env
# -------------------------------------------------

BASE_DIR = Path(__file__).resolve().parent.parent.parent
ENV_PATH = BASE_DIR / ".env"

load_dotenv(dotenv_path=ENV_PATH)


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ENVIRONMENT: str = "development"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    ALGORITHM: str = "HS256"

    # Session cookie carrying the signed access token
    SESSION_COOKIE_NAME: str = "leasehub_session"
    SESSION_COOKIE_SECURE: bool = False

    # Database lifecycle
    AUTO_CREATE_TABLES: bool = Field(default=True, description="Run metadata.create_all on startup instead of relying on Alembic")
    SQL_ECHO: bool = False

    LOG_LEVEL: str = "INFO"

    # Comma-separated; credentials are allowed so "*" is not accepted by browsers
    CORS_ORIGINS: str = "http://localhost:3000"

    # Lease workflow
    LEASE_TERM_DAYS: int = Field(default=365, description="Fixed lease term used by the acquisition workflow")
    PAYMENT_SIMULATION_DELAY_SECONDS: float = Field(default=1.5, ge=0, description="Artificial gateway round trip before recording a payment")

    # Mail: accept MAIL_* or SMTP_*. Empty MAIL_SERVER disables outbound mail.
    MAIL_FROM: str = Field(default="", validation_alias=AliasChoices("MAIL_FROM", "SMTP_FROM_EMAIL"))
    MAIL_FROM_NAME: str = Field(default="LeaseHub", validation_alias=AliasChoices("MAIL_FROM_NAME", "SMTP_FROM_NAME"))
    MAIL_USERNAME: str = Field(default="", validation_alias=AliasChoices("MAIL_USERNAME", "SMTP_USER"))
    MAIL_PASSWORD: str = Field(default="", validation_alias=AliasChoices("MAIL_PASSWORD", "SMTP_PASSWORD"))
    MAIL_SERVER: str = Field(default="", validation_alias=AliasChoices("MAIL_SERVER", "SMTP_HOST"))
    MAIL_PORT: int = Field(default=587, validation_alias=AliasChoices("MAIL_PORT", "SMTP_PORT"))
    APP_URL: str = "http://localhost:3000"

    # Seed admin on startup when both are set
    DEFAULT_ADMIN_EMAIL: str = ""
    DEFAULT_ADMIN_PASSWORD: str = ""

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        extra = "ignore"
        env_file = str(ENV_PATH)
        env_file_encoding = "utf-8"


settings = Settings()
