"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (DB URI, Stripe key, JWT secret, SMTP, etc.)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, validator
from pydantic_settings import BaseSettings
from typing import Optional, Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # MongoDB
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="sleephaven",
        description="MongoDB database name"
    )

    # Stripe
    STRIPE_SECRET_KEY: Optional[str] = Field(
        default=None,
        description="Stripe secret API key"
    )
    FRONTEND_URL: str = Field(
        default="http://localhost:3000",
        description="Public frontend base URL used for checkout redirects"
    )

    # Product (single one-time purchase)
    PRODUCT_NAME: str = Field(
        default="Sleep Haven Personalized Plan",
        description="Checkout line item name"
    )
    PRODUCT_DESCRIPTION: str = Field(
        default="Personalized sleep plan with lifetime access and 24/7 support",
        description="Checkout line item description"
    )
    PRODUCT_IMAGE_URL: Optional[str] = Field(
        default=None,
        description="Checkout line item image"
    )
    PRODUCT_PRICE_CENTS: int = Field(
        default=5000,
        description="Unit price in the smallest currency unit"
    )
    PRODUCT_CURRENCY: str = Field(
        default="usd",
        description="ISO currency code for the product price"
    )

    # Tokens & passwords
    JWT_SECRET: str = Field(
        default="change-me-in-production",
        description="Signing secret for session tokens"
    )
    JWT_ALGORITHM: str = Field(
        default="HS256",
        description="JWT signing algorithm"
    )
    JWT_EXPIRES_DAYS: int = Field(
        default=30,
        description="Session token lifetime in days"
    )
    BCRYPT_ROUNDS: int = Field(
        default=10,
        description="bcrypt work factor"
    )

    # Email
    EMAIL_USER: Optional[str] = Field(
        default=None,
        description="SMTP login, also used as the From address"
    )
    EMAIL_PASS: Optional[str] = Field(
        default=None,
        description="SMTP password / app password"
    )
    SMTP_HOST: str = Field(
        default="smtp.gmail.com",
        description="SMTP server host"
    )
    SMTP_PORT: int = Field(
        default=465,
        description="SMTP server port (SSL)"
    )
    SITE_URL: str = Field(
        default="https://www.sleephaven.ai",
        description="Public site linked from emails"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    @validator("JWT_SECRET")
    def validate_jwt_secret(cls, v, values):
        """Ensure JWT secret is changed in production."""
        if values.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("JWT_SECRET must be changed in production environment")
        return v

    @validator("STRIPE_SECRET_KEY")
    def validate_stripe_key(cls, v, values):
        """Ensure Stripe key is set in production."""
        if values.get("ENVIRONMENT") == "production" and not v:
            raise ValueError("STRIPE_SECRET_KEY is required in production environment")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"

    @property
    def email_configured(self) -> bool:
        return bool(self.EMAIL_USER and self.EMAIL_PASS)

    class Config:
        env_file = ".env"
        case_sensitive = True
        env_file_encoding = "utf-8"
        extra = "ignore"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if not settings.MONGODB_URL:
        errors.append("MONGODB_URL is required")

    if not settings.FRONTEND_URL:
        errors.append("FRONTEND_URL is required")

    if settings.PRODUCT_PRICE_CENTS <= 0:
        errors.append("PRODUCT_PRICE_CENTS must be positive")

    # Production-specific validations
    if settings.is_production:
        if not settings.STRIPE_SECRET_KEY:
            errors.append("STRIPE_SECRET_KEY is required in production")
        if not settings.email_configured:
            errors.append("EMAIL_USER and EMAIL_PASS are required in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
