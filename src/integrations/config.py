"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file.

    Vendor credentials are all optional. A capability whose credential set is
    incomplete runs on its stub implementation (see src.integrations.providers).
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ALLOWED_ORIGINS: str = "*"

    # Monitoring
    SENTRY_DSN: str = ""

    # Stubs sleep for a bounded random interval to keep async call sites honest
    STUB_LATENCY_ENABLED: bool = True

    # Stripe (payments)
    STRIPE_SECRET_KEY: str = ""
    STRIPE_WEBHOOK_SECRET: str = ""

    # Salesforce (CRM)
    SALESFORCE_USERNAME: str = ""
    SALESFORCE_PASSWORD: str = ""
    SALESFORCE_SECURITY_TOKEN: str = ""
    SALESFORCE_LOGIN_URL: str = "https://login.salesforce.com"

    # Printful (fulfillment)
    PRINTFUL_API_KEY: str = ""
    PRINTFUL_WEBHOOK_SECRET: str = ""

    # Google Analytics 4
    GA4_MEASUREMENT_ID: str = ""  # e.g. G-XXXXXXXXXX
    GA4_API_SECRET: str = ""  # Measurement Protocol API secret
    GA4_PROPERTY_ID: str = ""  # Numeric property ID for the Data API

    # Google service account for the GA4 Data API
    GOOGLE_SERVICE_ACCOUNT_FILE: str = ""  # Path to service account JSON key file
    GOOGLE_SERVICE_ACCOUNT_JSON_B64: str = ""  # Base64 JSON for containerized deployments

    def get_service_account_path(self) -> str | None:
        """Return path to Google service account JSON file.

        Prefers GOOGLE_SERVICE_ACCOUNT_FILE (direct path) if set.
        Falls back to decoding GOOGLE_SERVICE_ACCOUNT_JSON_B64 into a temp file
        for containerized deployments where mounting a file is impractical.
        Returns None if neither is configured.
        """
        if self.GOOGLE_SERVICE_ACCOUNT_FILE.strip():
            return self.GOOGLE_SERVICE_ACCOUNT_FILE.strip()
        if self.GOOGLE_SERVICE_ACCOUNT_JSON_B64.strip():
            import base64
            import os
            import tempfile

            decoded = base64.b64decode(self.GOOGLE_SERVICE_ACCOUNT_JSON_B64)
            tmp_path = os.path.join(tempfile.gettempdir(), "ga4-service-account.json")
            with open(tmp_path, "wb") as f:
                f.write(decoded)
            return tmp_path
        return None


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
