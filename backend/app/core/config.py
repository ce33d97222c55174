from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "clerk-mirror"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    APP_BASE_URL: str = "http://localhost:8000"
    APP_DATABASE_DSN: str = "sqlite:////tmp/database.db"

    # Clerk webhooks (Svix signing)
    CLERK_WEBHOOK_SECRET: str = ""
    WEBHOOK_TOLERANCE_SECONDS: int = 300  # Max clock skew for svix-timestamp

    # Where users land after following a verification link
    CLERK_SIGN_IN_URL: str = "/sign-in"
    EMAIL_VERIFICATION_TTL_HOURS: int = 24

    # SMTP (email is a no-op when SMTP_HOST is empty)
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = "no-reply@example.com"
    SMTP_FROM_NAME: str = "Clerk Mirror"
    SMTP_USE_TLS: bool = True

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    version: str = "0.1.0"

    @property
    def webhook_secret_configured(self) -> bool:
        return bool(self.CLERK_WEBHOOK_SECRET)


settings = Settings()


def get_settings() -> Settings:
    """Return the process-wide settings (overridable in tests)."""
    return settings
