# ------------------------------ IMPORTS ------------------------------
import os
import logging
from typing import List
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

# ------------------------------ CONFIGURATION CLASSES ------------------------------
@dataclass
class DatabaseConfig:
    """Database configuration."""
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./fcf_motors.db")
    pool_size: int = int(os.getenv("DB_POOL_SIZE", "10"))
    max_overflow: int = int(os.getenv("DB_MAX_OVERFLOW", "20"))
    echo: bool = os.getenv("DB_ECHO", "false").lower() == "true"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    @property
    def is_in_memory(self) -> bool:
        return self.database_url in ("sqlite://", "sqlite:///:memory:")

@dataclass
class CORSConfig:
    """CORS configuration."""
    origins: str = os.getenv("CORS_ORIGINS", "*")
    credentials: bool = os.getenv("CORS_CREDENTIALS", "true").lower() == "true"

    def get_origins_list(self) -> List[str]:
        """Get CORS origins as a list."""
        if self.origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.origins.split(",")]

@dataclass
class SecurityConfig:
    """Security configuration."""
    secret_key: str = os.getenv("SECRET_KEY", "")
    algorithm: str = os.getenv("ALGORITHM", "HS256")
    session_expire_minutes: int = int(os.getenv("SESSION_EXPIRE_MINUTES", "720"))
    bcrypt_rounds: int = int(os.getenv("BCRYPT_ROUNDS", "12"))
    reset_token_expire_minutes: int = int(os.getenv("RESET_TOKEN_EXPIRE_MINUTES", "60"))
    session_cookie_name: str = os.getenv("SESSION_COOKIE_NAME", "session")
    admin_username: str = os.getenv("ADMIN_USERNAME", "")
    admin_email: str = os.getenv("ADMIN_EMAIL", "")
    admin_password: str = os.getenv("ADMIN_PASSWORD", "")

    @property
    def bootstrap_admin(self) -> bool:
        return bool(self.admin_username and self.admin_email and self.admin_password)

@dataclass
class EmailConfig:
    """Outbound email configuration (SendGrid HTTP API)."""
    sendgrid_api_key: str = os.getenv("SENDGRID_API_KEY", "")
    api_url: str = os.getenv("SENDGRID_API_URL", "https://api.sendgrid.com/v3/mail/send")
    from_email: str = os.getenv("EMAIL_FROM", "no-reply@fcfmotors.com")
    from_name: str = os.getenv("EMAIL_FROM_NAME", "FCF Motors")
    timeout: int = int(os.getenv("EMAIL_TIMEOUT", "10"))
    app_base_url: str = os.getenv("APP_BASE_URL", "http://localhost:8000")

    @property
    def enabled(self) -> bool:
        return bool(self.sendgrid_api_key)

@dataclass
class SubscriptionConfig:
    """Subscription sweep configuration."""
    sweep_enabled: bool = os.getenv("SUBSCRIPTION_SWEEP_ENABLED", "true").lower() == "true"
    sweep_interval_seconds: int = int(os.getenv("SUBSCRIPTION_SWEEP_INTERVAL_SECONDS", "3600"))
    default_renewal_days: int = int(os.getenv("DEFAULT_RENEWAL_DAYS", "30"))

@dataclass
class APIConfig:
    """API configuration."""
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))
    debug: bool = os.getenv("API_DEBUG", "false").lower() == "true"

# ------------------------------ MAIN SETTINGS CLASS ------------------------------

class Settings:
    """Main application settings."""

    def __init__(self):
        self.database = DatabaseConfig()
        self.cors = CORSConfig()
        self.security = SecurityConfig()
        self.email = EmailConfig()
        self.subscriptions = SubscriptionConfig()
        self.api = APIConfig()

        self._setup_logging()
        self._validate_config()

    def _setup_logging(self):
        """Configure application logging."""
        log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        logging.basicConfig(
            level=getattr(logging, log_level),
            format="%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )

    def _validate_config(self):
        """Warn about settings that are unsafe outside local development."""
        logger = logging.getLogger(__name__)

        if not self.security.secret_key:
            logger.warning("SECRET_KEY is not set, using an insecure development key")
            self.security.secret_key = "fcf-motors-dev-secret"

        if not self.email.enabled:
            logger.info("SENDGRID_API_KEY is not set, outgoing email will only be logged")

# ------------------------------ GLOBAL SETTINGS INSTANCE ------------------------------
settings = Settings()

# ------------------------------ END OF FILE ------------------------------
