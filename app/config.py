import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
    APP_NAME: str = os.getenv("APP_NAME", "PG Manager")
    # Core settings
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development").lower()
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    BASE_URL: str = os.getenv("BASE_URL", "http://localhost:8000")

    # Auth & Session
    SESSION_COOKIE_NAME: str = os.getenv("SESSION_COOKIE_NAME", "pgmanager_session")
    SESSION_MAX_AGE_DAYS: int = int(os.getenv("SESSION_MAX_AGE_DAYS", "30"))
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "12"))

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pgmanager.db")

    # Cron endpoints; an empty secret leaves them open
    CRON_SECRET: str = os.getenv("CRON_SECRET", "")

    # Tenancy and billing rules
    DEFAULT_NOTICE_PERIOD_DAYS: int = int(os.getenv("DEFAULT_NOTICE_PERIOD_DAYS", "30"))
    BILL_DUE_DAYS: int = int(os.getenv("BILL_DUE_DAYS", "5"))
    REMINDER_WINDOW_DAYS: int = int(os.getenv("REMINDER_WINDOW_DAYS", "3"))
    CURRENCY: str = os.getenv("CURRENCY", "INR").upper()

    # Cloudinary
    CLOUDINARY_URL: str = os.getenv("CLOUDINARY_URL", "")

    # Default admin bootstrap
    ADMIN_NAME: str = os.getenv("ADMIN_NAME", "Admin User")
    ADMIN_PHONE: str = os.getenv("ADMIN_PHONE", "9999999999")
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASSWORD", "admin123")

    # Mail Settings (Mailgun)
    MAIL_FROM: str = os.getenv("MAIL_FROM", "noreply@pgmanager.local")
    MAILGUN_API_KEY: str = os.getenv("MAILGUN_API_KEY", "")
    MAILGUN_DOMAIN: str = os.getenv("MAILGUN_DOMAIN", "")

    # Upload constraints
    UPLOAD_IMAGE_MAX_MB: int = int(os.getenv("UPLOAD_IMAGE_MAX_MB", "5"))
    UPLOAD_IMAGE_MAX_BYTES: int = UPLOAD_IMAGE_MAX_MB * 1024 * 1024

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
    RATE_LIMIT_DEFAULT: str = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_AUTH: str = os.getenv("RATE_LIMIT_AUTH", "5/minute")
    RATE_LIMIT_BOOKING: str = os.getenv("RATE_LIMIT_BOOKING", "10/minute")

settings = Settings()
