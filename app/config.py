import os
from typing import List
from dotenv import load_dotenv

load_dotenv()

class Settings:
    # Database Configuration
    MONGODB_URL: str = os.getenv("MONGODB_URL", os.getenv("MONGODB_URI", "mongodb://localhost:27017"))
    DATABASE_NAME: str = os.getenv("DATABASE_NAME", "booking")

    # JWT Configuration
    JWT_SECRET: str = os.getenv("JWT_SECRET", "secret")
    JWT_ALGORITHM: str = os.getenv("JWT_ALGORITHM", "HS256")
    JWT_EXPIRE_HOURS: int = int(os.getenv("JWT_EXPIRE_HOURS", "12"))

    # Initial administrator (created on startup when no admin exists)
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", os.getenv("RECEIVER_EMAIL", ""))
    ADMIN_PASSWORD: str = os.getenv("ADMIN_PASS", os.getenv("ADMIN_PASSWORD", ""))

    # Google Calendar OAuth2 Configuration
    GOOGLE_CLIENT_ID: str = os.getenv("GOOGLE_CLIENT_ID", "")
    GOOGLE_CLIENT_SECRET: str = os.getenv("GOOGLE_CLIENT_SECRET", "")
    GOOGLE_REDIRECT_URI: str = os.getenv("GOOGLE_REDIRECT_URI", "http://localhost:5000/oauth2callback")
    GOOGLE_CALENDAR_ID: str = os.getenv("GOOGLE_CALENDAR_ID", "primary")
    GOOGLE_TOKEN_FILE: str = os.getenv("GOOGLE_TOKEN_FILE", "tokens.json")

    # SMTP configuration for sending emails
    SMTP_SERVER: str = os.getenv("SMTP_SERVER", os.getenv("EMAIL_SMTP_HOST", "smtp.gmail.com"))
    SMTP_PORT: int = int(os.getenv("SMTP_PORT", os.getenv("EMAIL_SMTP_PORT", "587")))
    SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", os.getenv("EMAIL_USER", os.getenv("GMAIL_USER", "")))
    SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", os.getenv("EMAIL_PASS", os.getenv("GMAIL_APP_PASSWORD", "")))
    SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "True").lower() == "true"
    MAIL_FROM: str = os.getenv("MAIL_FROM", "")

    # Gmail XOAUTH2 (used when no SMTP password is configured)
    GMAIL_OAUTH_CLIENT_ID: str = os.getenv("GMAIL_OAUTH_CLIENT_ID", "")
    GMAIL_OAUTH_CLIENT_SECRET: str = os.getenv("GMAIL_OAUTH_CLIENT_SECRET", "")
    GMAIL_OAUTH_REFRESH_TOKEN: str = os.getenv("GMAIL_OAUTH_REFRESH_TOKEN", "")

    # Server Configuration
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "5000"))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # CORS Configuration
    ALLOWED_ORIGINS: List[str] = os.getenv("ALLOWED_ORIGINS", "*").split(",")

    # Default Settings
    DEFAULT_TIMEZONE: str = os.getenv("DEFAULT_TIMEZONE", "Asia/Kolkata")

    # Meeting Settings
    DEFAULT_MEETING_DURATION: int = int(os.getenv("DEFAULT_MEETING_DURATION", "30"))  # minutes

settings = Settings()
