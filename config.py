import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
IS_PRODUCTION = ENVIRONMENT == "production"

# MongoDB
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "kateri-pharmacy")

# Admin dashboard login
ADMIN_USERNAME = os.getenv("ADMIN_USERNAME")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
JWT_EXPIRATION_HOURS = int(os.getenv("JWT_EXPIRATION_HOURS", "24"))

_PLACEHOLDER_SECRET = "your-super-secret-jwt-key-change-this-in-production"  # noqa: S105

JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET or JWT_SECRET == _PLACEHOLDER_SECRET:
    import warnings

    warnings.warn(
        "JWT_SECRET not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    JWT_SECRET = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Brevo transactional email
BREVO_API_KEY = os.getenv("BREVO_API_KEY")
MAIL_FROM = os.getenv("MAIL_FROM") or os.getenv("FROM_EMAIL") or "noreply@kateripharmacy.com"
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL", "admin@kateripharmacy.com")
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:3000")

# Google reCAPTCHA v3
RECAPTCHA_SECRET_KEY = os.getenv("RECAPTCHA_SECRET_KEY")
RECAPTCHA_MIN_SCORE = float(os.getenv("RECAPTCHA_MIN_SCORE", "0.5"))

# Documo fax + pharmacy letterhead
DOCUMO_API_KEY = os.getenv("DOCUMO_API_KEY")
PHARMACY_NAME = os.getenv("PHARMACY_NAME", "Kateri Pharmacy")
PHARMACY_PHONE = os.getenv("PHARMACY_PHONE", "450-638-5760")
PHARMACY_FAX_NUMBER = os.getenv("PHARMACY_FAX_NUMBER", "450-635-8249")
PHARMACY_TIMEZONE = os.getenv("PHARMACY_TIMEZONE", "America/Toronto")

# Google Sheets backup
GOOGLE_SERVICE_ACCOUNT_KEY = os.getenv("GOOGLE_SERVICE_ACCOUNT_KEY")
GOOGLE_BACKUP_SPREADSHEET_ID = os.getenv("GOOGLE_BACKUP_SPREADSHEET_ID")
BACKUP_API_KEY = os.getenv("BACKUP_API_KEY")

# Claim document uploads
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", Path(__file__).resolve().parent / "uploads"))

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
