import os
from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEBUG = LOG_LEVEL == "DEBUG"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    raise ValueError("DATABASE_URL must be set in the environment")

ALLOWED_ORIGINS_RAW = os.getenv("ALLOWED_ORIGINS")
if not ALLOWED_ORIGINS_RAW:
    raise ValueError("ALLOWED_ORIGINS must be set in the environment")

ALLOWED_ORIGINS: list[str] = [
    origin.strip() for origin in ALLOWED_ORIGINS_RAW.split(",")
]

FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Pricing
GUEST_SERVICE_FEE_RATE = Decimal(os.getenv("GUEST_SERVICE_FEE_RATE", "0.03"))
COMMISSION_RATE = Decimal(os.getenv("COMMISSION_RATE", "10"))  # percent of booking amount
INCLUDED_GUESTS = int(os.getenv("INCLUDED_GUESTS", "2"))
PRICE_VALIDATION_TOLERANCE = Decimal(os.getenv("PRICE_VALIDATION_TOLERANCE", "1.00"))

# Comma separated YYYY-MM-DD list; replaces the built-in holiday calendar when set
HOLIDAY_DATES_RAW = os.getenv("HOLIDAY_DATES", "")
HOLIDAY_DATES: list[str] = [
    day.strip() for day in HOLIDAY_DATES_RAW.split(",") if day.strip()
]

# Booking rules
CANCELLATION_CUTOFF_HOURS = int(os.getenv("CANCELLATION_CUTOFF_HOURS", "24"))
MAX_STAY_NIGHTS = int(os.getenv("MAX_STAY_NIGHTS", "365"))
BOOKING_REFERENCE_PREFIX = os.getenv("BOOKING_REFERENCE_PREFIX", "MC")

# Payments
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
STRIPE_WEBHOOK_TOLERANCE = int(os.getenv("STRIPE_WEBHOOK_TOLERANCE", "300"))

# Notifications: "log", "smtp" or "http"
NOTIFICATION_BACKEND = os.getenv("NOTIFICATION_BACKEND", "log").lower()
SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_FROM = os.getenv("SMTP_FROM", "reservations@example.com")
SMTP_USE_TLS = os.getenv("SMTP_USE_TLS", "true").lower() == "true"
NOTIFICATION_API_URL = os.getenv("NOTIFICATION_API_URL")
NOTIFICATION_API_KEY = os.getenv("NOTIFICATION_API_KEY")
NOTIFICATION_TIMEOUT = float(os.getenv("NOTIFICATION_TIMEOUT", "5"))
