import os
from dotenv import load_dotenv

# Always load .env from the project root
load_dotenv(dotenv_path=os.path.join(os.path.dirname(os.path.dirname(__file__)), ".env"))

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _csv(name: str, default: str = "") -> list:
    raw = os.environ.get(name, default)
    return [part.strip() for part in raw.split(",") if part.strip()]


# ============================================================
# DATABASE
# ============================================================

DATABASE_URL = os.environ.get("DATABASE_URL", "postgresql://localhost:5432/invoices")

# ============================================================
# SECURITY
# ============================================================

SECRET_KEY = os.environ.get("SECRET_KEY", "invoice-studio-secret-key-change-in-production")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

CORS_ORIGINS = _csv(
    "CORS_ORIGINS",
    "http://localhost:5173,http://localhost:3000",
)

# ============================================================
# DOCUMENT / EXPORT
# ============================================================

PAYMENT_URL = os.environ.get("PAYMENT_URL", "https://example.com/pay")

# Issuer mark; a file path or an http(s) URL. Empty means a text wordmark.
LOGO_PATH = os.environ.get("LOGO_PATH", "")

# Card brand icons shown beside the pay-online link. Empty means text badges.
CARD_ICON_PATHS = _csv("CARD_ICON_PATHS")

FONT_PATH = os.environ.get("FONT_PATH", "")
FONT_BOLD_PATH = os.environ.get("FONT_BOLD_PATH", "")

EXPORT_SCALE = max(2, int(os.environ.get("EXPORT_SCALE", "2")))
ASSET_FETCH_TIMEOUT = float(os.environ.get("ASSET_FETCH_TIMEOUT", "10"))

# Display label only, no conversion is performed.
CURRENCY_LABEL = os.environ.get("CURRENCY_LABEL", "USD")

# ============================================================
# EMAIL
# ============================================================

RESEND_API_KEY = os.environ.get("RESEND_API_KEY")
MAIL_FROM = os.environ.get("MAIL_FROM", "onboarding@resend.dev")

# ============================================================
# LOGGING
# ============================================================

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
