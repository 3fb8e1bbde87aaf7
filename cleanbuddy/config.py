import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cleanbuddy.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

JWT_ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 7)))

# Frontend base URL for invite links
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:3000")

# Pricing
DEFAULT_PLATFORM_FEE_PERCENTAGE = 15.0


def parse_platform_fee_percentage(raw: Optional[str]) -> float:
    """Parse the platform fee override, falling back to the default on bad input"""
    if raw is None or raw.strip() == "":
        return DEFAULT_PLATFORM_FEE_PERCENTAGE
    try:
        return float(raw)
    except ValueError:
        logger.warning(
            f"⚠️ Invalid PLATFORM_FEE_PERCENTAGE '{raw}', using default {DEFAULT_PLATFORM_FEE_PERCENTAGE}"
        )
        return DEFAULT_PLATFORM_FEE_PERCENTAGE


PLATFORM_FEE_PERCENTAGE = parse_platform_fee_percentage(os.getenv("PLATFORM_FEE_PERCENTAGE"))

# Cleaner invites
DEFAULT_INVITE_EXPIRY_DAYS = 7
MAX_INVITE_EXPIRY_DAYS = 30
INVITE_TOKEN_BYTES = 32  # 64 hex characters

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "CleanBuddy <noreply@cleanbuddy.ro>")

# Slack incoming webhook for admin notifications
SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL")

# Cloudflare R2 Configuration (application documents)
R2_ACCOUNT_ID = os.getenv("R2_ACCOUNT_ID")
R2_ACCESS_KEY_ID = os.getenv("R2_ACCESS_KEY_ID")
R2_SECRET_ACCESS_KEY = os.getenv("R2_SECRET_ACCESS_KEY")
R2_BUCKET_NAME = os.getenv("R2_BUCKET_NAME", "cleanbuddy-documents")

# Rate limiting (in-memory only when unset)
REDIS_URL = os.getenv("REDIS_URL")
