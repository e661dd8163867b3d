# config.py
import os
import logging

from dotenv import load_dotenv

# --- Load environment variables ---
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///reminders.db")

AI_API_KEY = os.getenv("AI_API_KEY") or os.getenv("DEEPSEEK_API_KEY")
AI_API_URL = os.getenv("AI_API_URL", "https://api.deepseek.com/v1/chat/completions")
AI_MODEL = os.getenv("AI_MODEL", "deepseek-chat")
AI_TIMEOUT_SECONDS = float(os.getenv("AI_TIMEOUT_SECONDS", "20"))

SMTP_HOST = os.getenv("SMTP_HOST")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
SMTP_FROM = os.getenv("SMTP_FROM", "reminders@rude-reminders.app")
SMTP_STARTTLS = os.getenv("SMTP_STARTTLS", "true").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

FREE_MONTHLY_LIMIT = int(os.getenv("FREE_MONTHLY_LIMIT", "12"))
SWEEP_INTERVAL_SECONDS = int(os.getenv("SWEEP_INTERVAL_SECONDS", "60"))
LOOKAHEAD_MINUTES = int(os.getenv("LOOKAHEAD_MINUTES", "5"))
MISSED_LOOKBACK_MINUTES = int(os.getenv("MISSED_LOOKBACK_MINUTES", "1440"))

PORT = int(os.getenv("PORT", "8000"))


# --- Logging ---
def setup_logging(level=None):
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)
    )
