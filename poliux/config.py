import os
from dotenv import load_dotenv
from pathlib import Path

# Go up one level from poliux/ to root/
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DB_URL = os.getenv("DB_URL", "sqlite:///poliux.db")

# External workflow that generates bill analyses (n8n or similar)
ANALYSIS_WEBHOOK_URL = os.getenv("ANALYSIS_WEBHOOK_URL", "")
WEBHOOK_TIMEOUT = float(os.getenv("WEBHOOK_TIMEOUT", "15"))

# Newsfeed ranking
NEWSFEED_WINDOW_DAYS = int(os.getenv("NEWSFEED_WINDOW_DAYS", "7"))
NEWSFEED_FALLBACK_CAP = int(os.getenv("NEWSFEED_FALLBACK_CAP", "200"))
DEFAULT_LIMIT = 20
DEFAULT_OFFSET = 0
DEFAULT_MAX_PER_DOMAIN = 2

# Report inbox entries expire after this many days
REPORT_TTL_DAYS = int(os.getenv("REPORT_TTL_DAYS", "30"))
