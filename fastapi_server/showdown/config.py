"""
Configuration - loads DATABASE_URL and tournament constants from environment variables.
"""
import os
from dotenv import load_dotenv

load_dotenv()

PGHOST = os.getenv("PGHOST")
PGUSER = os.getenv("PGUSER")
PGPORT = os.getenv("PGPORT", "5432")
PGDATABASE = os.getenv("PGDATABASE")
PGPASSWORD = os.getenv("PGPASSWORD")

if all([PGHOST, PGUSER, PGDATABASE, PGPASSWORD]):
    DATABASE_URL = (
        f"postgresql://{PGUSER}:{PGPASSWORD}@{PGHOST}:{PGPORT}/{PGDATABASE}?sslmode=require"
    )
else:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/showdown.db")

# Scoring
CP_START = int(os.getenv("SHOWDOWN_CP_START", "1000"))  # starting CP each match
CP_PER_VOTE = int(os.getenv("SHOWDOWN_CP_PER_VOTE", "1"))

# Match timing
MATCH_DURATION_HOURS = float(os.getenv("SHOWDOWN_MATCH_DURATION_HOURS", "72"))
EVENT_CUTOFF_SECONDS = int(os.getenv("SHOWDOWN_EVENT_CUTOFF_SECONDS", "30"))

# Background resolver loop; 0 disables it (run scripts/resolve_due.py from cron instead)
SCHEDULER_INTERVAL_SECONDS = float(os.getenv("SHOWDOWN_SCHEDULER_INTERVAL_SECONDS", "0"))

VOTER_KEY_SALT = os.getenv("SHOWDOWN_VOTER_KEY_SALT", "")
ADMIN_TOKEN = os.getenv("SHOWDOWN_ADMIN_TOKEN")

LOG_LEVEL = os.getenv("SHOWDOWN_LOG_LEVEL", "INFO").upper()
