import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

SCHOOL_NAME = os.getenv("SCHOOL_NAME", "School Management System")

# Stands in for browser local storage: one JSON record holding the current user.
SESSION_FILE = Path(
    os.getenv("SCHOOL_ADMIN_SESSION_FILE", str(Path.home() / ".school-admin" / "session.json"))
)

REPORTS_DIR = Path(os.getenv("SCHOOL_ADMIN_REPORTS_DIR", "reports"))
EXPORTS_DIR = Path(os.getenv("SCHOOL_ADMIN_EXPORTS_DIR", "exports"))
