import json
import logging
from pathlib import Path
from typing import Optional

from school_admin.models import User, user_from_dict, user_to_dict

logger = logging.getLogger(__name__)


class SessionStore:
    """Persists the signed-in user as a single JSON record on disk."""

    def __init__(self, session_file: Path):
        self.session_file = Path(session_file)

    def save(self, user: User) -> None:
        self.session_file.parent.mkdir(parents=True, exist_ok=True)
        session_data = {"user": user_to_dict(user)}
        with open(self.session_file, "w", encoding="utf-8") as f:
            json.dump(session_data, f, indent=2)
        logger.info(f"Session saved for user: {user.email}")

    def load(self) -> Optional[User]:
        """Return the stored user, clearing the record if it cannot be read."""
        if not self.session_file.exists():
            return None
        try:
            with open(self.session_file, "r", encoding="utf-8") as f:
                session_data = json.load(f)
            return user_from_dict(session_data["user"])
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable session record: {e}")
            self.clear()
            return None

    def clear(self) -> None:
        if self.session_file.exists():
            self.session_file.unlink()
            logger.info("Session cleared")
