import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from school_admin.auth.session_manager import SessionStore
from school_admin.exceptions import PermissionDeniedError
from school_admin.models import User, UserRole
from school_admin.repository import SchoolRepository

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class LoginResult:
    user: Optional[User]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.user is not None


class AuthService:
    """Tracks the current user for one process, backed by a SessionStore."""

    def __init__(self, repository: SchoolRepository, store: SessionStore):
        self.repository = repository
        self.store = store
        self._current_user: Optional[User] = None
        self._restored = False

    def login(self, email: str, password: str) -> LoginResult:
        user = self.repository.authenticate(email, password)
        if user is None:
            # Same message for unknown email and wrong password
            logger.warning("Failed login attempt")
            return LoginResult(user=None, error=INVALID_CREDENTIALS)

        self._current_user = user
        self._restored = True
        self.store.save(user)
        logger.info(f"User {user.id} logged in as {user.role}")
        return LoginResult(user=user)

    def logout(self) -> None:
        self._current_user = None
        self._restored = True
        self.store.clear()

    def get_current_user(self) -> Optional[User]:
        if self._current_user is None and not self._restored:
            self._current_user = self.store.load()
            self._restored = True
        return self._current_user

    def is_authenticated(self) -> bool:
        return self.get_current_user() is not None

    def has_role(self, role: UserRole) -> bool:
        user = self.get_current_user()
        return user is not None and user.role == role

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        user = self.get_current_user()
        return user is not None and user.role in roles

    def require_role(self, *roles: UserRole) -> User:
        """
        Return the current user if they hold one of ``roles``.

        Raises:
            PermissionDeniedError: If nobody is logged in or the role does not match
        """
        user = self.get_current_user()
        if user is None:
            raise PermissionDeniedError("Not logged in. Run 'school-admin login' first.")
        if user.role not in roles:
            raise PermissionDeniedError(
                f"This action requires role {' or '.join(roles)}; you are logged in as {user.role}"
            )
        return user
