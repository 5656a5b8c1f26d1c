import json

import pytest

from school_admin.auth.service import INVALID_CREDENTIALS, AuthService
from school_admin.auth.session_manager import SessionStore
from school_admin.exceptions import PermissionDeniedError
from school_admin.models import Teacher


@pytest.fixture
def session_file(tmp_path):
    return tmp_path / "session" / "session.json"


@pytest.fixture
def auth(repo, session_file):
    return AuthService(repo, SessionStore(session_file))


def test_login_persists_user_without_password(auth, session_file):
    result = auth.login("john.smith@school.edu", "teacher123")

    assert result.ok
    assert result.error is None
    assert result.user.id == "teacher-1"
    assert auth.get_current_user().id == "teacher-1"

    data = json.loads(session_file.read_text(encoding="utf-8"))
    assert data["user"]["id"] == "teacher-1"
    assert data["user"]["role"] == "teacher"
    assert "password" not in data["user"]


@pytest.mark.parametrize(
    "email,password",
    [("john.smith@school.edu", "nope"), ("ghost@school.edu", "teacher123")],
)
def test_login_failures_share_one_message(auth, session_file, email, password):
    result = auth.login(email, password)

    assert not result.ok
    assert result.error == INVALID_CREDENTIALS
    assert not session_file.exists()
    assert auth.get_current_user() is None


def test_session_restored_in_new_service(repo, auth, session_file):
    auth.login("john.smith@school.edu", "teacher123")

    restored = AuthService(repo, SessionStore(session_file)).get_current_user()
    assert isinstance(restored, Teacher)
    assert restored.id == "teacher-1"
    assert restored.subjects == ["subject-1"]
    assert restored.password == ""


def test_logout_clears_session(repo, auth, session_file):
    auth.login("admin@school.edu", "admin123")
    auth.logout()

    assert not session_file.exists()
    assert auth.get_current_user() is None
    assert AuthService(repo, SessionStore(session_file)).get_current_user() is None


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        json.dumps({"user": {"role": "wizard"}}),
        json.dumps({"token": "abc"}),
        "[]",
        json.dumps({"user": "x"}),
        json.dumps({"user": None}),
    ],
)
def test_unreadable_session_is_discarded(repo, session_file, content):
    session_file.parent.mkdir(parents=True)
    session_file.write_text(content, encoding="utf-8")

    auth = AuthService(repo, SessionStore(session_file))
    assert auth.get_current_user() is None
    assert not session_file.exists()


def test_role_checks(auth):
    assert not auth.is_authenticated()
    assert not auth.has_role("admin")

    auth.login("alice.doe@school.edu", "student123")
    assert auth.is_authenticated()
    assert auth.has_role("student")
    assert not auth.has_role("admin")
    assert auth.has_any_role(["teacher", "student"])
    assert not auth.has_any_role(["teacher", "admin"])


def test_require_role(auth):
    with pytest.raises(PermissionDeniedError, match="Not logged in"):
        auth.require_role("admin")

    auth.login("alice.doe@school.edu", "student123")
    with pytest.raises(PermissionDeniedError, match="requires role admin or teacher"):
        auth.require_role("admin", "teacher")
    assert auth.require_role("student").id == "student-1"
