"""
Credential store tests: registration rules and password verification.
"""

import pytest

from todo_api.core.exceptions import RegistrationError
from todo_api.models import User
from todo_api.security.credentials import PasswordManager, PasswordPolicy, SqlCredentialStore


@pytest.fixture()
def store(db_session):
    return SqlCredentialStore(db_session, PasswordManager(rounds=4), PasswordPolicy())


def _codes(exc_info):
    return [error["code"] for error in exc_info.value.errors]


class TestCreate:
    """Test user registration."""

    def test_create_returns_id_and_hashes_password(self, store, db_session):
        user_id = store.create("alice", "pw1")

        user = db_session.get(User, user_id)
        assert user.username == "alice"
        assert user.password_hash != "pw1"
        assert user.password_hash.startswith("$2")

    def test_duplicate_username_is_case_insensitive(self, store):
        store.create("alice", "pw1")

        with pytest.raises(RegistrationError) as exc_info:
            store.create("ALICE", "pw2")
        assert _codes(exc_info) == ["DuplicateUserName"]

    @pytest.mark.parametrize("username", ["", "has space", "semi;colon"])
    def test_invalid_username(self, store, username):
        with pytest.raises(RegistrationError) as exc_info:
            store.create(username, "pw1")
        assert _codes(exc_info) == ["InvalidUserName"]

    def test_short_password(self, store):
        with pytest.raises(RegistrationError) as exc_info:
            store.create("alice", "p")
        assert _codes(exc_info) == ["PasswordTooShort"]

    def test_password_over_bcrypt_limit(self, store):
        with pytest.raises(RegistrationError) as exc_info:
            store.create("alice", "x" * 73)
        assert _codes(exc_info) == ["PasswordTooLong"]

    def test_all_violations_reported_together(self, db_session):
        strict = PasswordPolicy(
            min_length=8,
            require_digit=True,
            require_uppercase=True,
            require_non_alphanumeric=True,
        )
        store = SqlCredentialStore(db_session, PasswordManager(rounds=4), strict)

        with pytest.raises(RegistrationError) as exc_info:
            store.create("bad name", "abc")
        assert _codes(exc_info) == [
            "InvalidUserName",
            "PasswordTooShort",
            "PasswordRequiresDigit",
            "PasswordRequiresUpper",
            "PasswordRequiresNonAlphanumeric",
        ]

    def test_concurrent_duplicate_caught_on_commit(self, store, db_session, monkeypatch):
        store.create("alice", "pw1")
        # Another request registered the name after this one's lookup ran
        monkeypatch.setattr(store, "find_by_name", lambda username: None)

        with pytest.raises(RegistrationError) as exc_info:
            store.create("Alice", "pw2")

        assert _codes(exc_info) == ["DuplicateUserName"]
        assert db_session.query(User).count() == 1
        assert store.create("bob", "pw1") is not None

    def test_unencodable_password_is_reported(self, store, db_session):
        with pytest.raises(RegistrationError) as exc_info:
            store.create("alice", "ab\ud800")

        assert _codes(exc_info) == ["PasswordInvalidCharacter"]
        assert db_session.query(User).count() == 0

    def test_failed_registration_persists_nothing(self, store, db_session):
        with pytest.raises(RegistrationError):
            store.create("alice", "p")
        assert db_session.query(User).count() == 0


class TestVerify:
    """Test password verification."""

    def test_correct_password(self, store):
        store.create("alice", "pw1")

        user = store.verify("alice", "pw1")
        assert user is not None
        assert user.username == "alice"

    def test_lookup_ignores_case(self, store):
        store.create("alice", "pw1")
        assert store.verify("Alice", "pw1").username == "alice"

    def test_wrong_password(self, store):
        store.create("alice", "pw1")
        assert store.verify("alice", "wrong") is None

    def test_unknown_user(self, store):
        assert store.verify("nobody", "pw1") is None

    def test_empty_username(self, store):
        assert store.verify("", "pw1") is None

    def test_unencodable_input(self, store):
        store.create("alice", "pw1")

        assert store.verify("alice", "pw\ud800") is None
        assert store.verify("al\ud800ice", "pw1") is None


class TestPasswordManager:
    def test_hash_and_verify(self):
        manager = PasswordManager(rounds=4)
        hashed = manager.hash_password("pw1")

        assert manager.verify_password("pw1", hashed)
        assert not manager.verify_password("pw2", hashed)

    def test_garbage_hash_does_not_raise(self):
        assert not PasswordManager(rounds=4).verify_password("pw1", "not-a-bcrypt-hash")
