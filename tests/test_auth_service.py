import json
from dataclasses import replace

import pytest

from brewfinder.auth import service as svc
from brewfinder.auth.service import ANONYMOUS, AuthService, validate_login_form, validate_registration_form
from brewfinder.auth.session import SessionRegistry
from brewfinder.auth.users import CredentialStore

from conftest import STRONG_PASSWORD


def test_register_then_login_sets_current_user(auth):
    reg = auth.register("alice", "a@x.com", STRONG_PASSWORD)
    assert reg.success
    assert reg.message == svc.MSG_REGISTERED

    res = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD)
    assert res.success
    assert auth.is_logged_in(res.context)
    user = auth.current_user(res.context)
    assert user.username == "alice"
    assert user.email == "a@x.com"


def test_login_by_email(auth):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    assert auth.login(ANONYMOUS, "a@x.com", STRONG_PASSWORD).success


def test_login_updates_last_login(auth, store):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    assert store.load()[0].last_login is None
    auth.login(ANONYMOUS, "alice", STRONG_PASSWORD)
    assert store.load()[0].last_login


@pytest.mark.parametrize("username", ["alice", "ALICE_2"])
def test_duplicate_username_rejected_and_store_unchanged(auth, users_path, username):
    auth.register(username, "a@x.com", STRONG_PASSWORD)
    before = users_path.read_text(encoding="utf-8")

    res = auth.register(username, "other@x.com", STRONG_PASSWORD)
    assert not res.success
    assert res.message == "Username already exists"
    assert users_path.read_text(encoding="utf-8") == before


def test_username_match_is_case_sensitive(auth):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    assert auth.register("Alice", "b@x.com", STRONG_PASSWORD).success
    assert not auth.login(ANONYMOUS, "ALICE", STRONG_PASSWORD).success


def test_duplicate_email_rejected(auth):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    res = auth.register("bob", "a@x.com", STRONG_PASSWORD)
    assert (res.success, res.message) == (False, "Email already registered")


@pytest.mark.parametrize(
    "username, password, message",
    [
        ("al", STRONG_PASSWORD, svc.MSG_USERNAME_SHORT),
        ("al-ice", STRONG_PASSWORD, svc.MSG_USERNAME_CHARSET),
        ("alice\n", STRONG_PASSWORD, svc.MSG_USERNAME_CHARSET),
        ("alice", "abcdefg1", svc.MSG_WEAK_PASSWORD),
        # length is checked before strength
        ("al", "weak", svc.MSG_USERNAME_SHORT),
    ],
)
def test_register_validation_messages(auth, store, username, password, message):
    res = auth.register(username, "a@x.com", password)
    assert (res.success, res.message) == (False, message)
    assert store.load() == []


def test_password_is_never_stored_in_plaintext(auth, users_path):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    text = users_path.read_text(encoding="utf-8")
    assert STRONG_PASSWORD not in text
    entry = json.loads(text)[0]
    assert "password" not in entry
    assert entry["password_hash"].startswith("$argon2")
    assert entry["is_active"] is True


def test_wrong_password_and_unknown_user_give_same_message(auth):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    wrong = auth.login(ANONYMOUS, "alice", "Wrong123!")
    missing = auth.login(ANONYMOUS, "nobody", STRONG_PASSWORD)
    assert not wrong.success and not missing.success
    assert wrong.message.encode() == missing.message.encode()
    assert wrong.context == ANONYMOUS


def test_inactive_user_cannot_login(auth, store):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    store.update(lambda users: [replace(u, is_active=False) for u in users])
    assert not auth.login(ANONYMOUS, "alice", STRONG_PASSWORD).success


def test_logout_destroys_session(auth):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    ctx = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD).context

    res = auth.logout(ctx)
    assert res.success
    assert res.context == ANONYMOUS
    assert not auth.is_logged_in(ctx)
    assert auth.current_user(ctx) is None


def test_relogin_replaces_previous_session(auth):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    first = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD).context
    second = auth.login(first, "alice", STRONG_PASSWORD).context
    assert first.session_id != second.session_id
    assert not auth.is_logged_in(first)
    assert auth.is_logged_in(second)


def test_session_snapshot_is_not_live(auth, store):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    ctx = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD).context
    store.update(lambda users: [replace(u, email="new@x.com") for u in users])
    assert auth.current_user(ctx).email == "a@x.com"


def test_register_reports_save_failure(tmp_path):
    target = tmp_path / "users.json"
    target.mkdir()
    auth = AuthService(CredentialStore(target), SessionRegistry())
    res = auth.register("alice", "a@x.com", STRONG_PASSWORD)
    assert (res.success, res.message) == (False, "Failed to save user data.")


def test_register_and_login(auth):
    res = auth.register_and_login(ANONYMOUS, "alice", "a@x.com", STRONG_PASSWORD)
    assert res.success
    assert auth.current_user(res.context).username == "alice"


def test_register_succeeds_when_auto_login_fails(auth, monkeypatch):
    monkeypatch.setattr(auth, "login", lambda ctx, u, p: svc.AuthResult(False, svc.MSG_BAD_CREDENTIALS, ctx))
    res = auth.register_and_login(ANONYMOUS, "alice", "a@x.com", STRONG_PASSWORD)
    assert res.success
    assert res.message == svc.MSG_AUTO_LOGIN_FAILED
    assert res.context == ANONYMOUS


def test_expired_session_is_not_logged_in(store):
    sessions = SessionRegistry(max_age=-1)
    auth = AuthService(store, sessions)
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    ctx = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD).context
    assert not auth.is_logged_in(ctx)


@pytest.mark.parametrize(
    "form, message",
    [
        (("", "a@x.com", "x", "x"), svc.MSG_FIELDS_REQUIRED),
        (("alice", "not-an-email", STRONG_PASSWORD, STRONG_PASSWORD), svc.MSG_INVALID_EMAIL),
        (("alice", "a@x.com", STRONG_PASSWORD, "Other123!"), svc.MSG_PASSWORD_MISMATCH),
        (("alice", "a@x.com", STRONG_PASSWORD, STRONG_PASSWORD), None),
    ],
)
def test_validate_registration_form(form, message):
    assert validate_registration_form(*form) == message


def test_validate_login_form():
    assert validate_login_form("", "x") == svc.MSG_LOGIN_FIELDS_REQUIRED
    assert validate_login_form("alice", "x") is None


def test_login_with_malformed_stored_hash_fails_generically(auth, store):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    corrupt = "$argon2id$v=19$m=65536,t=3,p=4$c2FsdA$aGFzaA"
    store.update(lambda users: [replace(u, password_hash=corrupt) for u in users])

    res = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD)
    assert (res.success, res.message) == (False, svc.MSG_BAD_CREDENTIALS)


def test_abandoned_sessions_are_pruned(store):
    auth = AuthService(store, SessionRegistry(max_age=-1))
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    for _ in range(5):
        auth.login(ANONYMOUS, "alice", STRONG_PASSWORD)
    assert len(auth.sessions) == 1


def test_live_sessions_survive_pruning(auth):
    auth.register("alice", "a@x.com", STRONG_PASSWORD)
    first = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD).context
    second = auth.login(ANONYMOUS, "alice", STRONG_PASSWORD).context
    assert len(auth.sessions) == 2
    assert auth.is_logged_in(first) and auth.is_logged_in(second)
