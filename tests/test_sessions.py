import pytest

from api.errors import InvalidCredentials, NotFound, Unauthorized
from conftest import PASSWORD
from models import storage
from models.user import User
from utils import sessions


def test_find_by_identity(app, make_user):
    user_id, _ = make_user("janedoe", email="jane@example.com")
    with app.app_context():
        assert User.find_by_identity(username="JaneDoe").id == user_id
        assert User.find_by_identity(email=" jane@example.com ").id == user_id
        assert User.find_by_identity(username="nobody", email="jane@example.com").id == user_id
        assert User.find_by_identity(username="nobody") is None
        assert User.find_by_identity() is None
        assert User.find_by_identity(username="  ") is None


def test_password_is_write_only(app, make_user):
    user_id, _ = make_user("janedoe")
    with app.app_context():
        user = storage.get(User, user_id)
        with pytest.raises(AttributeError):
            user.password
        assert user.is_password_correct(PASSWORD)
        assert not user.is_password_correct("")
        assert not user.is_password_correct(None)


def test_unrelated_updates_do_not_rehash(app, make_user):
    user_id, _ = make_user("janedoe")
    with app.app_context():
        user = storage.get(User, user_id)
        before = user.password_hash
        user.full_name = "Renamed"
        user.save()
        assert storage.get(User, user_id).password_hash == before


def test_login_errors(app, make_user):
    make_user("janedoe")
    with app.app_context():
        with pytest.raises(NotFound):
            sessions.login(PASSWORD, username="ghost")
        with pytest.raises(InvalidCredentials):
            sessions.login("wrong", username="janedoe")


def test_last_login_wins(app, make_user):
    make_user("janedoe")
    with app.app_context():
        _, _, first = sessions.login(PASSWORD, username="janedoe")
        _, _, second = sessions.login(PASSWORD, email="janedoe@example.com")
        assert first != second

        with pytest.raises(Unauthorized, match="expired or used"):
            sessions.refresh(first)
        access, rotated = sessions.refresh(second)
        assert access and rotated != second


def test_refresh_for_deleted_user(app, make_user):
    user_id, _ = make_user("janedoe")
    with app.app_context():
        _, _, token = sessions.login(PASSWORD, username="janedoe")
        storage.get(User, user_id).delete()
        storage.save()
        with pytest.raises(Unauthorized, match="Invalid refresh token"):
            sessions.refresh(token)


def test_logout_clears_token_and_tolerates_unknown_user(app, make_user):
    user_id, _ = make_user("janedoe")
    with app.app_context():
        sessions.login(PASSWORD, username="janedoe")
        sessions.logout(user_id)
        assert storage.get(User, user_id).refresh_token is None
        sessions.logout(user_id)
        sessions.logout("00000000-0000-0000-0000-000000000000")


def test_change_password(app, make_user):
    user_id, _ = make_user("janedoe")
    with app.app_context():
        user = storage.get(User, user_id)
        with pytest.raises(InvalidCredentials):
            sessions.change_password(user, "wrong", "next-password")
        sessions.change_password(user, PASSWORD, "next-password")

    with app.app_context():
        user = storage.get(User, user_id)
        assert user.is_password_correct("next-password")
        assert not user.is_password_correct(PASSWORD)
