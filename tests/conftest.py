import io
import os

# Must be set before `models` is imported: DBStorage picks its engine at import time
os.environ["APP_ENV"] = "test"

import pytest

from api import create_app
from models import storage
from models.user import User
from utils.media import discard_temp_file
from utils.tokens import create_token_pair

PASSWORD = "s3cret-pass"


class FakeUploader:
    """Stands in for the media host; files whose name ends with an entry of `fail_on` are rejected."""

    def __init__(self):
        self.fail_on = set()
        self.uploaded = []

    def upload(self, local_path):
        if not local_path or not os.path.isfile(local_path):
            return None
        name = os.path.basename(local_path)
        discard_temp_file(local_path)
        if any(name.endswith(suffix) for suffix in self.fail_on):
            return None
        url = f"https://media.example.test/{name}"
        self.uploaded.append(url)
        return {"url": url}


@pytest.fixture
def app(tmp_path):
    storage.reset()
    app = create_app("test", overrides={"UPLOAD_FOLDER": str(tmp_path / "uploads")})
    app.extensions["media_uploader"] = FakeUploader()
    yield app
    storage.close()


@pytest.fixture
def client(app):
    # Tokens are passed explicitly so superseded values can be replayed
    return app.test_client(use_cookies=False)


@pytest.fixture
def uploader(app):
    return app.extensions["media_uploader"]


def image(name="avatar.png"):
    return (io.BytesIO(b"\x89PNG fake image bytes"), name)


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register_user(client):
    def _register(with_avatar=True, cover=False, **fields):
        form = {
            "fullName": "Jane Doe",
            "username": "janedoe",
            "email": "jane@example.com",
            "password": PASSWORD,
        }
        form.update(fields)
        form = {k: v for k, v in form.items() if v is not None}
        if with_avatar:
            form["avatar"] = image("avatar.png")
        if cover:
            form["coverImage"] = image("cover.png")
        return client.post("/api/v1/users/register", data=form, content_type="multipart/form-data")

    return _register


@pytest.fixture
def login_user(client):
    def _login(password=PASSWORD, **identity):
        if not identity:
            identity = {"username": "janedoe"}
        return client.post("/api/v1/users/login", json={**identity, "password": password})

    return _login


@pytest.fixture
def session_tokens(register_user, login_user):
    """Register and log in the default user; returns the login `data` payload."""
    assert register_user().status_code == 201
    resp = login_user()
    assert resp.status_code == 200
    return resp.get_json()["data"]


@pytest.fixture
def make_user(app):
    """Insert a user directly and return (id, access_token)."""

    def _make(username, email=None, full_name=None):
        with app.app_context():
            user = User(
                username=username,
                email=email or f"{username}@example.com",
                full_name=full_name or username.title(),
                avatar=f"https://media.example.test/{username}.png",
            )
            user.set_password(PASSWORD)
            storage.new(user)
            storage.save()
            access, _ = create_token_pair(user)
            return user.id, access

    return _make
