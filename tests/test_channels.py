from datetime import datetime, timedelta, timezone

import pytest

from conftest import auth
from models import storage
from models.subscription import Subscription
from models.video import Video, watch_history


def _subscribe(app, subscriber_id, channel_id):
    with app.app_context():
        storage.new(Subscription(subscriber_id=subscriber_id, channel_id=channel_id))
        storage.save()


def _profile(client, username, token):
    return client.get(f"/api/v1/users/c/{username}", headers=auth(token))


@pytest.mark.parametrize("subscribers,subscriptions", [(0, 0), (3, 0), (0, 2), (4, 3)])
def test_channel_profile_counts(app, client, make_user, subscribers, subscriptions):
    channel_id, _ = make_user("creator")
    viewer_id, viewer_token = make_user("viewer")

    for i in range(subscribers):
        fan_id, _ = make_user(f"fan{i}")
        _subscribe(app, fan_id, channel_id)
    for i in range(subscriptions):
        other_id, _ = make_user(f"other{i}")
        _subscribe(app, channel_id, other_id)

    resp = _profile(client, "creator", viewer_token)
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["subscribersCount"] == subscribers
    assert data["channelsSubscribedToCount"] == subscriptions
    assert data["isSubscribed"] is False
    assert data["username"] == "creator"
    assert set(data) == {
        "fullName",
        "username",
        "email",
        "avatar",
        "coverImage",
        "subscribersCount",
        "channelsSubscribedToCount",
        "isSubscribed",
    }


def test_channel_profile_is_subscribed(app, client, make_user):
    channel_id, _ = make_user("creator")
    viewer_id, viewer_token = make_user("viewer")
    fan_id, _ = make_user("fan")
    _subscribe(app, fan_id, channel_id)

    assert _profile(client, "creator", viewer_token).get_json()["data"]["isSubscribed"] is False

    _subscribe(app, viewer_id, channel_id)
    data = _profile(client, "creator", viewer_token).get_json()["data"]
    assert data["isSubscribed"] is True
    assert data["subscribersCount"] == 2


def test_subscribing_elsewhere_does_not_count(app, client, make_user):
    make_user("creator")
    viewer_id, viewer_token = make_user("viewer")
    other_id, _ = make_user("other")
    # viewer follows a different channel
    _subscribe(app, viewer_id, other_id)

    data = _profile(client, "creator", viewer_token).get_json()["data"]
    assert data["isSubscribed"] is False
    assert data["subscribersCount"] == 0


def test_channel_profile_username_is_case_insensitive(client, make_user):
    make_user("creator")
    _, token = make_user("viewer")
    assert _profile(client, "CreAtor", token).status_code == 200


def test_unknown_channel(client, make_user):
    _, token = make_user("viewer")
    resp = _profile(client, "nobody", token)
    assert resp.status_code == 404
    assert resp.get_json()["message"] == "Channel does not exist"


def test_channel_profile_requires_login(client, make_user):
    make_user("creator")
    assert client.get("/api/v1/users/c/creator").status_code == 401


def test_watch_history(app, client, make_user):
    owner_id, _ = make_user("creator", full_name="The Creator")
    viewer_id, viewer_token = make_user("viewer")

    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    with app.app_context():
        videos = [
            Video(
                owner_id=owner_id,
                title=f"Episode {i}",
                video_file=f"https://media.example.test/ep{i}.mp4",
                thumbnail=f"https://media.example.test/ep{i}.jpg",
                duration=60.0 * (i + 1),
            )
            for i in range(3)
        ]
        for video in videos:
            storage.new(video)
        storage.save()
        ids = [v.id for v in videos]
        session = storage.get_session()
        # watched in the order 2, 0, 1
        for offset, index in enumerate((2, 0, 1)):
            session.execute(
                watch_history.insert().values(
                    user_id=viewer_id, video_id=ids[index], watched_at=base + timedelta(minutes=offset)
                )
            )
        storage.save()

    resp = client.get("/api/v1/users/history", headers=auth(viewer_token))
    assert resp.status_code == 200
    history = resp.get_json()["data"]
    assert [item["title"] for item in history] == ["Episode 2", "Episode 0", "Episode 1"]
    assert history[0]["owner"] == {
        "fullName": "The Creator",
        "username": "creator",
        "avatar": "https://media.example.test/creator.png",
    }
    assert history[0]["videoFile"].endswith("ep2.mp4")

    profile = client.get("/api/v1/users/current-user", headers=auth(viewer_token)).get_json()["data"]
    assert profile["watchHistory"] == [ids[2], ids[0], ids[1]]


def test_empty_watch_history(client, make_user):
    _, token = make_user("viewer")
    resp = client.get("/api/v1/users/history", headers=auth(token))
    assert resp.status_code == 200
    assert resp.get_json()["data"] == []
