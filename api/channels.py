"""
Read-only aggregates over users:
- GET /users/c/<username>  channel profile with subscriber counts
- GET /users/history       the current user's watch history
"""
from __future__ import annotations

from flask import Blueprint, g
from sqlalchemy import and_, func, select
from sqlalchemy.orm import joinedload

from api.errors import NotFound, ValidationError
from api.responses import respond
from models import storage
from models.schemas.channel import ChannelProfileSchema, WatchedVideoSchema
from models.subscription import Subscription
from models.user import User
from models.video import Video, watch_history
from utils.decorators import jwt_required

bp = Blueprint("channels", __name__)

channel_schema = ChannelProfileSchema()
watched_list_schema = WatchedVideoSchema(many=True)


def channel_profile(username: str, viewer_id: str | None) -> dict | None:
    """
    Profile of the channel named ``username`` with:
    subscribers_count (rows where it is the channel),
    channels_subscribed_to_count (rows where it is the subscriber),
    is_subscribed (``viewer_id`` is one of its subscribers).
    """
    subscribers = (
        select(func.count(Subscription.id))
        .where(Subscription.channel_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    subscribed_to = (
        select(func.count(Subscription.id))
        .where(Subscription.subscriber_id == User.id)
        .correlate(User)
        .scalar_subquery()
    )
    is_subscribed = (
        select(Subscription.id)
        .where(and_(Subscription.channel_id == User.id, Subscription.subscriber_id == viewer_id))
        .correlate(User)
        .exists()
    )

    session = storage.get_session()
    row = (
        session.query(
            User,
            subscribers.label("subscribers_count"),
            subscribed_to.label("channels_subscribed_to_count"),
            is_subscribed.label("is_subscribed"),
        )
        .filter(User.username == username.strip().lower())
        .first()
    )
    if row is None:
        return None

    channel, subscribers_count, subscribed_to_count, subscribed = row
    return {
        "full_name": channel.full_name,
        "username": channel.username,
        "email": channel.email,
        "avatar": channel.avatar,
        "cover_image": channel.cover_image,
        "subscribers_count": subscribers_count or 0,
        "channels_subscribed_to_count": subscribed_to_count or 0,
        "is_subscribed": bool(viewer_id) and bool(subscribed),
    }


def watched_videos(user_id: str) -> list[Video]:
    """Videos the user watched, oldest first, with their owners loaded."""
    session = storage.get_session()
    return (
        session.query(Video)
        .join(watch_history, watch_history.c.video_id == Video.id)
        .filter(watch_history.c.user_id == user_id)
        .options(joinedload(Video.owner))
        .order_by(watch_history.c.watched_at.asc())
        .all()
    )


@bp.get("/c/<username>")
@jwt_required()
def get_channel_profile(username: str):
    """
    Channel profile with subscriber counts
    ---
    tags:
      - Channels
    security:
      - Bearer: []
    parameters:
      -  in: path
         name: username
         type: string
         required: true
    responses:
      200: { description: OK }
      404: { description: Channel does not exist }
    """
    if not username or not username.strip():
        raise ValidationError("username is missing")

    profile = channel_profile(username, g.current_user.id)
    if profile is None:
        raise NotFound("Channel does not exist")
    return respond(channel_schema.dump(profile), "User channel fetched successfully")


@bp.get("/history")
@jwt_required()
def get_watch_history():
    """
    Watch history of the current user
    ---
    tags:
      - Channels
    security:
      - Bearer: []
    responses:
      200: { description: OK }
    """
    videos = watched_videos(g.current_user.id)
    return respond(watched_list_schema.dump(videos), "Watch history fetched successfully")
