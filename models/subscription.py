from sqlalchemy import Column, String, ForeignKey, UniqueConstraint, CheckConstraint

from models.base_model import BaseModel, Base


class Subscription(BaseModel, Base):
    """A subscriber following a channel; both sides are users."""

    __tablename__ = "subscriptions"

    subscriber_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    channel_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("subscriber_id", "channel_id", name="uq_subscriptions_pair"),
        CheckConstraint("subscriber_id <> channel_id", name="ck_subscriptions_not_self"),
    )
