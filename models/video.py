from sqlalchemy import (
    Column,
    String,
    Integer,
    Float,
    Boolean,
    Text,
    DateTime,
    ForeignKey,
    Table,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from models.base_model import BaseModel, Base

# Videos a user has watched, with the time they were watched (CASCADE on both sides)
watch_history = Table(
    "watch_history",
    Base.metadata,
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("video_id", String(36), ForeignKey("videos.id", ondelete="CASCADE"), primary_key=True),
    Column("watched_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
)


class Video(BaseModel, Base):
    __tablename__ = "videos"

    owner_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    video_file = Column(String(1024), nullable=False)  # hosted media URL
    thumbnail = Column(String(1024), nullable=False)
    duration = Column(Float, nullable=False, default=0)
    views = Column(Integer, nullable=False, default=0)
    is_published = Column(Boolean, nullable=False, default=True)

    owner = relationship("User", back_populates="videos", foreign_keys=[owner_id])

    __table_args__ = (
        CheckConstraint("views >= 0", name="ck_videos_views_nonnegative"),
    )
