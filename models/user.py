"""
User: identity and credential record.

Password hashing is explicit (set_password) and never tied to a generic save,
so updating other fields cannot re-hash an already hashed value.
"""
from __future__ import annotations

import models
from models.base_model import Base, BaseModel
from models.video import watch_history
from sqlalchemy import Column, String, Text, or_
from sqlalchemy.orm import relationship
from utils.security import hash_password, verify_password


class User(BaseModel, Base):
    __tablename__ = "users"

    username = Column(String(64), nullable=False, unique=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False, index=True)
    avatar = Column(String(1024), nullable=False)  # hosted media URL
    cover_image = Column(String(1024), nullable=True, default="")
    password_hash = Column(String(255), nullable=False)
    # At most one active refresh token; any other value fails refresh
    refresh_token = Column(Text, nullable=True)

    watch_history = relationship(
        "Video",
        secondary=watch_history,
        order_by=watch_history.c.watched_at,
        lazy="select",
    )
    videos = relationship("Video", back_populates="owner", foreign_keys="Video.owner_id")

    def __init__(self, *args, **kwargs):
        for key in ("username", "email", "full_name"):
            if isinstance(kwargs.get(key), str):
                kwargs[key] = kwargs[key].strip()
        for key in ("username", "email"):
            if isinstance(kwargs.get(key), str):
                kwargs[key] = kwargs[key].lower()
        super().__init__(*args, **kwargs)

    @property
    def password(self):
        raise AttributeError("Password: Write-only field")

    @staticmethod
    def find_by_identity(username: str | None = None, email: str | None = None) -> "User | None":
        """Return the user matching either identity (case-insensitive), or None."""
        clauses = []
        if username and username.strip():
            clauses.append(User.username == username.strip().lower())
        if email and email.strip():
            clauses.append(User.email == email.strip().lower())
        if not clauses:
            return None
        session = models.storage.get_session()
        return session.query(User).filter(or_(*clauses)).first()

    def is_password_correct(self, password: str) -> bool:
        if not password or not self.password_hash:
            return False
        return verify_password(password, self.password_hash)

    def set_password(self, password: str) -> None:
        """Replace the stored hash; the caller persists the change."""
        self.password_hash = hash_password(password)

    def set_refresh_token(self, token: str | None) -> None:
        User.store_refresh_token(self.id, token)

    @staticmethod
    def store_refresh_token(user_id: str, token: str | None) -> int:
        """
        Persist the active refresh token with a single-column UPDATE.
        Other columns are not written, so pending edits elsewhere on the
        record cannot block this write. Returns the number of rows matched.
        """
        session = models.storage.get_session()
        matched = session.query(User).filter(User.id == user_id).update(
            {User.refresh_token: token}, synchronize_session="evaluate"
        )
        models.storage.save()
        return matched
