# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User and expertise models.

Users are referenced everywhere else by email. The integer primary key is
assigned in insertion order and is the directory's enumeration order when
several experts match a topic.
"""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    false,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from expertchat.infrastructure.database.models.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    """A registered user, possibly an expert, possibly an admin."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_admin: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False
    )
    is_banned: Mapped[bool] = mapped_column(
        Boolean, default=False, server_default=false(), nullable=False
    )
    banned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    expertise: Mapped[list["UserExpertise"]] = relationship(
        back_populates="user",
        cascade="all, delete-orphan",
        order_by="UserExpertise.position",
        lazy="selectin",
    )

    @property
    def expertise_terms(self) -> list[str]:
        """Declared expertise in the order the user gave it."""
        return [item.term for item in self.expertise]

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"


class UserExpertise(Base):
    """One declared expertise term of a user, stored case-normalized."""

    __tablename__ = "user_expertise"
    __table_args__ = (UniqueConstraint("user_id", "term"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False
    )
    term: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    user: Mapped[User] = relationship(back_populates="expertise")
