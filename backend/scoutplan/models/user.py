"""SQLAlchemy model for application users."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime
from sqlalchemy.orm import relationship, validates
from sqlalchemy.sql import func
from scoutplan.database import Base


def normalize_email(value: str) -> str:
    return (value or "").strip().lower()


class User(Base):
    __tablename__ = "users"

    user_id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)  # stored lowercase
    name = Column(String(100), nullable=False)
    image = Column(String(500))
    role = Column(String(20), nullable=False, default="user")  # user/admin
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    programs = relationship("Program", back_populates="owner", cascade="all, delete-orphan")
    activities_created = relationship("Activity", back_populates="creator")

    @validates("email")
    def _normalize_email(self, key, value):
        return normalize_email(value)
