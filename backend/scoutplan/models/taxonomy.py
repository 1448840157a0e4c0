"""Taxonomy tables used to classify activities."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from scoutplan.database import Base


class ActivityType(Base):
    __tablename__ = "activity_type"

    activity_type_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())

    activities = relationship("Activity", back_populates="activity_type")


class EducationalArea(Base):
    __tablename__ = "educational_area"

    area_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    icon = Column(String(50), nullable=False)
    code = Column(String(30), unique=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    goals = relationship("EducationalGoal", back_populates="area", cascade="all, delete-orphan")


class EducationalGoal(Base):
    __tablename__ = "educational_goal"

    goal_id = Column(Integer, primary_key=True, autoincrement=True)
    area_id = Column(Integer, ForeignKey("educational_area.area_id", ondelete="CASCADE"), nullable=False)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    code = Column(String(30), unique=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    area = relationship("EducationalArea", back_populates="goals")


class Sdg(Base):
    __tablename__ = "sdg"

    sdg_id = Column(Integer, primary_key=True, autoincrement=True)
    number = Column(Integer, unique=True, nullable=False)  # 1-17
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    icon_url = Column(String(500), nullable=False)
    created_at = Column(DateTime, server_default=func.now())
