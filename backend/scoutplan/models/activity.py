"""Activity catalogue models."""

from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, ForeignKey, Index, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from scoutplan.database import Base

GROUP_SIZES = ("small", "medium", "large")
EFFORT_LEVELS = ("low", "medium", "high")
LOCATIONS = ("inside", "outside")
AGE_GROUPS = ("cub_scouts", "scouts", "adventurers", "rovers", "leaders")


activity_educational_goal = Table(
    "activity_educational_goal",
    Base.metadata,
    Column("activity_id", Integer, ForeignKey("activity.activity_id", ondelete="CASCADE"), primary_key=True),
    Column("goal_id", Integer, ForeignKey("educational_goal.goal_id", ondelete="CASCADE"), primary_key=True),
)

activity_sdg = Table(
    "activity_sdg",
    Base.metadata,
    Column("activity_id", Integer, ForeignKey("activity.activity_id", ondelete="CASCADE"), primary_key=True),
    Column("sdg_id", Integer, ForeignKey("sdg.sdg_id", ondelete="CASCADE"), primary_key=True),
)


class Activity(Base):
    __tablename__ = "activity"

    activity_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    materials = Column(Text, nullable=False)
    approximate_duration_minutes = Column(Integer, nullable=False)
    group_size = Column(String(20), nullable=False)  # small/medium/large
    effort_level = Column(String(20), nullable=False)  # low/medium/high
    location = Column(String(20), nullable=False)  # inside/outside
    age_group = Column(String(20), nullable=False)
    activity_type_id = Column(Integer, ForeignKey("activity_type.activity_type_id"), nullable=False)
    image_url = Column(String(500))
    created_by = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    is_approved = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    activity_type = relationship("ActivityType", back_populates="activities")
    creator = relationship("User", back_populates="activities_created")
    educational_goals = relationship("EducationalGoal", secondary=activity_educational_goal)
    sdgs = relationship("Sdg", secondary=activity_sdg, order_by="Sdg.number")

    __table_args__ = (
        Index("idx_activity_approved_name", "is_approved", "name"),
        Index("idx_activity_duration", "approximate_duration_minutes"),
    )
