"""Pydantic schemas for the activity catalogue."""

from pydantic import BaseModel, Field
from typing import List, Literal, Optional
from datetime import datetime

from scoutplan.schemas.program import Pagination
from scoutplan.schemas.taxonomy import ActivityTypeOut, EducationalGoalOut, SdgOut

GroupSize = Literal["small", "medium", "large"]
EffortLevel = Literal["low", "medium", "high"]
Location = Literal["inside", "outside"]
AgeGroup = Literal["cub_scouts", "scouts", "adventurers", "rovers", "leaders"]


class ActivityBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    description: str
    materials: str
    approximate_duration_minutes: int = Field(ge=0)
    group_size: GroupSize
    effort_level: EffortLevel
    location: Location
    age_group: AgeGroup
    image_url: Optional[str] = None


class ActivityCreate(ActivityBase):
    activity_type_id: int
    educational_goal_ids: List[int] = []
    sdg_ids: List[int] = []
    is_approved: bool = True


class ActivityOut(ActivityBase):
    activity_id: int
    created_at: datetime
    activity_type: Optional[ActivityTypeOut] = None
    educational_goals: List[EducationalGoalOut] = []
    sdgs: List[SdgOut] = []

    model_config = {"from_attributes": True}


class ActivityDetailOut(ActivityOut):
    updated_at: Optional[datetime] = None
    is_approved: bool = True


class AppliedFilters(BaseModel):
    search: Optional[str] = None
    group_size: Optional[List[str]] = None
    effort_level: Optional[List[str]] = None
    location: Optional[str] = None
    age_group: Optional[List[str]] = None
    activity_type: Optional[List[int]] = None
    sdgs: Optional[List[int]] = None
    educational_goals: Optional[List[int]] = None
    duration_min: Optional[int] = None
    duration_max: Optional[int] = None
    duration_operator: Optional[str] = None


class AvailableFilters(BaseModel):
    group_sizes: List[str] = []
    effort_levels: List[str] = []
    locations: List[str] = []
    age_groups: List[str] = []
    activity_types: List[int] = []


class ActivityFilters(BaseModel):
    applied: AppliedFilters
    available: AvailableFilters


class ActivityListOut(BaseModel):
    activities: List[ActivityOut]
    pagination: Pagination
    filters: ActivityFilters
