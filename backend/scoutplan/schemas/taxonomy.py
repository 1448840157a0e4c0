"""Pydantic schemas for the activity taxonomies."""

from pydantic import BaseModel
from typing import Optional


class ActivityTypeOut(BaseModel):
    activity_type_id: int
    name: str
    description: Optional[str] = None

    model_config = {"from_attributes": True}


class EducationalAreaOut(BaseModel):
    area_id: int
    name: str
    icon: str
    code: str

    model_config = {"from_attributes": True}


class EducationalGoalOut(BaseModel):
    goal_id: int
    title: str
    code: str
    description: Optional[str] = None
    area: Optional[EducationalAreaOut] = None

    model_config = {"from_attributes": True}


class SdgOut(BaseModel):
    sdg_id: int
    number: int
    name: str
    icon_url: str

    model_config = {"from_attributes": True}
