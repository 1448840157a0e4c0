"""Request/response contracts for programs and their entries."""

from pydantic import BaseModel, Field, field_validator
from typing import Annotated, List, Literal, Optional, Union
import datetime as dt

from scoutplan.config import settings
from scoutplan.utils.helpers import normalize_clock


class ActivityEntry(BaseModel):
    """Entry that references a catalogue activity; duration comes from the activity."""

    entry_type: Literal["activity"] = "activity"
    id: Optional[str] = None
    position: int = 0
    activity_id: Optional[int] = None


class CustomEntry(BaseModel):
    """Free-form block with its own title and duration."""

    entry_type: Literal["custom"] = "custom"
    id: Optional[str] = None
    position: int = 0
    custom_title: str
    custom_duration_minutes: Optional[int] = Field(default=None, ge=0)


ProgramEntryIn = Annotated[Union[ActivityEntry, CustomEntry], Field(discriminator="entry_type")]


class ScheduledEntry(BaseModel):
    entry: ProgramEntryIn
    start_time: str
    end_time: str
    duration_minutes: int


class WriteResult(BaseModel):
    ok: bool
    error: Optional[str] = None


class ProgramBase(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    date: Optional[dt.date] = None
    start_time: str
    is_public: bool = False

    @field_validator("start_time")
    @classmethod
    def _normalize_start_time(cls, value: str) -> str:
        return normalize_clock(value)


class ProgramCreate(ProgramBase):
    start_time: str = settings.DEFAULT_PROGRAM_START_TIME


class ProgramUpdate(ProgramBase):
    pass


class ProgramOut(ProgramBase):
    program_id: int
    user_id: int
    created_at: dt.datetime
    updated_at: Optional[dt.datetime]

    model_config = {"from_attributes": True}


class ProgramListItem(ProgramOut):
    entry_count: int = 0
    total_duration_minutes: int = 0


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int


class ProgramListOut(BaseModel):
    programs: List[ProgramListItem]
    pagination: Pagination


class EntryActivityOut(BaseModel):
    activity_id: int
    name: str
    approximate_duration_minutes: int
    group_size: str
    effort_level: str
    location: str
    activity_type_name: Optional[str] = None


class ProgramEntryOut(BaseModel):
    entry_id: str
    position: int
    start_time: str
    end_time: str
    entry_type: str
    activity_id: Optional[int] = None
    custom_title: Optional[str] = None
    custom_duration_minutes: Optional[int] = None
    activity: Optional[EntryActivityOut] = None


class ProgramSummary(BaseModel):
    total_duration_minutes: int
    entry_count: int
    end_time: Optional[str] = None


class ProgramOwnerOut(BaseModel):
    user_id: int
    name: str


class ProgramDetailOut(ProgramOut):
    owner: Optional[ProgramOwnerOut] = None
    entries: List[ProgramEntryOut] = []
    summary: ProgramSummary


class ScheduleRowOut(BaseModel):
    entry_id: Optional[str]
    position: int
    entry_type: str
    title: str
    start_time: str
    end_time: str
    duration_minutes: int


class ScheduleOut(BaseModel):
    program_id: int
    start_time: str
    rows: List[ScheduleRowOut]
    summary: ProgramSummary


class ReplaceEntriesRequest(BaseModel):
    entries: List[ProgramEntryIn]


class AddEntryRequest(BaseModel):
    entry: ProgramEntryIn
    position: Optional[int] = Field(default=None, ge=0)


class ReorderRequest(BaseModel):
    entry_id: str
    from_index: int = Field(ge=0)
    to_index: int = Field(ge=0)
