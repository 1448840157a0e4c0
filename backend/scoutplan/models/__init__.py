"""SQLAlchemy model package."""

from scoutplan.models.user import User
from scoutplan.models.taxonomy import ActivityType, EducationalArea, EducationalGoal, Sdg
from scoutplan.models.activity import Activity, activity_educational_goal, activity_sdg
from scoutplan.models.program import Program, ProgramEntry

__all__ = [
    "User",
    "ActivityType", "EducationalArea", "EducationalGoal", "Sdg",
    "Activity", "activity_educational_goal", "activity_sdg",
    "Program", "ProgramEntry",
]
