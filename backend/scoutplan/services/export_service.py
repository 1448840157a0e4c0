"""Program export service (CSV)."""

import csv
import io
import re
from typing import Optional

from sqlalchemy.orm import Session

from scoutplan.models.activity import Activity
from scoutplan.models.taxonomy import ActivityType
from scoutplan.models.user import User
from scoutplan.services import program_service

HEADER = [
    "#",
    "Start Time",
    "End Time",
    "Type",
    "Title",
    "Duration (min)",
    "Group Size",
    "Effort Level",
    "Location",
    "Activity Type",
]


def export_filename(program_name: str, program_id: int) -> str:
    slug = re.sub(r"[^A-Za-z0-9]+", "_", program_name or "").strip("_").lower()
    return f"program_{slug or program_id}.csv"


def export_csv(db: Session, *, program_id: int, current_user: Optional[User]) -> tuple[str, str]:
    """Return ``(filename, csv_text)`` for the recomputed schedule of a program."""
    program = program_service.get_viewable_program(db, program_id, current_user)
    schedule = program_service.get_schedule(db, program_id, current_user)

    entries = {entry.id: entry for entry in program_service.load_entries(db, program_id)}
    activity_ids = [
        entry.activity_id for entry in entries.values()
        if entry.entry_type == "activity" and entry.activity_id is not None
    ]
    details = {}
    if activity_ids:
        rows = (
            db.query(Activity, ActivityType.name)
            .outerjoin(ActivityType, ActivityType.activity_type_id == Activity.activity_type_id)
            .filter(Activity.activity_id.in_(activity_ids))
            .all()
        )
        details = {activity.activity_id: (activity, type_name) for activity, type_name in rows}

    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["Program", program.name])
    writer.writerow(["Date", program.date.isoformat() if program.date else ""])
    writer.writerow(["Start Time", schedule.start_time])
    writer.writerow(["End Time", schedule.summary.end_time or schedule.start_time])
    writer.writerow(["Total Duration (min)", schedule.summary.total_duration_minutes])
    writer.writerow([])
    writer.writerow(HEADER)
    for row in schedule.rows:
        entry = entries.get(row.entry_id)
        activity, type_name = details.get(getattr(entry, "activity_id", None), (None, None))
        writer.writerow([
            row.position + 1,
            row.start_time,
            row.end_time,
            row.entry_type,
            row.title,
            row.duration_minutes,
            activity.group_size if activity else "",
            activity.effort_level if activity else "",
            activity.location if activity else "",
            type_name or "",
        ])
    return export_filename(program.name, program.program_id), output.getvalue()
