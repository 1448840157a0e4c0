"""Program service layer. Owns program CRUD and the persistence of entry lists.

Entry lists are always written as a whole: every edit (replace, add, remove,
reorder, start-time change) renumbers the list, recomputes the schedule and
replaces all stored entries of the program inside one transaction.
"""

import logging
import math
import uuid
from typing import Dict, List, Optional, Sequence, Set, Tuple

from fastapi import HTTPException
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from scoutplan.config import settings
from scoutplan.models.activity import Activity
from scoutplan.models.program import Program, ProgramEntry
from scoutplan.models.taxonomy import ActivityType
from scoutplan.models.user import User
from scoutplan.schemas.program import (
    ActivityEntry,
    CustomEntry,
    EntryActivityOut,
    Pagination,
    ProgramCreate,
    ProgramDetailOut,
    ProgramEntryIn,
    ProgramEntryOut,
    ProgramListItem,
    ProgramListOut,
    ProgramOwnerOut,
    ProgramSummary,
    ProgramUpdate,
    ReorderRequest,
    ScheduledEntry,
    ScheduleOut,
    ScheduleRowOut,
    WriteResult,
)
from scoutplan.services.activity_service import load_activity_durations
from scoutplan.services.schedule_service import (
    ScheduleEditor,
    compute_schedule,
    renumber,
    reorder,
    total_duration,
)
from scoutplan.utils.permissions import can_edit_program, can_view_program
from scoutplan.utils.query_cache import QueryCache, query_keys

logger = logging.getLogger(__name__)

PROGRAM_SORT_COLUMNS = {
    "name": Program.name,
    "date": Program.date,
    "created_at": Program.created_at,
}

REMOVED_ACTIVITY_TITLE = "(removed activity)"


def get_program(db: Session, program_id: int) -> Program:
    program = db.query(Program).filter(Program.program_id == program_id).first()
    if not program:
        raise HTTPException(status_code=404, detail="Program not found.")
    return program


def get_viewable_program(db: Session, program_id: int, current_user: Optional[User]) -> Program:
    program = get_program(db, program_id)
    if not can_view_program(program, current_user):
        raise HTTPException(status_code=404, detail="Program not found.")
    return program


def get_editable_program(db: Session, program_id: int, current_user: User) -> Program:
    program = get_program(db, program_id)
    if not can_edit_program(program, current_user):
        raise HTTPException(status_code=404, detail="Program not found or access denied.")
    return program


def list_programs(
    db: Session,
    current_user: User,
    *,
    page: int = 1,
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> ProgramListOut:
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or settings.PROGRAMS_DEFAULT_PAGE_SIZE), 1), 100)

    total = db.query(Program).filter(Program.user_id == current_user.user_id).count()

    duration_expr = case(
        (ProgramEntry.entry_type == "activity", Activity.approximate_duration_minutes),
        (ProgramEntry.entry_type == "custom", ProgramEntry.custom_duration_minutes),
        else_=0,
    )
    sort_column = PROGRAM_SORT_COLUMNS.get(sort or "name", Program.name)
    ordering = sort_column.desc() if order == "desc" else sort_column.asc()
    rows = (
        db.query(
            Program,
            func.count(ProgramEntry.entry_id).label("entry_count"),
            func.coalesce(func.sum(duration_expr), 0).label("total_duration_minutes"),
        )
        .outerjoin(ProgramEntry, ProgramEntry.program_id == Program.program_id)
        .outerjoin(Activity, Activity.activity_id == ProgramEntry.activity_id)
        .filter(Program.user_id == current_user.user_id)
        .group_by(Program.program_id)
        .order_by(ordering, Program.program_id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )

    items = []
    for program, entry_count, total_minutes in rows:
        item = ProgramListItem.model_validate(program)
        item.entry_count = int(entry_count or 0)
        item.total_duration_minutes = int(total_minutes or 0)
        items.append(item)

    return ProgramListOut(
        programs=items,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        ),
    )


def create_program(db: Session, data: ProgramCreate, current_user: User) -> Program:
    program = Program(**data.model_dump(), user_id=current_user.user_id)
    db.add(program)
    db.commit()
    db.refresh(program)
    logger.info("[programs] created program_id=%s user_id=%s", program.program_id, current_user.user_id)
    return program


def update_program(
    db: Session,
    cache: QueryCache,
    program_id: int,
    data: ProgramUpdate,
    current_user: User,
) -> Program:
    program = get_editable_program(db, program_id, current_user)
    payload = data.model_dump()
    start_changed = payload["start_time"] != program.start_time
    for k, v in payload.items():
        setattr(program, k, v)
    try:
        if start_changed:
            # Stored entry times are derived from the start time, so the new
            # start and the shifted entries are committed together.
            db.flush()
            try:
                _persist(db, program, load_entries(db, program.program_id))
            except HTTPException:
                db.rollback()
                raise
        else:
            db.commit()
    finally:
        cache.invalidate(query_keys.program_detail(program_id))
    db.refresh(program)
    return program


def delete_program(db: Session, cache: QueryCache, program_id: int, current_user: User) -> None:
    program = get_editable_program(db, program_id, current_user)
    db.delete(program)
    db.commit()
    cache.invalidate(query_keys.program_detail(program_id))
    logger.info("[programs] deleted program_id=%s", program_id)


def _to_entry(row: ProgramEntry) -> ProgramEntryIn:
    if row.entry_type == "custom":
        return CustomEntry(
            id=row.entry_id,
            position=row.position,
            custom_title=row.custom_title or "",
            custom_duration_minutes=row.custom_duration_minutes,
        )
    return ActivityEntry(id=row.entry_id, position=row.position, activity_id=row.activity_id)


def _to_row(program_id: int, scheduled: ScheduledEntry) -> ProgramEntry:
    entry = scheduled.entry
    is_activity = entry.entry_type == "activity"
    return ProgramEntry(
        entry_id=entry.id or str(uuid.uuid4()),
        program_id=program_id,
        position=entry.position,
        start_time=scheduled.start_time,
        end_time=scheduled.end_time,
        entry_type=entry.entry_type,
        activity_id=entry.activity_id if is_activity else None,
        custom_title=None if is_activity else entry.custom_title,
        custom_duration_minutes=None if is_activity else entry.custom_duration_minutes,
    )


def _with_ids(entries: Sequence[ProgramEntryIn], owned_ids: Set[str]) -> List[ProgramEntryIn]:
    # entry_id is a global key; ids from other programs get a fresh one.
    return [
        entry if entry.id in owned_ids else entry.model_copy(update={"id": str(uuid.uuid4())})
        for entry in entries
    ]


def _owned_entry_ids(db: Session, program_id: int) -> Set[str]:
    rows = db.query(ProgramEntry.entry_id).filter(ProgramEntry.program_id == program_id).all()
    return {row[0] for row in rows}


def load_entries(db: Session, program_id: int) -> List[ProgramEntryIn]:
    rows = (
        db.query(ProgramEntry)
        .filter(ProgramEntry.program_id == program_id)
        .order_by(ProgramEntry.position.asc())
        .all()
    )
    return [_to_entry(row) for row in rows]


def build_schedule(db: Session, program: Program, entries: Sequence[ProgramEntryIn]) -> List[ScheduledEntry]:
    lookup = load_activity_durations(db, (e.activity_id for e in entries if e.entry_type == "activity"))
    try:
        return compute_schedule(entries, program.start_time, lookup)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


def replace_entries(db: Session, program_id: int, scheduled: Sequence[ScheduledEntry]) -> WriteResult:
    """Swap the stored entries of a program for ``scheduled`` in one transaction."""
    try:
        for row in db.query(ProgramEntry).filter(ProgramEntry.program_id == program_id).all():
            db.delete(row)
        db.flush()
        db.add_all([_to_row(program_id, item) for item in scheduled])
        db.query(Program).filter(Program.program_id == program_id).update(
            {Program.updated_at: func.now()}, synchronize_session=False
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("[programs] replacing entries failed for program_id=%s", program_id)
        return WriteResult(ok=False, error=str(exc))
    return WriteResult(ok=True)


def _persist(db: Session, program: Program, entries: Sequence[ProgramEntryIn]) -> List[ScheduledEntry]:
    program_id = program.program_id
    start_time = program.start_time
    stored = load_entries(db, program_id)
    editor = ScheduleEditor(stored)
    editor.apply(renumber(entries))

    scheduled: List[ScheduledEntry] = []

    def writer(pending: List[ProgramEntryIn]) -> WriteResult:
        lookup = load_activity_durations(db, (e.activity_id for e in pending if e.entry_type == "activity"))
        scheduled[:] = compute_schedule(pending, start_time, lookup)
        return replace_entries(db, program_id, scheduled)

    result = editor.save(writer)
    if not result.ok:
        raise HTTPException(status_code=500, detail="Failed to save program entries.")
    return scheduled


def _validate_entries(db: Session, entries: Sequence[ProgramEntryIn]) -> None:
    """Reject activity entries without an activity or pointing at unknown ones."""
    if any(e.entry_type == "activity" and e.activity_id is None for e in entries):
        raise HTTPException(status_code=400, detail="activity_id is required for activity entries.")
    _assert_activities_exist(db, entries)


def _assert_activities_exist(db: Session, entries: Sequence[ProgramEntryIn]) -> None:
    wanted = {e.activity_id for e in entries if e.entry_type == "activity" and e.activity_id is not None}
    if not wanted:
        return
    found = set(load_activity_durations(db, wanted))
    missing = sorted(wanted - found)
    if missing:
        raise HTTPException(status_code=400, detail=f"Unknown activity id(s): {', '.join(map(str, missing))}")


def replace_all_entries(
    db: Session,
    cache: QueryCache,
    program_id: int,
    entries: Sequence[ProgramEntryIn],
    current_user: User,
) -> ScheduleOut:
    program = get_editable_program(db, program_id, current_user)
    ids = [e.id for e in entries if e.id]
    if len(ids) != len(set(ids)):
        raise HTTPException(status_code=400, detail="Duplicate entry ids.")
    _validate_entries(db, entries)

    owned_ids = _owned_entry_ids(db, program_id)
    ordered = sorted(_with_ids(entries, owned_ids), key=lambda e: e.position)
    scheduled = _persist(db, program, ordered)
    cache.invalidate(query_keys.program_detail(program_id))
    return _schedule_out(db, program, scheduled)


def add_entry(
    db: Session,
    cache: QueryCache,
    program_id: int,
    entry: ProgramEntryIn,
    current_user: User,
    position: Optional[int] = None,
) -> ScheduleOut:
    program = get_editable_program(db, program_id, current_user)
    _validate_entries(db, [entry])

    entries = load_entries(db, program_id)
    new_entry = entry.model_copy(update={"id": str(uuid.uuid4())})
    if position is None or position >= len(entries):
        entries.append(new_entry)
    else:
        entries.insert(max(position, 0), new_entry)
    scheduled = _persist(db, program, entries)
    cache.invalidate(query_keys.program_detail(program_id))
    return _schedule_out(db, program, scheduled)


def remove_entry(
    db: Session,
    cache: QueryCache,
    program_id: int,
    entry_id: str,
    current_user: User,
) -> ScheduleOut:
    program = get_editable_program(db, program_id, current_user)
    entries = load_entries(db, program_id)
    remaining = [e for e in entries if e.id != entry_id]
    if len(remaining) == len(entries):
        raise HTTPException(status_code=404, detail="Entry not found.")
    scheduled = _persist(db, program, remaining)
    cache.invalidate(query_keys.program_detail(program_id))
    return _schedule_out(db, program, scheduled)


def reorder_entries(
    db: Session,
    cache: QueryCache,
    program_id: int,
    data: ReorderRequest,
    current_user: User,
) -> ScheduleOut:
    program = get_editable_program(db, program_id, current_user)
    entries = load_entries(db, program_id)
    moved = reorder(entries, data.entry_id, data.from_index, data.to_index)
    if moved == entries:
        return _schedule_out(db, program, build_schedule(db, program, entries))
    scheduled = _persist(db, program, moved)
    cache.invalidate(query_keys.program_detail(program_id))
    return _schedule_out(db, program, scheduled)


def _activity_titles(db: Session, entries: Sequence[ProgramEntryIn]) -> Dict[int, str]:
    ids = {e.activity_id for e in entries if e.entry_type == "activity" and e.activity_id is not None}
    if not ids:
        return {}
    rows = db.query(Activity.activity_id, Activity.name).filter(Activity.activity_id.in_(ids)).all()
    return {int(row[0]): row[1] for row in rows}


def entry_title(entry: ProgramEntryIn, titles: Dict[int, str]) -> str:
    if entry.entry_type == "custom":
        return entry.custom_title
    return titles.get(entry.activity_id, REMOVED_ACTIVITY_TITLE)


def _summary(scheduled: Sequence[ScheduledEntry]) -> ProgramSummary:
    return ProgramSummary(
        total_duration_minutes=total_duration(scheduled),
        entry_count=len(scheduled),
        end_time=scheduled[-1].end_time if scheduled else None,
    )


def _schedule_out(db: Session, program: Program, scheduled: Sequence[ScheduledEntry]) -> ScheduleOut:
    titles = _activity_titles(db, [row.entry for row in scheduled])
    return ScheduleOut(
        program_id=program.program_id,
        start_time=program.start_time,
        rows=[
            ScheduleRowOut(
                entry_id=row.entry.id,
                position=row.entry.position,
                entry_type=row.entry.entry_type,
                title=entry_title(row.entry, titles),
                start_time=row.start_time,
                end_time=row.end_time,
                duration_minutes=row.duration_minutes,
            )
            for row in scheduled
        ],
        summary=_summary(scheduled),
    )


def get_schedule(db: Session, program_id: int, current_user: Optional[User]) -> ScheduleOut:
    program = get_viewable_program(db, program_id, current_user)
    return _schedule_out(db, program, build_schedule(db, program, load_entries(db, program_id)))


def _load_detail(db: Session, program: Program) -> ProgramDetailOut:
    rows: List[Tuple[ProgramEntry, Optional[Activity], Optional[ActivityType]]] = (
        db.query(ProgramEntry, Activity, ActivityType)
        .outerjoin(Activity, Activity.activity_id == ProgramEntry.activity_id)
        .outerjoin(ActivityType, ActivityType.activity_type_id == Activity.activity_type_id)
        .filter(ProgramEntry.program_id == program.program_id)
        .order_by(ProgramEntry.position.asc())
        .all()
    )
    entries_out = []
    for entry, activity, activity_type in rows:
        activity_out = None
        if activity is not None:
            activity_out = EntryActivityOut(
                activity_id=activity.activity_id,
                name=activity.name,
                approximate_duration_minutes=activity.approximate_duration_minutes or 0,
                group_size=activity.group_size,
                effort_level=activity.effort_level,
                location=activity.location,
                activity_type_name=activity_type.name if activity_type else None,
            )
        entries_out.append(
            ProgramEntryOut(
                entry_id=entry.entry_id,
                position=entry.position,
                start_time=entry.start_time,
                end_time=entry.end_time,
                entry_type=entry.entry_type,
                activity_id=entry.activity_id,
                custom_title=entry.custom_title,
                custom_duration_minutes=entry.custom_duration_minutes,
                activity=activity_out,
            )
        )

    scheduled = build_schedule(db, program, [_to_entry(entry) for entry, _, _ in rows])
    owner = program.owner
    return ProgramDetailOut.model_validate(
        {
            "program_id": program.program_id,
            "user_id": program.user_id,
            "name": program.name,
            "date": program.date,
            "start_time": program.start_time,
            "is_public": program.is_public,
            "created_at": program.created_at,
            "updated_at": program.updated_at,
            "owner": ProgramOwnerOut(user_id=owner.user_id, name=owner.name) if owner else None,
            "entries": entries_out,
            "summary": _summary(scheduled),
        }
    )


def get_program_detail(
    db: Session,
    cache: QueryCache,
    program_id: int,
    current_user: Optional[User],
) -> ProgramDetailOut:
    key = query_keys.program_detail(program_id)
    detail = cache.get(key)
    if detail is None:
        program = get_program(db, program_id)
        detail = _load_detail(db, program)
        cache.set(key, detail)
    if not can_view_program(detail, current_user):
        raise HTTPException(status_code=404, detail="Program not found.")
    return detail
