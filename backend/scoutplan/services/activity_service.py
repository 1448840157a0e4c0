"""Activity catalogue service: filtered listing, detail, creation and duration lookups."""

import logging
import math
import operator
from typing import Dict, Iterable, List, Optional

from fastapi import HTTPException
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from scoutplan.config import settings
from scoutplan.models.activity import Activity
from scoutplan.models.taxonomy import ActivityType, EducationalGoal, Sdg
from scoutplan.models.user import User
from scoutplan.schemas.activity import (
    ActivityCreate,
    ActivityDetailOut,
    ActivityFilters,
    ActivityListOut,
    ActivityOut,
    AppliedFilters,
    AvailableFilters,
)
from scoutplan.schemas.program import Pagination
from scoutplan.utils.helpers import parse_int_list, split_csv_param
from scoutplan.utils.query_cache import QueryCache, query_keys

logger = logging.getLogger(__name__)

DURATION_OPERATORS = {
    ">=": operator.ge,
    "<=": operator.le,
    "=": operator.eq,
    ">": operator.gt,
    "<": operator.lt,
}

SORT_COLUMNS = {
    "name": Activity.name,
    "duration": Activity.approximate_duration_minutes,
    "created_at": Activity.created_at,
}


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _search_condition(search: str):
    term = _escape_like(search.strip())
    # Single words match from the start of a field; phrases match anywhere.
    pattern = f"%{term}%" if " " in term else f"{term}%"
    return or_(
        Activity.name.ilike(pattern, escape="\\"),
        Activity.description.ilike(pattern, escape="\\"),
        Activity.materials.ilike(pattern, escape="\\"),
    )


def _with_details(query):
    return query.options(
        joinedload(Activity.activity_type),
        selectinload(Activity.educational_goals).joinedload(EducationalGoal.area),
        selectinload(Activity.sdgs),
    )


def _distinct(values: Iterable) -> List:
    seen = []
    for value in values:
        if value is not None and value not in seen:
            seen.append(value)
    return seen


def list_activities(
    db: Session,
    *,
    search: Optional[str] = None,
    group_size: Optional[str] = None,
    effort_level: Optional[str] = None,
    location: Optional[str] = None,
    age_group: Optional[str] = None,
    activity_type: Optional[str] = None,
    sdgs: Optional[str] = None,
    educational_goals: Optional[str] = None,
    duration_min: Optional[int] = None,
    duration_max: Optional[int] = None,
    duration_operator: Optional[str] = None,
    page: int = 1,
    limit: Optional[int] = None,
    sort: Optional[str] = None,
    order: Optional[str] = None,
) -> ActivityListOut:
    if duration_operator and duration_operator not in DURATION_OPERATORS:
        raise HTTPException(
            status_code=400,
            detail=f"duration_operator must be one of: {', '.join(DURATION_OPERATORS)}",
        )

    applied = AppliedFilters(
        search=search.strip() if search and search.strip() else None,
        group_size=split_csv_param(group_size),
        effort_level=split_csv_param(effort_level),
        location=location or None,
        age_group=split_csv_param(age_group),
        activity_type=parse_int_list(split_csv_param(activity_type)),
        sdgs=parse_int_list(split_csv_param(sdgs)),
        educational_goals=parse_int_list(split_csv_param(educational_goals)),
        duration_min=duration_min,
        duration_max=duration_max,
        duration_operator=duration_operator,
    )

    q = db.query(Activity).filter(Activity.is_approved == True)  # noqa: E712
    if applied.search:
        q = q.filter(_search_condition(applied.search))
    if applied.group_size:
        q = q.filter(Activity.group_size.in_(applied.group_size))
    if applied.effort_level:
        q = q.filter(Activity.effort_level.in_(applied.effort_level))
    if applied.location:
        q = q.filter(Activity.location == applied.location)
    if applied.age_group:
        q = q.filter(Activity.age_group.in_(applied.age_group))
    if applied.activity_type:
        q = q.filter(Activity.activity_type_id.in_(applied.activity_type))
    if applied.sdgs:
        q = q.filter(Activity.sdgs.any(Sdg.sdg_id.in_(applied.sdgs)))
    if applied.educational_goals:
        q = q.filter(Activity.educational_goals.any(EducationalGoal.goal_id.in_(applied.educational_goals)))

    duration = Activity.approximate_duration_minutes
    if duration_min is not None and duration_max is not None:
        q = q.filter(duration >= duration_min, duration <= duration_max)
    elif duration_min is not None:
        q = q.filter(DURATION_OPERATORS[duration_operator or ">="](duration, duration_min))
    elif duration_max is not None:
        q = q.filter(DURATION_OPERATORS[duration_operator or "<="](duration, duration_max))

    page = max(int(page or 1), 1)
    limit = min(max(int(limit or settings.ACTIVITIES_DEFAULT_PAGE_SIZE), 1), settings.ACTIVITIES_MAX_PAGE_SIZE)

    total = q.count()
    sort_column = SORT_COLUMNS.get(sort or "name", Activity.name)
    ordering = sort_column.desc() if order == "desc" else sort_column.asc()
    rows = (
        _with_details(q)
        .order_by(ordering, Activity.activity_id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    activities = [ActivityOut.model_validate(row) for row in rows]

    available = AvailableFilters(
        group_sizes=_distinct(a.group_size for a in activities),
        effort_levels=_distinct(a.effort_level for a in activities),
        locations=_distinct(a.location for a in activities),
        age_groups=_distinct(a.age_group for a in activities),
        activity_types=_distinct(a.activity_type.activity_type_id for a in activities if a.activity_type),
    )
    return ActivityListOut(
        activities=activities,
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
        ),
        filters=ActivityFilters(applied=applied, available=available),
    )


def get_activity(db: Session, cache: QueryCache, activity_id: int) -> ActivityDetailOut:
    key = query_keys.activity_detail(activity_id)
    detail = cache.get(key)
    if detail is None:
        row = _with_details(db.query(Activity)).filter(Activity.activity_id == activity_id).first()
        if not row:
            raise HTTPException(status_code=404, detail="Activity not found.")
        detail = ActivityDetailOut.model_validate(row)
        cache.set(key, detail)
    return detail


def create_activity(db: Session, cache: QueryCache, data: ActivityCreate, current_user: User) -> ActivityDetailOut:
    payload = data.model_dump()
    goal_ids = payload.pop("educational_goal_ids") or []
    sdg_ids = payload.pop("sdg_ids") or []

    if not db.query(ActivityType).filter(ActivityType.activity_type_id == payload["activity_type_id"]).first():
        raise HTTPException(status_code=400, detail="Unknown activity type.")
    goals = db.query(EducationalGoal).filter(EducationalGoal.goal_id.in_(goal_ids)).all() if goal_ids else []
    if len(goals) != len(set(goal_ids)):
        raise HTTPException(status_code=400, detail="Unknown educational goal id.")
    sdg_rows = db.query(Sdg).filter(Sdg.sdg_id.in_(sdg_ids)).all() if sdg_ids else []
    if len(sdg_rows) != len(set(sdg_ids)):
        raise HTTPException(status_code=400, detail="Unknown SDG id.")

    activity = Activity(**payload, created_by=current_user.user_id)
    activity.educational_goals = goals
    activity.sdgs = sdg_rows
    db.add(activity)
    db.commit()
    db.refresh(activity)
    cache.invalidate(query_keys.activities())
    logger.info("[activities] created activity_id=%s by user_id=%s", activity.activity_id, current_user.user_id)
    return get_activity(db, cache, activity.activity_id)


def load_activity_durations(db: Session, activity_ids: Iterable[Optional[int]]) -> Dict[int, int]:
    """Map activity id -> approximate duration for the ids that still exist."""
    ids = {activity_id for activity_id in activity_ids if activity_id is not None}
    if not ids:
        return {}
    rows = (
        db.query(Activity.activity_id, Activity.approximate_duration_minutes)
        .filter(Activity.activity_id.in_(ids))
        .all()
    )
    return {int(row[0]): int(row[1] or 0) for row in rows}
