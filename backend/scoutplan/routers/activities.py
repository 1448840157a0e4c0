"""Activities API router. Validates requests and delegates to the service layer."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Literal, Optional
from scoutplan.database import get_db
from scoutplan.schemas.activity import ActivityCreate, ActivityDetailOut, ActivityListOut
from scoutplan.services import activity_service
from scoutplan.middleware.auth_middleware import require_roles
from scoutplan.models.user import User
from scoutplan.utils.query_cache import QueryCache, get_query_cache

router = APIRouter(prefix="/api/activities", tags=["activities"])


@router.get("", response_model=ActivityListOut)
def list_activities(
    search: Optional[str] = None,
    group_size: Optional[str] = None,
    effort_level: Optional[str] = None,
    location: Optional[Literal["inside", "outside"]] = None,
    age_group: Optional[str] = None,
    activity_type: Optional[str] = None,
    sdgs: Optional[str] = None,
    educational_goals: Optional[str] = None,
    duration_min: Optional[int] = Query(default=None, ge=0),
    duration_max: Optional[int] = Query(default=None, ge=0),
    duration_operator: Optional[str] = None,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    sort: Optional[Literal["name", "duration", "created_at"]] = None,
    order: Optional[Literal["asc", "desc"]] = None,
    db: Session = Depends(get_db),
):
    return activity_service.list_activities(
        db,
        search=search,
        group_size=group_size,
        effort_level=effort_level,
        location=location,
        age_group=age_group,
        activity_type=activity_type,
        sdgs=sdgs,
        educational_goals=educational_goals,
        duration_min=duration_min,
        duration_max=duration_max,
        duration_operator=duration_operator,
        page=page,
        limit=limit,
        sort=sort,
        order=order,
    )


@router.post("", response_model=ActivityDetailOut)
def create_activity(
    data: ActivityCreate,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: User = Depends(require_roles("admin")),
):
    return activity_service.create_activity(db, cache, data, current_user)


@router.get("/{activity_id}", response_model=ActivityDetailOut)
def get_activity(
    activity_id: int,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
):
    return activity_service.get_activity(db, cache, activity_id)
