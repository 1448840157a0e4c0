"""Programs API router. Validates requests and delegates to the service layer."""

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from typing import Literal, Optional
from scoutplan.database import get_db
from scoutplan.schemas.program import (
    AddEntryRequest,
    ProgramCreate,
    ProgramDetailOut,
    ProgramListOut,
    ProgramOut,
    ProgramUpdate,
    ReorderRequest,
    ReplaceEntriesRequest,
    ScheduleOut,
)
from scoutplan.services import export_service, program_service
from scoutplan.middleware.auth_middleware import get_current_user, get_optional_user
from scoutplan.models.user import User
from scoutplan.utils.query_cache import QueryCache, get_query_cache

router = APIRouter(prefix="/api/programs", tags=["programs"])


@router.get("", response_model=ProgramListOut)
def list_programs(
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    sort: Optional[Literal["name", "date", "created_at"]] = None,
    order: Optional[Literal["asc", "desc"]] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return program_service.list_programs(db, current_user, page=page, limit=limit, sort=sort, order=order)


@router.post("", response_model=ProgramOut, status_code=201)
def create_program(
    data: ProgramCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return program_service.create_program(db, data, current_user)


@router.get("/{program_id}", response_model=ProgramDetailOut)
def get_program(
    program_id: int,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: Optional[User] = Depends(get_optional_user),
):
    return program_service.get_program_detail(db, cache, program_id, current_user)


@router.put("/{program_id}", response_model=ProgramOut)
def update_program(
    program_id: int,
    data: ProgramUpdate,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: User = Depends(get_current_user),
):
    return program_service.update_program(db, cache, program_id, data, current_user)


@router.delete("/{program_id}")
def delete_program(
    program_id: int,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: User = Depends(get_current_user),
):
    program_service.delete_program(db, cache, program_id, current_user)
    return {"message": "Deleted."}


@router.get("/{program_id}/schedule", response_model=ScheduleOut)
def get_schedule(
    program_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    return program_service.get_schedule(db, program_id, current_user)


@router.put("/{program_id}/entries", response_model=ScheduleOut)
def replace_entries(
    program_id: int,
    data: ReplaceEntriesRequest,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: User = Depends(get_current_user),
):
    return program_service.replace_all_entries(db, cache, program_id, data.entries, current_user)


@router.post("/{program_id}/entries", response_model=ScheduleOut, status_code=201)
def add_entry(
    program_id: int,
    data: AddEntryRequest,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: User = Depends(get_current_user),
):
    return program_service.add_entry(db, cache, program_id, data.entry, current_user, position=data.position)


@router.post("/{program_id}/entries/reorder", response_model=ScheduleOut)
def reorder_entries(
    program_id: int,
    data: ReorderRequest,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: User = Depends(get_current_user),
):
    return program_service.reorder_entries(db, cache, program_id, data, current_user)


@router.delete("/{program_id}/entries/{entry_id}", response_model=ScheduleOut)
def remove_entry(
    program_id: int,
    entry_id: str,
    db: Session = Depends(get_db),
    cache: QueryCache = Depends(get_query_cache),
    current_user: User = Depends(get_current_user),
):
    return program_service.remove_entry(db, cache, program_id, entry_id, current_user)


@router.get("/{program_id}/export.csv")
def export_csv(
    program_id: int,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    filename, csv_text = export_service.export_csv(db, program_id=program_id, current_user=current_user)
    return Response(
        content=csv_text,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
