"""Taxonomies API router."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from scoutplan.database import get_db
from scoutplan.schemas.taxonomy import ActivityTypeOut, EducationalGoalOut, SdgOut
from scoutplan.services import taxonomy_service
from scoutplan.utils.query_cache import QueryCache, get_query_cache

router = APIRouter(prefix="/api/taxonomies", tags=["taxonomies"])


@router.get("/activity-types", response_model=List[ActivityTypeOut])
def list_activity_types(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)):
    return taxonomy_service.list_activity_types(db, cache)


@router.get("/educational-goals", response_model=List[EducationalGoalOut])
def list_educational_goals(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)):
    return taxonomy_service.list_educational_goals(db, cache)


@router.get("/sdgs", response_model=List[SdgOut])
def list_sdgs(db: Session = Depends(get_db), cache: QueryCache = Depends(get_query_cache)):
    return taxonomy_service.list_sdgs(db, cache)
