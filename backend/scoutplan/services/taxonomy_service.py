"""Taxonomy lookups. Results are plain schemas so they can live in the query cache."""

from typing import List

from sqlalchemy.orm import Session, joinedload

from scoutplan.models.taxonomy import ActivityType, EducationalGoal, Sdg
from scoutplan.schemas.taxonomy import ActivityTypeOut, EducationalGoalOut, SdgOut
from scoutplan.utils.query_cache import QueryCache, query_keys


def list_activity_types(db: Session, cache: QueryCache) -> List[ActivityTypeOut]:
    def load():
        rows = db.query(ActivityType).order_by(ActivityType.name.asc()).all()
        return [ActivityTypeOut.model_validate(row) for row in rows]

    return cache.get_or_load(query_keys.activity_types(), load)


def list_educational_goals(db: Session, cache: QueryCache) -> List[EducationalGoalOut]:
    def load():
        rows = (
            db.query(EducationalGoal)
            .options(joinedload(EducationalGoal.area))
            .order_by(EducationalGoal.code.asc())
            .all()
        )
        return [EducationalGoalOut.model_validate(row) for row in rows]

    return cache.get_or_load(query_keys.educational_goals(), load)


def list_sdgs(db: Session, cache: QueryCache) -> List[SdgOut]:
    def load():
        rows = db.query(Sdg).order_by(Sdg.number.asc()).all()
        return [SdgOut.model_validate(row) for row in rows]

    return cache.get_or_load(query_keys.sdgs(), load)
