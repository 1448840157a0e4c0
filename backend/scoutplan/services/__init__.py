"""Service layer package."""

from scoutplan.services import (
    auth_service,
    schedule_service,
    activity_service,
    taxonomy_service,
    program_service,
    export_service,
)
