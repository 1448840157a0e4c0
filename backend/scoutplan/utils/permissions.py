"""Role and ownership checks shared by routers and services."""

from typing import Optional

from scoutplan.models.program import Program
from scoutplan.models.user import User


ADMIN = "admin"
USER = "user"

ALL_ROLES = (ADMIN, USER)


def is_admin(user: Optional[User]) -> bool:
    return user is not None and user.role == ADMIN


def is_program_owner(program: Program, user: Optional[User]) -> bool:
    return user is not None and program.user_id == user.user_id


def can_view_program(program: Program, user: Optional[User]) -> bool:
    # Public programs are readable by anyone, including anonymous callers.
    if program.is_public:
        return True
    return is_program_owner(program, user)


def can_edit_program(program: Program, user: Optional[User]) -> bool:
    return is_program_owner(program, user)
