"""
Ownership Resolver

Maps an authenticated principal to the one profile document it owns:

    college   -> colleges.userId
    student   -> students.userId
    recruiter -> recruiters.userId

Called on every request; profile data can change between requests so the
result is never cached.
"""

import logging

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import Forbidden, ProfileNotFound
from app.models.principal import Principal
from app.models.status import Role
from app.services.mongo_service import (
    CollegeRepository,
    StudentRepository,
    RecruiterRepository,
)

logger = logging.getLogger(__name__)

_REPOSITORIES = {
    Role.college: CollegeRepository,
    Role.student: StudentRepository,
    Role.recruiter: RecruiterRepository,
}


async def resolve_owner(db: AsyncIOMotorDatabase, principal: Principal, required_role: Role) -> dict:
    """
    Return the profile document owned by `principal` for `required_role`.

    Raises:
        Forbidden: principal has a different role
        ProfileNotFound: no profile of that role belongs to the principal
    """
    if principal.role != required_role:
        logger.warning(
            f"User {principal.user_id} with role {principal.role.value} "
            f"denied {required_role.value} route"
        )
        raise Forbidden(f"{required_role.value.capitalize()} accounts only")

    label = f"{required_role.value.capitalize()} profile not found"
    try:
        user_id = ObjectId(principal.user_id)
    except (InvalidId, TypeError):
        raise ProfileNotFound(label)

    owner = await _REPOSITORIES[required_role](db).get_by_user(user_id)
    if owner is None:
        raise ProfileNotFound(label)
    return owner
