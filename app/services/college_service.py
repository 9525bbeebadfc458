"""
College Service - directory, own profile and student roster.
"""

import asyncio
import logging
from typing import Optional, Tuple, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import Forbidden, NotFound, ValidationError
from app.services.mongo_service import (
    CollegeRepository,
    StudentRepository,
    Page,
    paginate,
    populate,
    to_object_id,
)

logger = logging.getLogger(__name__)

# Clients cannot grant themselves platform verification or change their code
PROTECTED_FIELDS = ("verified", "code", "userId", "_id", "createdAt", "updatedAt")


def flatten_update(changes: dict, prefix: str = "") -> dict:
    """{"address": {"city": "X"}} -> {"address.city": "X"} so partial updates keep siblings."""
    flat = {}
    for key, value in changes.items():
        path = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(flatten_update(value, f"{path}."))
        else:
            flat[path] = value
    return flat


class CollegeService:

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.colleges = CollegeRepository(db)
        self.students = StudentRepository(db)

    async def list_colleges(
        self,
        verified: bool = False,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Tuple[List[dict], int, Page]:
        """
        Public college directory.

        With `search`, results are ranked by text relevance; otherwise
        alphabetical by name.
        """
        window = paginate(page, limit)
        query = {}
        if verified:
            query["verified"] = True

        projection = dict(CollegeRepository.PUBLIC_PROJECTION)
        if search:
            query["$text"] = {"$search": search}
            projection["score"] = {"$meta": "textScore"}
            sort = [("score", {"$meta": "textScore"})]
        else:
            sort = [("name", 1), ("_id", 1)]

        total, colleges = await asyncio.gather(
            self.colleges.count(query),
            self.colleges.find(query, sort=sort, page=window, projection=projection),
        )
        return colleges, total, window

    async def get_college(self, college_id) -> dict:
        college = await self.colleges.get_by_id(
            to_object_id(college_id, "college id"),
            CollegeRepository.PUBLIC_PROJECTION
        )
        if college is None:
            raise NotFound("College not found")
        return college

    async def get_own_profile(self, college: dict) -> dict:
        return await self.get_college(college["_id"])

    async def update_own_profile(self, college: dict, changes: dict) -> dict:
        """Partial self-update; `verified` and `code` are always dropped."""
        changes = {k: v for k, v in changes.items() if k not in PROTECTED_FIELDS}
        if not changes:
            raise ValidationError("No fields to update")

        updated = await self.colleges.update_fields(college["_id"], flatten_update(changes))
        if updated is None:
            raise NotFound("College not found")
        logger.info(f"College {college['_id']} updated fields {sorted(changes)}")
        return updated

    async def list_students(
        self,
        college: dict,
        college_id,
        page: Optional[int] = None,
        limit: Optional[int] = None
    ) -> Tuple[List[dict], int, Page]:
        """Roster of the caller's own college, sorted by enrollment number."""
        if to_object_id(college_id, "college id") != college["_id"]:
            raise Forbidden("You can only view your own college's students")

        window = paginate(page, limit)
        query = {"collegeId": college["_id"]}
        total, students = await asyncio.gather(
            self.students.count(query),
            self.students.find(
                query,
                sort=[("enrollmentNumber", 1), ("_id", 1)],
                page=window,
                projection=StudentRepository.ROSTER_PROJECTION
            ),
        )
        await populate(self.db, students, "skills", "skills")
        return students, total, window
