"""
Pending Queue Service

Builds a college's "needs review" view:

    achievements: {data, total, page, limit}
    projects:     {data, total, page, limit}

The two lists are paginated independently (separate panes in the UI), so
they are never merged into one page. Counts and fetches for both lists
run concurrently; totals may lag the rows by an interleaved write.
"""

import asyncio
from typing import List

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.services.mongo_service import (
    StudentRepository,
    AchievementRepository,
    ProjectRepository,
    CredentialRepository,
    Page,
    paginate,
    populate,
)

# Newest first; _id breaks createdAt ties so pages never overlap
QUEUE_SORT = [("createdAt", -1), ("_id", -1)]


class PendingQueueService:

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.students = StudentRepository(db)
        self.achievements = AchievementRepository(db)
        self.projects = ProjectRepository(db)

    async def _enrich(self, rows: List[dict]) -> List[dict]:
        """Join student display fields and skill documents onto each row."""
        await asyncio.gather(
            populate(self.db, rows, "studentId", "students", StudentRepository.DISPLAY_PROJECTION),
            populate(self.db, rows, "skills", "skills"),
        )
        return rows

    async def _fetch(self, repository: CredentialRepository, query: dict, page: Page) -> List[dict]:
        rows = await repository.find(query, sort=QUEUE_SORT, page=page)
        return await self._enrich(rows)

    async def list_pending(self, college: dict, page: int = None, limit: int = None) -> dict:
        """
        Pending achievements and projects for students of `college`.

        Projects count as pending when verificationStatus is "pending",
        missing, or null.
        """
        window = paginate(page, limit)
        student_ids: List[ObjectId] = await self.students.ids_for_college(college["_id"])

        achievements_query = self.achievements.pending_for_students(student_ids)
        projects_query = self.projects.pending_for_students(student_ids)

        achievements_total, projects_total, achievements, projects = await asyncio.gather(
            self.achievements.count(achievements_query),
            self.projects.count(projects_query),
            self._fetch(self.achievements, achievements_query, window),
            self._fetch(self.projects, projects_query, window),
        )

        return {
            "achievements": {
                "data": achievements,
                "total": achievements_total,
                "page": window.page,
                "limit": window.limit,
            },
            "projects": {
                "data": projects,
                "total": projects_total,
                "page": window.page,
                "limit": window.limit,
            },
        }
