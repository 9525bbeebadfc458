"""
Verification Service

Colleges vouch for three things about a student:
1. Enrollment       -> students.isVerifiedByCollege
2. Achievements     -> achievements.verificationStatus / verifiedBy
3. Projects         -> projects.verificationStatus / verifiedBy

OWNERSHIP RULE (same for all three):
A college may act on a student whose collegeId is unset or equals its own
id. Anything else is Forbidden, never NotFound.

Each operation touches one target document after an ownership read. Two
colleges racing on the same item resolve last-write-wins; we log it and
move on.
"""

import asyncio
import logging
from typing import Union

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import Forbidden, NotFound, ValidationError
from app.models.status import VerificationStatus, VERIFICATION_DECISIONS
from app.services.mongo_service import (
    StudentRepository,
    AchievementRepository,
    ProjectRepository,
    CredentialRepository,
    populate,
    to_object_id,
)

logger = logging.getLogger(__name__)


def check_student_ownership(college: dict, student: dict) -> None:
    """Raise Forbidden if `student` is enrolled at a different college."""
    college_id = student.get("collegeId")
    if college_id is not None and college_id != college["_id"]:
        logger.warning(
            f"College {college['_id']} denied access to student {student['_id']} "
            f"of college {college_id}"
        )
        raise Forbidden("Student does not belong to your college")


def parse_decision(status: Union[str, VerificationStatus]) -> VerificationStatus:
    """Accept only `verified` or `rejected` from callers."""
    try:
        decision = VerificationStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid verification status: {status!r}")
    if decision not in VERIFICATION_DECISIONS:
        raise ValidationError("Status must be 'verified' or 'rejected'")
    return decision


class VerificationService:
    """
    Verification state machine for students, achievements and projects.
    """

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.students = StudentRepository(db)
        self.achievements = AchievementRepository(db)
        self.projects = ProjectRepository(db)

    async def _load_student(self, student_id: ObjectId) -> dict:
        student = await self.students.get_by_id(student_id)
        if student is None:
            raise NotFound("Student not found")
        return student

    async def verify_student(self, college: dict, student_id) -> dict:
        """
        Verify a student's enrollment.

        First verification also establishes affiliation (collegeId).
        Verifying twice is a no-op success.

        Returns:
            {"_id", "isVerifiedByCollege"} only
        """
        student_id = to_object_id(student_id, "student id")
        student = await self._load_student(student_id)
        check_student_ownership(college, student)

        if not await self.students.mark_verified(student_id, college["_id"]):
            # Changed between our read and write; re-check and try once more
            current = await self._load_student(student_id)
            check_student_ownership(college, current)
            if not await self.students.mark_verified(student_id, college["_id"]):
                raise NotFound("Student not found")

        logger.info(f"College {college['_id']} verified student {student_id}")
        return {"_id": str(student_id), "isVerifiedByCollege": True}

    async def _set_credential_status(
        self,
        repository: CredentialRepository,
        kind: str,
        college: dict,
        credential_id,
        status
    ) -> dict:
        decision = parse_decision(status)
        credential_id = to_object_id(credential_id, f"{kind} id")

        credential = await repository.get_by_id(credential_id)
        if credential is None:
            raise NotFound(f"{kind.capitalize()} not found")

        student = await self._load_student(credential["studentId"])
        check_student_ownership(college, student)

        before = await repository.set_status(credential_id, decision, college["_id"])
        if before is None:
            raise NotFound(f"{kind.capitalize()} not found")

        previous = before.get("verificationStatus")
        if previous != credential.get("verificationStatus"):
            logger.warning(
                f"Concurrent verification on {kind} {credential_id}: "
                f"{credential.get('verificationStatus')} -> {previous} "
                f"overwritten with {decision.value}"
            )
        logger.info(
            f"College {college['_id']} set {kind} {credential_id} "
            f"{previous} -> {decision.value}"
        )

        return {
            "_id": str(credential_id),
            "verificationStatus": decision.value,
            "verifiedBy": str(college["_id"]) if decision == VerificationStatus.verified else None,
        }

    async def set_achievement_status(self, college: dict, achievement_id, status) -> dict:
        """Verify or reject an achievement of one of the college's students."""
        return await self._set_credential_status(
            self.achievements, "achievement", college, achievement_id, status
        )

    async def set_project_status(self, college: dict, project_id, status) -> dict:
        """Verify or reject a project; stored status is always canonical."""
        return await self._set_credential_status(
            self.projects, "project", college, project_id, status
        )

    async def get_student_profile(self, college: dict, student_id) -> dict:
        """Full student profile (skills, projects, achievements) for review."""
        student_id = to_object_id(student_id, "student id")
        student = await self._load_student(student_id)
        check_student_ownership(college, student)

        newest_first = [("createdAt", -1), ("_id", -1)]
        _, projects, achievements = await asyncio.gather(
            populate(self.db, [student], "skills", "skills"),
            self.projects.find({"studentId": student_id}, sort=newest_first),
            self.achievements.find({"studentId": student_id}, sort=newest_first),
        )

        student["projects"] = projects
        student["achievements"] = achievements
        return student
