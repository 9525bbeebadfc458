"""
Application Service - lifecycle of job applications.

    pending ──► shortlisted ──► accepted
       │             │
       ├──► rejected ◄┘
       └──► withdrawn   (student only)

accepted / rejected / withdrawn are terminal. Recruiters may only touch
applications to opportunities they posted. Every status write is a
compare-and-set on the status we validated against, so two recruiters
racing cannot move an application out of a terminal state.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional, Tuple, List, Union

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import Conflict, Forbidden, InvalidTransition, NotFound, ValidationError
from app.models.status import ApplicationStatus, Role, can_transition
from app.services.matching_service import MatchScorer, compute_match_score
from app.services.mongo_service import (
    ApplicationRepository,
    OpportunityRepository,
    Page,
    paginate,
    populate,
    to_object_id,
)

logger = logging.getLogger(__name__)

SORT_OPTIONS = {
    "appliedAt": [("appliedAt", -1), ("_id", -1)],
    "matchScore": [("matchScore", -1), ("appliedAt", -1), ("_id", -1)],
}

APPLICANT_PROJECTION = {
    "firstName": 1, "lastName": 1, "email": 1, "profilePicture": 1,
    "enrollmentNumber": 1, "collegeId": 1, "isVerifiedByCollege": 1, "skills": 1,
}
OPPORTUNITY_PROJECTION = {"title": 1, "type": 1, "location": 1, "recruiterId": 1}


def parse_application_status(status: Union[str, ApplicationStatus]) -> ApplicationStatus:
    try:
        return ApplicationStatus(status)
    except ValueError:
        raise ValidationError(f"Invalid application status: {status!r}")


class ApplicationService:
    """
    Application lifecycle engine.

    `scorer` computes matchScore at creation time; swap it in tests or for
    a smarter ranking without touching the state machine.
    """

    def __init__(self, db: AsyncIOMotorDatabase, scorer: MatchScorer = compute_match_score):
        self.db = db
        self.scorer = scorer
        self.applications = ApplicationRepository(db)
        self.opportunities = OpportunityRepository(db)

    async def _load(self, application_id) -> dict:
        application = await self.applications.get_by_id(to_object_id(application_id, "application id"))
        if application is None:
            raise NotFound("Application not found")
        return application

    async def _check_recruiter_ownership(self, recruiter: dict, application: dict) -> dict:
        opportunity = await self.opportunities.get_by_id(application["opportunityId"])
        if opportunity is None:
            raise NotFound("Opportunity not found")
        if opportunity.get("recruiterId") != recruiter["_id"]:
            logger.warning(
                f"Recruiter {recruiter['_id']} denied application {application['_id']}"
            )
            raise Forbidden("Application belongs to another recruiter's opportunity")
        return opportunity

    async def _transition(self, application: dict, new: ApplicationStatus, actor: Role) -> dict:
        current = ApplicationStatus(application["status"])
        if not can_transition(current, new, actor):
            raise InvalidTransition(
                f"Cannot change application status from '{current.value}' to '{new.value}'"
            )

        updated = await self.applications.compare_and_set_status(application["_id"], current, new)
        if updated is None:
            latest = await self._load(application["_id"])
            raise InvalidTransition(
                f"Application status changed to '{latest['status']}' by another request"
            )

        logger.info(
            f"Application {application['_id']} {current.value} -> {new.value} by {actor.value}"
        )
        return updated

    async def update_status(self, recruiter: dict, application_id, new_status) -> dict:
        """Recruiter-driven status change. Writes nothing but `status`."""
        new = parse_application_status(new_status)
        application = await self._load(application_id)
        await self._check_recruiter_ownership(recruiter, application)
        return await self._transition(application, new, Role.recruiter)

    async def get_application(self, recruiter: dict, application_id) -> dict:
        application = await self._load(application_id)
        await self._check_recruiter_ownership(recruiter, application)

        await asyncio.gather(
            populate(self.db, [application], "studentId", "students", APPLICANT_PROJECTION),
            populate(self.db, [application], "opportunityId", "opportunities"),
        )
        if application.get("studentId"):
            await populate(self.db, [application["studentId"]], "skills", "skills")
        return application

    async def list_applications(
        self,
        recruiter: dict,
        status: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort: str = "appliedAt"
    ) -> Tuple[List[dict], int, Page]:
        """
        Applications to the recruiter's opportunities.

        Args:
            status: exact status filter, None for all
            sort: "appliedAt" (newest first) or "matchScore" (best first)
        """
        if sort not in SORT_OPTIONS:
            raise ValidationError(f"Unknown sort '{sort}'")
        window = paginate(page, limit)

        opportunity_ids = await self.opportunities.ids_for_recruiter(recruiter["_id"])
        query = {"opportunityId": {"$in": opportunity_ids}}
        if status:
            query["status"] = parse_application_status(status).value

        total, applications = await asyncio.gather(
            self.applications.count(query),
            self.applications.find(query, sort=SORT_OPTIONS[sort], page=window),
        )
        await asyncio.gather(
            populate(self.db, applications, "studentId", "students", APPLICANT_PROJECTION),
            populate(self.db, applications, "opportunityId", "opportunities", OPPORTUNITY_PROJECTION),
        )
        return applications, total, window

    # ------------------------------------------------------------
    # Student side
    # ------------------------------------------------------------

    async def create_application(
        self,
        student: dict,
        opportunity_id,
        resume_url: Optional[str] = None,
        cover_letter: Optional[str] = None
    ) -> dict:
        """Apply to an opportunity; one live application per opportunity."""
        opportunity_id = to_object_id(opportunity_id, "opportunity id")
        opportunity = await self.opportunities.get_by_id(opportunity_id)
        if opportunity is None:
            raise NotFound("Opportunity not found")

        if await self.applications.find_active(student["_id"], opportunity_id):
            raise Conflict()

        application = await self.applications.insert({
            "studentId": student["_id"],
            "opportunityId": opportunity_id,
            "status": ApplicationStatus.pending.value,
            "matchScore": self.scorer(student.get("skills", []), opportunity.get("skills", [])),
            "resumeUrl": resume_url,
            "coverLetter": cover_letter,
            "appliedAt": datetime.utcnow(),
        })
        logger.info(
            f"Student {student['_id']} applied to opportunity {opportunity_id} "
            f"(matchScore={application['matchScore']})"
        )
        return application

    async def withdraw_application(self, student: dict, application_id) -> dict:
        application = await self._load(application_id)
        if application["studentId"] != student["_id"]:
            raise Forbidden("Application belongs to another student")
        return await self._transition(application, ApplicationStatus.withdrawn, Role.student)
