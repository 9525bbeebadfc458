"""
Application Routes

Recruiter:
GET   /applications                  - Applications to my opportunities
GET   /applications/{id}             - Single application
PATCH /applications/{id}/status      - Move through the status table

Student:
POST  /applications                  - Apply to an opportunity
PATCH /applications/{id}/withdraw    - Withdraw a pending application
"""

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from app.core.auth import get_current_recruiter, get_current_student
from app.db.mongodb import get_database
from app.schemas.schemas import ApplicationCreate, ApplicationStatusUpdate
from app.services.application_service import ApplicationService
from app.utils.helpers import format_response, format_pagination_response

router = APIRouter(prefix="/applications", tags=["Applications"])


@router.get("")
async def list_applications(
    status: Optional[str] = Query(None, description="Exact status, or 'all'"),
    sort: str = Query("appliedAt", description="appliedAt | matchScore"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    recruiter: dict = Depends(get_current_recruiter),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Applications received, newest first unless sorted by match score."""
    if status == "all":
        status = None
    applications, total, window = await ApplicationService(db).list_applications(
        recruiter, status=status, page=page, limit=limit, sort=sort
    )
    return format_response(
        True,
        format_pagination_response(applications, total, window),
        "Applications retrieved successfully"
    )


@router.post("", status_code=201)
async def create_application(
    data: ApplicationCreate,
    student: dict = Depends(get_current_student),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Apply to an opportunity. matchScore is computed here, once."""
    application = await ApplicationService(db).create_application(
        student, data.opportunityId, resume_url=data.resumeUrl, cover_letter=data.coverLetter
    )
    return format_response(True, application, "Application submitted successfully")


@router.get("/{application_id}")
async def get_application(
    application_id: str,
    recruiter: dict = Depends(get_current_recruiter),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    application = await ApplicationService(db).get_application(recruiter, application_id)
    return format_response(True, application, "Application retrieved successfully")


@router.patch("/{application_id}/status")
async def update_application_status(
    application_id: str,
    update: ApplicationStatusUpdate,
    recruiter: dict = Depends(get_current_recruiter),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Update status of a job application."""
    application = await ApplicationService(db).update_status(
        recruiter, application_id, update.status
    )
    return format_response(True, application, f"Status updated to '{update.status.value}'")


@router.patch("/{application_id}/withdraw")
async def withdraw_application(
    application_id: str,
    student: dict = Depends(get_current_student),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    application = await ApplicationService(db).withdraw_application(student, application_id)
    return format_response(True, application, "Application withdrawn")
