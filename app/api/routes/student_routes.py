"""
Student Routes

GET /students/{student_id} - Full profile for the student's college
"""

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.auth import get_current_college
from app.db.mongodb import get_database
from app.services.verification_service import VerificationService
from app.utils.helpers import format_response

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/{student_id}")
async def get_student_profile(
    student_id: str,
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Student with skills, projects and achievements (newest first)."""
    profile = await VerificationService(db).get_student_profile(college, student_id)
    return format_response(True, profile, "Student profile retrieved successfully")
