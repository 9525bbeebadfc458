"""
College Routes

GET   /colleges                               - Directory (verified filter, text search)
GET   /colleges/profile                       - Own profile
PATCH /colleges/profile                       - Update own profile
GET   /colleges/stats                         - Dashboard counts
GET   /colleges/verifications/pending         - Pending achievements & projects
POST  /colleges/verify-student/{student_id}   - Verify enrollment
GET   /colleges/students/{student_id}         - Student profile (alias of /students/{id})
GET   /colleges/{college_id}/students         - Student roster
GET   /colleges/{college_id}                  - Single college
"""

from fastapi import APIRouter, Depends, Query
from motor.motor_asyncio import AsyncIOMotorDatabase
from typing import Optional

from app.core.auth import get_current_college
from app.db.mongodb import get_database
from app.schemas.schemas import CollegeUpdate, DashboardStatsResponse
from app.services.college_service import CollegeService
from app.services.dashboard_service import get_dashboard_stats
from app.services.pending_queue_service import PendingQueueService
from app.services.verification_service import VerificationService
from app.utils.helpers import format_response, format_pagination_response

router = APIRouter(prefix="/colleges", tags=["Colleges"])


@router.get("")
async def list_colleges(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    verified: Optional[bool] = Query(None, description="Only platform-verified colleges"),
    search: Optional[str] = Query(None, description="Full text search"),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """List colleges. Search results are ranked by relevance, otherwise by name."""
    colleges, total, window = await CollegeService(db).list_colleges(
        verified=bool(verified), search=search, page=page, limit=limit
    )
    return format_response(
        True,
        format_pagination_response(colleges, total, window),
        "Colleges retrieved successfully"
    )


@router.get("/profile")
async def get_profile(
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Get current college's profile."""
    profile = await CollegeService(db).get_own_profile(college)
    return format_response(True, profile, "Profile retrieved successfully")


@router.patch("/profile")
async def update_profile(
    data: CollegeUpdate,
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Update own profile. `verified` and `code` cannot be changed here."""
    updated = await CollegeService(db).update_own_profile(
        college, data.model_dump(exclude_unset=True)
    )
    return format_response(True, updated, "Profile updated successfully")


@router.get("/stats")
async def dashboard_stats(
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Student and verification counts for the dashboard."""
    stats = DashboardStatsResponse(**await get_dashboard_stats(db, college))
    return format_response(True, stats.model_dump(), "Dashboard stats retrieved successfully")


@router.get("/verifications/pending")
async def pending_verifications(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Pending achievements and projects, each paginated on its own."""
    queue = await PendingQueueService(db).list_pending(college, page=page, limit=limit)
    return format_response(True, queue, "Pending verifications retrieved successfully")


@router.post("/verify-student/{student_id}")
async def verify_student(
    student_id: str,
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Verify a student's enrollment. Unaffiliated students join this college."""
    result = await VerificationService(db).verify_student(college, student_id)
    return format_response(True, result, "Student verified successfully")


@router.get("/students/{student_id}")
async def student_profile(
    student_id: str,
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Same profile as GET /students/{student_id}, under the college prefix."""
    profile = await VerificationService(db).get_student_profile(college, student_id)
    return format_response(True, profile, "Student profile retrieved successfully")


@router.get("/{college_id}/students")
async def college_students(
    college_id: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Paginated roster with skills, sorted by enrollment number."""
    students, total, window = await CollegeService(db).list_students(
        college, college_id, page=page, limit=limit
    )
    return format_response(
        True,
        format_pagination_response(students, total, window),
        "Students retrieved successfully"
    )


@router.get("/{college_id}")
async def get_college(college_id: str, db: AsyncIOMotorDatabase = Depends(get_database)):
    """Get a single college."""
    college = await CollegeService(db).get_college(college_id)
    return format_response(True, college, "College retrieved successfully")
