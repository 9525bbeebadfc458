"""
Verification Routes

PATCH /achievements/{achievement_id}/verify - body {"status": "verified" | "rejected"}
PATCH /projects/{project_id}/verify         - body {"status": "verified" | "rejected"}
"""

from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.auth import get_current_college
from app.db.mongodb import get_database
from app.schemas.schemas import VerificationDecision
from app.services.verification_service import VerificationService
from app.utils.helpers import format_response

achievement_router = APIRouter(prefix="/achievements", tags=["Verification"])
project_router = APIRouter(prefix="/projects", tags=["Verification"])


@achievement_router.patch("/{achievement_id}/verify")
async def verify_achievement(
    achievement_id: str,
    decision: VerificationDecision,
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Verify or reject an achievement."""
    result = await VerificationService(db).set_achievement_status(
        college, achievement_id, decision.status
    )
    return format_response(True, result, f"Achievement {result['verificationStatus']}")


@project_router.patch("/{project_id}/verify")
async def verify_project(
    project_id: str,
    decision: VerificationDecision,
    college: dict = Depends(get_current_college),
    db: AsyncIOMotorDatabase = Depends(get_database)
):
    """Verify or reject a project."""
    result = await VerificationService(db).set_project_status(
        college, project_id, decision.status
    )
    return format_response(True, result, f"Project {result['verificationStatus']}")
