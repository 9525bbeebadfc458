"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Field names are camelCase to match the stored documents.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional

from app.models.status import VerificationStatus, ApplicationStatus


# ============================================================
# COLLEGE SCHEMAS
# ============================================================

class AddressUpdate(BaseModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    pincode: Optional[str] = Field(None, pattern=r"^[0-9]{6}$")


class CollegeUpdate(BaseModel):
    # Unknown keys (including verified/code) are dropped, not rejected
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    website: Optional[str] = None
    description: Optional[str] = None
    logo: Optional[str] = None
    address: Optional[AddressUpdate] = None


class DashboardStatsResponse(BaseModel):
    totalStudents: int
    verifiedStudents: int
    pendingVerifications: int
    verifiedAchievements: int


# ============================================================
# VERIFICATION SCHEMAS
# ============================================================

class VerificationDecision(BaseModel):
    status: VerificationStatus


# ============================================================
# APPLICATION SCHEMAS
# ============================================================

class ApplicationCreate(BaseModel):
    opportunityId: str
    resumeUrl: Optional[str] = None
    coverLetter: Optional[str] = Field(None, max_length=5000)


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus

