"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from app.api.routes.college_routes import router as college_router
from app.api.routes.student_routes import router as student_router
from app.api.routes.verification_routes import achievement_router, project_router
from app.api.routes.application_routes import router as application_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(college_router)
api_router.include_router(student_router)
api_router.include_router(achievement_router)
api_router.include_router(project_router)
api_router.include_router(application_router)
