"""
Dashboard Service - headline numbers for a college.

Five independent counts issued together. If any one fails the whole call
fails; a dashboard showing a silent zero is worse than an error.
"""

import asyncio

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.services.mongo_service import (
    StudentRepository,
    AchievementRepository,
    ProjectRepository,
)


async def get_dashboard_stats(db: AsyncIOMotorDatabase, college: dict) -> dict:
    """
    Returns:
        {totalStudents, verifiedStudents, pendingVerifications, verifiedAchievements}

    pendingVerifications is pending achievements + pending projects; the
    pending queue endpoint has the breakdown.
    """
    students = StudentRepository(db)
    achievements = AchievementRepository(db)
    projects = ProjectRepository(db)

    college_id = college["_id"]
    student_ids = await students.ids_for_college(college_id)

    (
        total_students,
        verified_students,
        pending_achievements,
        pending_projects,
        verified_achievements,
    ) = await asyncio.gather(
        students.count({"collegeId": college_id}),
        students.count({"collegeId": college_id, "isVerifiedByCollege": True}),
        achievements.count(achievements.pending_for_students(student_ids)),
        projects.count(projects.pending_for_students(student_ids)),
        achievements.count(achievements.verified_by_query(college_id)),
    )

    return {
        "totalStudents": total_students,
        "verifiedStudents": verified_students,
        "pendingVerifications": pending_achievements + pending_projects,
        "verifiedAchievements": verified_achievements,
    }
