"""
HTTP-level tests: status codes, error codes and the response envelope.
"""
import pytest
from bson import ObjectId

from app import main
from app.services.mongo_service import ProjectRepository
from tests.factories import (
    MISSING,
    auth_header,
    create_achievement,
    create_application,
    create_college,
    create_opportunity,
    create_project,
    create_recruiter,
    create_student,
)

pytestmark = pytest.mark.asyncio


# ============================================================
# AUTH / OWNERSHIP
# ============================================================

async def test_missing_token_is_unauthorized(client):
    response = await client.get("/api/colleges/stats")

    assert response.status_code == 401
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error"]["code"] == "UNAUTHORIZED"


async def test_garbage_token_is_unauthorized(client):
    response = await client.get(
        "/api/colleges/stats", headers={"Authorization": "Bearer not-a-jwt"}
    )

    assert response.status_code == 401


async def test_principal_without_profile_is_profile_not_found(client):
    ghost = {"userId": ObjectId()}

    response = await client.get("/api/colleges/stats", headers=auth_header(ghost, "college"))

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "PROFILE_NOT_FOUND"


async def test_wrong_role_is_forbidden(client, db):
    student = await create_student(db)

    response = await client.get("/api/colleges/stats", headers=auth_header(student, "student"))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


# ============================================================
# COLLEGES
# ============================================================

async def test_public_directory_is_paginated(client, db):
    for name in ("A", "B", "C"):
        await create_college(db, name=f"College {name}")

    response = await client.get("/api/colleges", params={"page": 2, "limit": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert "error" not in body
    assert [c["name"] for c in body["data"]["data"]] == ["College C"]
    assert body["data"]["pagination"] == {"page": 2, "limit": 2, "total": 3, "totalPages": 2}


async def test_stats_envelope(client, db):
    college = await create_college(db)
    await create_student(db, college_id=college["_id"], verified=True)

    response = await client.get("/api/colleges/stats", headers=auth_header(college, "college"))

    assert response.status_code == 200
    assert response.json()["data"] == {
        "totalStudents": 1,
        "verifiedStudents": 1,
        "pendingVerifications": 0,
        "verifiedAchievements": 0,
    }


async def _broken_count(self, query):
    raise RuntimeError("projects collection unavailable")


async def test_store_failure_returns_500_envelope(client, db, monkeypatch):
    college = await create_college(db)
    monkeypatch.setattr(ProjectRepository, "count", _broken_count)

    response = await client.get("/api/colleges/stats", headers=auth_header(college, "college"))

    assert response.status_code == 500
    assert response.headers["content-type"] == "application/json"
    assert response.json() == {
        "success": False,
        "data": None,
        "message": "Internal server error",
        "error": {"code": "INTERNAL_ERROR"},
    }


async def test_pending_queue_store_failure_returns_500_envelope(client, db, monkeypatch):
    college = await create_college(db)
    monkeypatch.setattr(ProjectRepository, "count", _broken_count)

    response = await client.get(
        "/api/colleges/verifications/pending", headers=auth_header(college, "college")
    )

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "INTERNAL_ERROR"


async def test_debug_mode_exposes_error_message(client, db, monkeypatch):
    college = await create_college(db)
    monkeypatch.setattr(ProjectRepository, "count", _broken_count)
    monkeypatch.setattr(main.settings, "debug", True)

    response = await client.get("/api/colleges/stats", headers=auth_header(college, "college"))

    assert response.status_code == 500
    assert response.json()["message"] == "projects collection unavailable"


async def test_profile_update_ignores_verified(client, db):
    college = await create_college(db, name="Old")

    response = await client.patch(
        "/api/colleges/profile",
        json={"name": "New", "verified": True},
        headers=auth_header(college, "college"),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["name"] == "New"
    assert data["verified"] is False
    assert data["_id"] == str(college["_id"])


async def test_profile_update_bad_pincode_is_validation_error(client, db):
    college = await create_college(db)

    response = await client.patch(
        "/api/colleges/profile",
        json={"address": {"pincode": "12AB"}},
        headers=auth_header(college, "college"),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_pending_queue_lists_project_without_status(client, db):
    college = await create_college(db)
    student = await create_student(db, college_id=college["_id"])
    project = await create_project(db, student["_id"], status=MISSING)
    await create_achievement(db, student["_id"])

    response = await client.get(
        "/api/colleges/verifications/pending", headers=auth_header(college, "college")
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert [p["_id"] for p in data["projects"]["data"]] == [str(project["_id"])]
    assert data["projects"]["data"][0]["verificationStatus"] == "pending"
    assert data["achievements"]["total"] == 1


async def test_verify_student(client, db):
    college = await create_college(db)
    student = await create_student(db)

    response = await client.post(
        f"/api/colleges/verify-student/{student['_id']}", headers=auth_header(college, "college")
    )

    assert response.status_code == 200
    assert response.json()["data"] == {"_id": str(student["_id"]), "isVerifiedByCollege": True}


async def test_verify_student_malformed_id(client, db):
    college = await create_college(db)

    response = await client.post(
        "/api/colleges/verify-student/not-an-id", headers=auth_header(college, "college")
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_roster_of_other_college_is_forbidden(client, db):
    college = await create_college(db)
    other = await create_college(db, name="Other")

    response = await client.get(
        f"/api/colleges/{other['_id']}/students", headers=auth_header(college, "college")
    )

    assert response.status_code == 403


# ============================================================
# VERIFICATION
# ============================================================

async def test_verify_achievement(client, db):
    college = await create_college(db)
    student = await create_student(db, college_id=college["_id"])
    achievement = await create_achievement(db, student["_id"])

    response = await client.patch(
        f"/api/achievements/{achievement['_id']}/verify",
        json={"status": "verified"},
        headers=auth_header(college, "college"),
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["verificationStatus"] == "verified"
    assert data["verifiedBy"] == str(college["_id"])


async def test_verify_project_with_pending_is_validation_error(client, db):
    college = await create_college(db)
    student = await create_student(db, college_id=college["_id"])
    project = await create_project(db, student["_id"])

    response = await client.patch(
        f"/api/projects/{project['_id']}/verify",
        json={"status": "pending"},
        headers=auth_header(college, "college"),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_student_profile_for_own_college(client, db):
    college = await create_college(db)
    student = await create_student(db, college_id=college["_id"])
    await create_project(db, student["_id"])

    response = await client.get(
        f"/api/students/{student['_id']}", headers=auth_header(college, "college")
    )

    assert response.status_code == 200
    assert len(response.json()["data"]["projects"]) == 1


async def test_student_profile_under_college_prefix(client, db):
    college = await create_college(db)
    student = await create_student(db, college_id=college["_id"])
    await create_achievement(db, student["_id"])

    response = await client.get(
        f"/api/colleges/students/{student['_id']}", headers=auth_header(college, "college")
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["_id"] == str(student["_id"])
    assert len(data["achievements"]) == 1


async def test_student_profile_under_college_prefix_of_other_college(client, db):
    college = await create_college(db)
    other = await create_college(db, name="Other")
    student = await create_student(db, college_id=other["_id"])

    response = await client.get(
        f"/api/colleges/students/{student['_id']}", headers=auth_header(college, "college")
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "FORBIDDEN"


# ============================================================
# APPLICATIONS
# ============================================================

async def _application(db, status="pending"):
    recruiter = await create_recruiter(db)
    opportunity = await create_opportunity(db, recruiter["_id"])
    student = await create_student(db)
    application = await create_application(db, student["_id"], opportunity["_id"], status=status)
    return recruiter, student, opportunity, application


async def test_invalid_transition_is_400(client, db):
    recruiter, _, _, application = await _application(db, status="accepted")

    response = await client.patch(
        f"/api/applications/{application['_id']}/status",
        json={"status": "rejected"},
        headers=auth_header(recruiter, "recruiter"),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_TRANSITION"


async def test_unknown_application_status_is_validation_error(client, db):
    recruiter, _, _, application = await _application(db)

    response = await client.patch(
        f"/api/applications/{application['_id']}/status",
        json={"status": "hired"},
        headers=auth_header(recruiter, "recruiter"),
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_other_recruiter_gets_403(client, db):
    _, _, _, application = await _application(db)
    intruder = await create_recruiter(db, company_name="Intruder")

    response = await client.patch(
        f"/api/applications/{application['_id']}/status",
        json={"status": "shortlisted"},
        headers=auth_header(intruder, "recruiter"),
    )

    assert response.status_code == 403


async def test_shortlist_application(client, db):
    recruiter, _, _, application = await _application(db)

    response = await client.patch(
        f"/api/applications/{application['_id']}/status",
        json={"status": "shortlisted"},
        headers=auth_header(recruiter, "recruiter"),
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "shortlisted"


async def test_list_applications_all_status(client, db):
    recruiter, _, _, _ = await _application(db)

    response = await client.get(
        "/api/applications", params={"status": "all"}, headers=auth_header(recruiter, "recruiter")
    )

    assert response.status_code == 200
    assert response.json()["data"]["pagination"]["total"] == 1


async def test_apply_twice_conflicts(client, db):
    recruiter = await create_recruiter(db)
    opportunity = await create_opportunity(db, recruiter["_id"])
    student = await create_student(db)
    headers = auth_header(student, "student")

    first = await client.post(
        "/api/applications", json={"opportunityId": str(opportunity["_id"])}, headers=headers
    )
    second = await client.post(
        "/api/applications", json={"opportunityId": str(opportunity["_id"])}, headers=headers
    )

    assert first.status_code == 201
    assert first.json()["data"]["matchScore"] == 100
    assert second.status_code == 409
    assert second.json()["error"]["code"] == "ALREADY_APPLIED"


async def test_student_withdraws(client, db):
    _, student, _, application = await _application(db)

    response = await client.patch(
        f"/api/applications/{application['_id']}/withdraw", headers=auth_header(student, "student")
    )

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "withdrawn"
