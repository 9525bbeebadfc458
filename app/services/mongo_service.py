"""
MongoDB Service - repositories over the document collections.

Every collection gets a small repository class; services never build
raw update documents themselves. The one place that knows about the
legacy project status encodings is ProjectRepository:

    verificationStatus = "pending" | missing | null   -> all read as "pending"

Reads normalize to the canonical value, writes only ever store canonical
values.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, List, Dict, Any

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from app.core.config import get_settings
from app.core.errors import ValidationError
from app.db.mongodb import get_mongo_db, COLLECTIONS
from app.models.status import VerificationStatus, ApplicationStatus

settings = get_settings()


# ============================================================
# HELPER: Convert ObjectId to string for JSON serialization
# ============================================================

def serialize_doc(doc):
    """Convert MongoDB document (and nested refs) to a JSON-serializable value."""
    if doc is None:
        return None
    if isinstance(doc, ObjectId):
        return str(doc)
    if isinstance(doc, dict):
        return {key: serialize_doc(value) for key, value in doc.items()}
    if isinstance(doc, list):
        return [serialize_doc(item) for item in doc]
    return doc


def to_object_id(value, label: str = "id") -> ObjectId:
    """Parse a client-supplied id. Malformed ids are a validation error."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise ValidationError(f"Invalid {label}: {value!r}")


# ============================================================
# PAGINATION
# ============================================================

@dataclass(frozen=True)
class Page:
    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


def paginate(page: Optional[int] = None, limit: Optional[int] = None) -> Page:
    """Clamp page/limit query values into a usable window."""
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else settings.default_page_size
    return Page(page=page, limit=min(limit, settings.max_page_size))


def pagination_meta(total: int, page: Page) -> dict:
    return {
        "page": page.page,
        "limit": page.limit,
        "total": total,
        "totalPages": math.ceil(total / page.limit) if total else 0,
    }


# ============================================================
# POPULATE: read-time join on a reference field
# ============================================================

async def populate(
    db: AsyncIOMotorDatabase,
    docs: List[dict],
    field: str,
    collection: str,
    projection: Optional[dict] = None
) -> List[dict]:
    """
    Replace reference ids in `field` with the referenced documents.

    Single references that no longer resolve become None; lists drop
    unresolved entries. One $in query per call regardless of len(docs).
    """
    ids = set()
    for doc in docs:
        value = doc.get(field)
        if isinstance(value, list):
            ids.update(v for v in value if isinstance(v, ObjectId))
        elif isinstance(value, ObjectId):
            ids.add(value)

    if not ids:
        return docs

    cursor = db[COLLECTIONS[collection]].find({"_id": {"$in": list(ids)}}, projection)
    refs = {ref["_id"]: ref for ref in await cursor.to_list(length=None)}

    for doc in docs:
        value = doc.get(field)
        if isinstance(value, list):
            doc[field] = [refs[v] for v in value if v in refs]
        elif value is not None:
            doc[field] = refs.get(value)
    return docs


# ============================================================
# BASE REPOSITORY
# ============================================================

class BaseRepository:
    """Shared find/count helpers for one collection."""

    collection_name: str = None

    def __init__(self, db: AsyncIOMotorDatabase = None):
        self.db = db if db is not None else get_mongo_db()
        self.collection = self.db[COLLECTIONS[self.collection_name]]

    def normalize(self, doc: Optional[dict]) -> Optional[dict]:
        return doc

    async def get_by_id(self, _id: ObjectId, projection: Optional[dict] = None) -> Optional[dict]:
        doc = await self.collection.find_one({"_id": _id}, projection)
        return self.normalize(doc)

    async def get_by_user(self, user_id: ObjectId) -> Optional[dict]:
        """Owner profile lookup (colleges, students, recruiters)."""
        return await self.collection.find_one({"userId": user_id})

    async def find(
        self,
        query: dict,
        sort: Optional[list] = None,
        page: Optional[Page] = None,
        projection: Optional[dict] = None
    ) -> List[dict]:
        cursor = self.collection.find(query, projection)
        if sort:
            cursor = cursor.sort(sort)
        if page is not None:
            cursor = cursor.skip(page.skip).limit(page.limit)
        docs = await cursor.to_list(length=None)
        return [self.normalize(doc) for doc in docs]

    async def count(self, query: dict) -> int:
        return await self.collection.count_documents(query)


# ============================================================
# OWNER COLLECTIONS
# ============================================================

class CollegeRepository(BaseRepository):
    collection_name = "colleges"

    # Legacy embedded arrays never leave the API
    PUBLIC_PROJECTION = {"students": 0, "achievements": 0}

    async def update_fields(self, college_id: ObjectId, fields: Dict[str, Any]) -> Optional[dict]:
        fields = dict(fields, updatedAt=datetime.utcnow())
        return await self.collection.find_one_and_update(
            {"_id": college_id},
            {"$set": fields},
            projection=self.PUBLIC_PROJECTION,
            return_document=ReturnDocument.AFTER
        )


class StudentRepository(BaseRepository):
    collection_name = "students"

    # Display fields joined onto credentials in the pending queue
    DISPLAY_PROJECTION = {"firstName": 1, "lastName": 1, "enrollmentNumber": 1}
    ROSTER_PROJECTION = {"projects": 0, "achievements": 0, "applications": 0}

    async def ids_for_college(self, college_id: ObjectId) -> List[ObjectId]:
        cursor = self.collection.find({"collegeId": college_id}, {"_id": 1})
        return [doc["_id"] for doc in await cursor.to_list(length=None)]

    async def mark_verified(self, student_id: ObjectId, college_id: ObjectId) -> bool:
        """
        Set isVerifiedByCollege and claim the student for the college.

        The filter repeats the ownership rule so a student claimed by
        another college in the meantime is left untouched. Returns False
        when nothing matched.
        """
        result = await self.collection.update_one(
            {
                "_id": student_id,
                "$or": [{"collegeId": None}, {"collegeId": college_id}],
            },
            {"$set": {
                "isVerifiedByCollege": True,
                "collegeId": college_id,
                "updatedAt": datetime.utcnow(),
            }}
        )
        return result.matched_count > 0


class RecruiterRepository(BaseRepository):
    collection_name = "recruiters"


# ============================================================
# CREDENTIALS (achievements, projects)
# ============================================================

class CredentialRepository(BaseRepository):
    """Verification writes shared by achievements and projects."""

    def pending_query(self) -> dict:
        return {"verificationStatus": VerificationStatus.pending.value}

    def pending_for_students(self, student_ids: List[ObjectId]) -> dict:
        return {"studentId": {"$in": student_ids}, **self.pending_query()}

    async def set_status(
        self,
        credential_id: ObjectId,
        status: VerificationStatus,
        college_id: ObjectId
    ) -> Optional[dict]:
        """
        Write a verification decision. verifiedBy is set only for
        `verified` and removed for `rejected`.

        Returns the document as it was before the write (normalized),
        or None if it vanished.
        """
        now = datetime.utcnow()
        if status == VerificationStatus.verified:
            update = {"$set": {
                "verificationStatus": status.value,
                "verifiedBy": college_id,
                "verifiedAt": now,
                "updatedAt": now,
            }}
        else:
            update = {
                "$set": {"verificationStatus": status.value, "updatedAt": now},
                "$unset": {"verifiedBy": "", "verifiedAt": ""},
            }

        before = await self.collection.find_one_and_update(
            {"_id": credential_id},
            update,
            return_document=ReturnDocument.BEFORE
        )
        return self.normalize(before)


class AchievementRepository(CredentialRepository):
    collection_name = "achievements"

    def verified_by_query(self, college_id: ObjectId) -> dict:
        return {
            "verifiedBy": college_id,
            "verificationStatus": VerificationStatus.verified.value,
        }


class ProjectRepository(CredentialRepository):
    collection_name = "projects"

    def pending_query(self) -> dict:
        # Older project documents predate the status field
        return {"$or": [
            {"verificationStatus": VerificationStatus.pending.value},
            {"verificationStatus": {"$exists": False}},
            {"verificationStatus": None},
        ]}

    def normalize(self, doc: Optional[dict]) -> Optional[dict]:
        if doc is None:
            return None
        if doc.get("verificationStatus") is None:
            doc["verificationStatus"] = VerificationStatus.pending.value
        doc.setdefault("verifiedBy", None)
        return doc


# ============================================================
# OPPORTUNITIES / APPLICATIONS / SKILLS
# ============================================================

class OpportunityRepository(BaseRepository):
    collection_name = "opportunities"

    async def ids_for_recruiter(self, recruiter_id: ObjectId) -> List[ObjectId]:
        cursor = self.collection.find({"recruiterId": recruiter_id}, {"_id": 1})
        return [doc["_id"] for doc in await cursor.to_list(length=None)]


class ApplicationRepository(BaseRepository):
    collection_name = "applications"

    async def find_active(self, student_id: ObjectId, opportunity_id: ObjectId) -> Optional[dict]:
        """A non-withdrawn application for the pair, if any."""
        return await self.collection.find_one({
            "studentId": student_id,
            "opportunityId": opportunity_id,
            "status": {"$ne": ApplicationStatus.withdrawn.value},
        })

    async def insert(self, doc: dict) -> dict:
        result = await self.collection.insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    async def compare_and_set_status(
        self,
        application_id: ObjectId,
        current: ApplicationStatus,
        new: ApplicationStatus
    ) -> Optional[dict]:
        """
        Move status from `current` to `new` in one atomic write.
        Returns the updated document, or None if the status was no
        longer `current`.
        """
        return await self.collection.find_one_and_update(
            {"_id": application_id, "status": current.value},
            {"$set": {"status": new.value}},
            return_document=ReturnDocument.AFTER
        )
