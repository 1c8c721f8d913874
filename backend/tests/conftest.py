# shared fixtures for backend api tests
# provides mock db, staff users, sample records, auth tokens, and httpx test clients

import copy
import re

import pytest
import pytest_asyncio
from unittest.mock import MagicMock
from bson import ObjectId

from httpx import AsyncClient, ASGITransport

from app.main import app
from app.services.db import get_db
from app.services.auth_service import hash_password, create_access_token


# test ids (fixed so the module can be imported twice without drift)
THERAPIST_OID = ObjectId("665f1a000000000000000001")
THERAPIST_2_OID = ObjectId("665f1a000000000000000002")
SUPERVISOR_OID = ObjectId("665f1a000000000000000003")
PATIENT_OID = ObjectId("665f1b000000000000000001")
PATIENT_2_OID = ObjectId("665f1b000000000000000002")
PLAN_OID = ObjectId("665f1c000000000000000001")
PLAN_2_OID = ObjectId("665f1c000000000000000002")
REPORT_OID = ObjectId("665f1d000000000000000001")
RATING_OID = ObjectId("665f1e000000000000000001")

THERAPIST_ID = str(THERAPIST_OID)
THERAPIST_2_ID = str(THERAPIST_2_OID)
SUPERVISOR_ID = str(SUPERVISOR_OID)
PATIENT_ID = str(PATIENT_OID)
PATIENT_2_ID = str(PATIENT_2_OID)
PLAN_ID = str(PLAN_OID)
PLAN_2_ID = str(PLAN_2_OID)
REPORT_ID = str(REPORT_OID)
RATING_ID = str(RATING_OID)

MISSING_ID = "507f1f77bcf86cd799439011"

_HASHED_PW = hash_password("theratrack123")


# staff documents (as they'd appear from mongodb)

THERAPIST_DOC = {
    "_id": THERAPIST_OID,
    "email": "dana.whitfield@theratrack.dev",
    "hashed_password": _HASHED_PW,
    "name": "Dana Whitfield",
    "role": "therapist",
    "specialization": "Pediatric Speech-Language Pathology",
    "experience": 6,
    "created_at": "2024-06-15T00:00:00+00:00",
}

THERAPIST_2_DOC = {
    "_id": THERAPIST_2_OID,
    "email": "lee.okafor@theratrack.dev",
    "hashed_password": _HASHED_PW,
    "name": "Lee Okafor",
    "role": "therapist",
    "specialization": "Adult Neurogenic Disorders",
    "experience": 3,
    "created_at": "2024-08-01T00:00:00+00:00",
}

SUPERVISOR_DOC = {
    "_id": SUPERVISOR_OID,
    "email": "morgan.hale@theratrack.dev",
    "hashed_password": _HASHED_PW,
    "name": "Morgan Hale",
    "role": "supervisor",
    "specialization": "Clinical Supervision",
    "experience": 15,
    "created_at": "2023-01-10T00:00:00+00:00",
}


# clinical records

PATIENT_DOC = {
    "_id": PATIENT_OID,
    "therapist_id": THERAPIST_ID,
    "name": "Riley Carter",
    "age": 7,
    "gender": "other",
    "contact_number": "555-0142",
    "email": "carter.family@example.com",
    "address": {"street": "12 Elm St", "city": "Springfield", "state": "IL", "zip_code": "62701", "country": "US"},
    "medical_history": "Late onset of speech",
    "diagnosis": "Phonological disorder",
    "status": "active",
    "total_sessions": 4,
    "last_session_date": "2025-06-10",
    "created_at": "2025-05-01T00:00:00+00:00",
    "updated_at": "2025-05-01T00:00:00+00:00",
}

PATIENT_2_DOC = {
    "_id": PATIENT_2_OID,
    "therapist_id": THERAPIST_2_ID,
    "name": "Sam Alvarez",
    "age": 64,
    "gender": "male",
    "contact_number": "555-0199",
    "email": None,
    "address": {"street": "9 Oak Ave", "city": "Springfield", "state": "IL", "zip_code": None, "country": None},
    "medical_history": "Left hemisphere stroke, 2024",
    "diagnosis": "Expressive aphasia",
    "status": "active",
    "total_sessions": 10,
    "last_session_date": None,
    "created_at": "2025-04-01T00:00:00+00:00",
    "updated_at": "2025-04-01T00:00:00+00:00",
}

GOAL = {"description": "Produce /s/ in initial position with 80% accuracy", "target_date": "2025-09-01", "status": "pending"}
ACTIVITY = {
    "name": "Minimal pairs",
    "description": "Sort picture cards contrasting /s/ and /t/",
    "frequency": "twice weekly",
    "duration": 20,
    "instructions": None,
}

PLAN_DOC = {
    "_id": PLAN_OID,
    "patient_id": PATIENT_ID,
    "therapist_id": THERAPIST_ID,
    "supervisor_id": SUPERVISOR_ID,
    "goals": [GOAL],
    "activities": [ACTIVITY],
    "start_date": "2025-06-01",
    "end_date": "2025-09-01",
    "notes": None,
    "status": "draft",
    "supervisor_feedback": None,
    "created_at": "2025-06-01T00:00:00+00:00",
    "updated_at": "2025-06-01T00:00:00+00:00",
}

PLAN_2_DOC = {
    **PLAN_DOC,
    "_id": PLAN_2_OID,
    "patient_id": PATIENT_2_ID,
    "therapist_id": THERAPIST_2_ID,
    "status": "pending_approval",
    "created_at": "2025-06-02T00:00:00+00:00",
}

REPORT_DOC = {
    "_id": REPORT_OID,
    "patient_id": PATIENT_ID,
    "therapist_id": THERAPIST_ID,
    "therapy_plan_id": PLAN_ID,
    "session_details": {"date": "2025-06-10", "duration": 45, "type": "individual"},
    "progress": {
        "goals": ["Improve /s/ production"],
        "achievements": ["Consistent /s/ in isolation"],
        "challenges": ["Carryover into words"],
    },
    "next_steps": ["Move to CV syllables"],
    "observations": "Engaged throughout the session",
    "recommendations": None,
    "status": "draft",
    "supervisor_feedback": None,
    "created_at": "2025-06-10T00:00:00+00:00",
    "updated_at": "2025-06-10T00:00:00+00:00",
}

RATING_DOC = {
    "_id": RATING_OID,
    "patient_id": PATIENT_ID,
    "therapist_id": THERAPIST_ID,
    "evaluation_period": {"start_date": "2025-05-01", "end_date": "2025-06-01"},
    "overall_rating": {"score": 3, "comments": "Steady progress"},
    "domain_ratings": [{"domain": "articulation", "score": 3, "comments": None}],
    "recommendations": [{"description": "Home practice 10 minutes daily", "priority": "high"}],
    "status": "draft",
    "created_at": "2025-06-02T00:00:00+00:00",
    "updated_at": "2025-06-02T00:00:00+00:00",
}


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor: supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = data or []
        self._index = 0

    def sort(self, key, direction=1):
        present = [d for d in self._data if d.get(key) is not None]
        missing = [d for d in self._data if d.get(key) is None]
        present.sort(key=lambda d: d[key], reverse=direction == -1)
        self._data = present + missing
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


class MockCollection:
    """mock for a motor collection with async methods.
    reads hand back copies, like the driver does"""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []

    def find(self, query=None, projection=None):
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock([copy.deepcopy(d) for d in results])

    async def find_one(self, query=None, projection=None):
        if not query:
            return copy.deepcopy(self._data[0]) if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return copy.deepcopy(doc)
        return None

    async def insert_one(self, doc):
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(copy.deepcopy(doc))
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def count_documents(self, query=None):
        if not query:
            return len(self._data)
        return len([d for d in self._data if self._matches(d, query)])

    async def update_one(self, query, update, upsert=False):
        result = MagicMock()
        result.modified_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                if "$set" in update:
                    doc.update(copy.deepcopy(update["$set"]))
                result.modified_count = 1
                break
        return result

    async def find_one_and_update(self, query, update, return_document=None, **kwargs):
        for doc in self._data:
            if self._matches(doc, query):
                before = copy.deepcopy(doc)
                if "$set" in update:
                    doc.update(copy.deepcopy(update["$set"]))
                # pymongo ReturnDocument.AFTER is True
                return copy.deepcopy(doc) if return_document else before
        return None

    async def delete_one(self, query):
        result = MagicMock()
        result.deleted_count = 0
        for i, doc in enumerate(self._data):
            if self._matches(doc, query):
                del self._data[i]
                result.deleted_count = 1
                break
        return result

    async def create_index(self, *args, **kwargs):
        return "mock_index"

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            if key == "$or":
                if not any(self._matches(doc, cond) for cond in value):
                    return False
                continue
            doc_val = doc.get(key)
            if isinstance(value, dict):
                if "$in" in value:
                    if doc_val not in value["$in"]:
                        return False
                elif "$gte" in value:
                    if doc_val is None or doc_val < value["$gte"]:
                        return False
                elif "$regex" in value:
                    flags = re.IGNORECASE if value.get("$options") == "i" else 0
                    if doc_val is None or not re.search(value["$regex"], str(doc_val), flags):
                        return False
            elif doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.users = MockCollection([
            copy.deepcopy(THERAPIST_DOC),
            copy.deepcopy(THERAPIST_2_DOC),
            copy.deepcopy(SUPERVISOR_DOC),
        ])
        self.patients = MockCollection([copy.deepcopy(PATIENT_DOC), copy.deepcopy(PATIENT_2_DOC)])
        self.therapy_plans = MockCollection([copy.deepcopy(PLAN_DOC), copy.deepcopy(PLAN_2_DOC)])
        self.progress_reports = MockCollection([copy.deepcopy(REPORT_DOC)])
        self.clinical_ratings = MockCollection([copy.deepcopy(RATING_DOC)])

    def collection(self, name):
        return getattr(self, name)

    async def connect(self):
        pass

    async def close(self):
        pass


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


def _bearer(user_id: str, role: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token({'sub': user_id, 'role': role})}"}


@pytest.fixture
def therapist_headers():
    return _bearer(THERAPIST_ID, "therapist")


@pytest.fixture
def other_therapist_headers():
    return _bearer(THERAPIST_2_ID, "therapist")


@pytest.fixture
def supervisor_headers():
    return _bearer(SUPERVISOR_ID, "supervisor")


def _make_client(mock_db, headers=None):
    async def override_get_db():
        return mock_db

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    return AsyncClient(transport=transport, base_url="http://test", headers=headers or {})


@pytest_asyncio.fixture
async def client(mock_db):
    """unauthenticated httpx async test client with the mock db"""
    async with _make_client(mock_db) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def therapist_client(mock_db, therapist_headers):
    """client authenticated as the therapist who owns PATIENT, PLAN, REPORT, RATING"""
    async with _make_client(mock_db, therapist_headers) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def other_therapist_client(mock_db, other_therapist_headers):
    """client authenticated as a second therapist owning PATIENT_2 and PLAN_2"""
    async with _make_client(mock_db, other_therapist_headers) as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def supervisor_client(mock_db, supervisor_headers):
    """client authenticated as the supervisor"""
    async with _make_client(mock_db, supervisor_headers) as ac:
        yield ac
    app.dependency_overrides.clear()
