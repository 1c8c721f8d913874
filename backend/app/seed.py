# seed script: creates demo staff and a demo patient in mongodb
# one therapist, one supervisor, one patient owned by the therapist
# run once: python -m app.seed

import asyncio
import logging
import os
from datetime import datetime, timezone

from app.services.db import db
from app.services.auth_service import hash_password

logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# seed password from env
DEFAULT_PASSWORD = os.getenv("SEED_PASSWORD")

STAFF = [
    {
        "email": "therapist@theratrack.dev",
        "name": "Dana Whitfield",
        "role": "therapist",
        "specialization": "Pediatric Speech-Language Pathology",
        "experience": 6,
    },
    {
        "email": "supervisor@theratrack.dev",
        "name": "Morgan Hale",
        "role": "supervisor",
        "specialization": "Clinical Supervision",
        "experience": 15,
    },
]


async def _ensure_user(profile: dict, hashed_pw: str) -> str:
    """insert a staff user unless the email exists, return its id"""
    existing = await db.users.find_one({"email": profile["email"]})
    if existing:
        logger.info(f"{profile['role'].capitalize()} already exists: {profile['email']}")
        return str(existing["_id"])

    doc = {
        **profile,
        "hashed_password": hashed_pw,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    result = await db.users.insert_one(doc)
    logger.info(f"Created {profile['role']}: {profile['name']} (id: {result.inserted_id})")
    return str(result.inserted_id)


async def seed():
    """create demo therapist, supervisor, and patient; skips existing"""
    if not DEFAULT_PASSWORD:
        raise SystemExit("SEED_PASSWORD must be set")

    await db.connect()
    hashed_pw = hash_password(DEFAULT_PASSWORD)

    therapist_id = None
    for profile in STAFF:
        user_id = await _ensure_user(profile, hashed_pw)
        if profile["role"] == "therapist":
            therapist_id = user_id

    patient_name = "Riley Carter"
    if await db.patients.find_one({"name": patient_name, "therapist_id": therapist_id}):
        logger.info(f"Patient already exists: {patient_name}")
    else:
        now = datetime.now(timezone.utc).isoformat()
        await db.patients.insert_one({
            "therapist_id": therapist_id,
            "name": patient_name,
            "age": 7,
            "gender": "other",
            "contact_number": "555-0142",
            "email": "carter.family@example.com",
            "address": {"street": "12 Elm St", "city": "Springfield", "state": "IL", "zip_code": "62701", "country": "US"},
            "medical_history": "Late onset of speech, no hearing loss",
            "diagnosis": "Phonological disorder",
            "status": "active",
            "total_sessions": 0,
            "last_session_date": None,
            "created_at": now,
            "updated_at": now,
        })
        logger.info(f"Created patient: {patient_name}")

    await db.close()
    logger.info("Seed complete")


if __name__ == "__main__":
    asyncio.run(seed())
