import motor.motor_asyncio
from pymongo import ASCENDING
import os
from dotenv import load_dotenv

from ats_match.utils.logging_config import get_logger

logger = get_logger(__name__)

# Load environment variables from .env
load_dotenv()

MONGO_DETAILS = os.getenv("MONGO_DETAILS", "mongodb://localhost:27017")
DB_NAME = os.getenv("DB_NAME", "ats_match_db")

logger.info(f"Initializing MongoDB connection to database: {DB_NAME}")

# The client connects lazily, on the first operation
client = motor.motor_asyncio.AsyncIOMotorClient(MONGO_DETAILS)
db = client[DB_NAME]

# Collections
candidates_coll = db["candidates"]
job_postings_coll = db["job_postings"]
applications_coll = db["applications"]
communication_logs_coll = db["communication_logs"]

UNIQUE_INDEXES = [
    (candidates_coll, "candidate_id"),
    (job_postings_coll, "job_id"),
    (applications_coll, "application_id"),
]
LOOKUP_INDEXES = [
    (candidates_coll, "email"),
    (job_postings_coll, "status"),
    (applications_coll, "candidate_id"),
    (applications_coll, "job_id"),
    (applications_coll, "status"),
    (communication_logs_coll, "candidate_id"),
]


async def init_indexes():
    """Index initialization for collections."""
    logger.info("Starting database index initialization")

    for coll, field in UNIQUE_INDEXES:
        try:
            await coll.create_index([(field, ASCENDING)], unique=True)
            logger.debug(f"Created unique index on {coll.name}.{field}")
        except Exception as e:
            if "already exists" in str(e).lower():
                logger.debug(f"Index on {coll.name}.{field} already exists")
            else:
                logger.warning(f"Could not create unique index on {coll.name}.{field}: {e}")

    for coll, field in LOOKUP_INDEXES:
        try:
            await coll.create_index([(field, ASCENDING)])
        except Exception as e:
            logger.warning(f"Could not create index on {coll.name}.{field}: {e}")

    logger.info("Database index initialization completed")
