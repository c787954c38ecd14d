# elitehome/db/mongo.py
from motor.motor_asyncio import AsyncIOMotorClient
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING
from pymongo.errors import PyMongoError
from elitehome.core.config import settings
from elitehome.core.logger import logger


client = AsyncIOMotorClient(settings.MONGODB_URI)
db = client[settings.MONGODB_DB]

# Collection names
CUSTOMERS = "customers"
ADMINS = "admins"
MESSAGES = "messages"
MESSAGE_COUNTERS = "conversation_counters"
QUOTES = "quotes"
EMPLOYEES = "employees"
GALLERY = "gallery"


# Function to check DB connection
async def verify_mongodb_connection():
    try:
        await client.server_info()
        logger.info("MongoDB connection established")
    except Exception as e:
        logger.error("MongoDB connection failed: %s", e)

async def ensure_indexes(database: AsyncIOMotorDatabase = db):
    try:
        await database[MESSAGES].create_index([("conversation_id", ASCENDING), ("seq", ASCENDING)])
        await database[MESSAGES].create_index([("to_id", ASCENDING), ("read", ASCENDING)])
        await database[CUSTOMERS].create_index("email", unique=True)
        await database[ADMINS].create_index("email", unique=True)
    except PyMongoError as e:
        logger.error("Index creation failed: %s", e)

async def get_db() -> AsyncIOMotorDatabase:
    return db
