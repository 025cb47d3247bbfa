from motor.motor_asyncio import AsyncIOMotorClient
from core.config import settings

# Client connects lazily on first operation
client = AsyncIOMotorClient(settings.MONGO_URI)
db = client[settings.DB_NAME]
