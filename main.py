import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from routes import habits, analytics, backup
from core.config import settings
from core.database import db
from core.habit_manager import HabitManager
from core.repository import HabitRepository
from core.scheduler import create_scheduler
from utils.notifications import NotificationService
from utils.sync import CloudSyncService

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    notifier = NotificationService()
    sync = CloudSyncService()
    manager = HabitManager(HabitRepository(db), notifier=notifier, sync=sync)
    await manager.load()
    scheduler = create_scheduler(manager)
    scheduler.start()
    app.state.manager = manager
    try:
        yield
    finally:
        scheduler.shutdown(wait=False)
        # Write-behind: anything not yet flushed is saved on the way out
        await manager.flush()
        notifier.shutdown()
        sync.shutdown()
        logger.info("Shutdown complete")

app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

# CORS
origins = [
    settings.FRONTEND_URL,
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:3000", # Common alternative
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(habits.router)
app.include_router(analytics.router)
app.include_router(backup.router)

@app.get("/")
def read_root():
    return {"message": "Welcome to Habita API"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
