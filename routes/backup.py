from fastapi import APIRouter, HTTPException, Depends, Request, Response
from routes.habits import get_manager
from core.habit_manager import HabitManager
from core.backup import export_habits, export_filename, parse_habits
from models.analytics import SyncStatus

router = APIRouter(prefix="/backup", tags=["Backup"])

@router.get("/export")
async def export_data(manager: HabitManager = Depends(get_manager)):
    """Download every habit with its completion history as JSON."""
    filename = export_filename(manager.clock())
    return Response(
        content=export_habits(manager.list_habits()),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )

@router.post("/import")
async def import_data(request: Request, manager: HabitManager = Depends(get_manager)):
    """
    Import an exported document.
    Habits whose id already exists locally are skipped.
    """
    body = await request.body()
    try:
        habits = parse_habits(body)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    added = await manager.merge_habits(habits)
    return {"imported": added, "skipped": len(habits) - added}

@router.post("/sync/push", status_code=202)
async def push_to_cloud(manager: HabitManager = Depends(get_manager)):
    manager.push_to_cloud()
    return {"message": "Sync started"}

@router.post("/sync/pull")
async def pull_from_cloud(manager: HabitManager = Depends(get_manager)):
    added = await manager.pull_from_cloud()
    return {"imported": added}

@router.get("/sync/status", response_model=SyncStatus)
async def get_sync_status(manager: HabitManager = Depends(get_manager)):
    sync = manager.sync
    notifier = manager.notifier
    return SyncStatus(
        last_sync_date=getattr(sync, "last_sync_date", None),
        last_sync_error=getattr(sync, "last_sync_error", None),
        notification_error=getattr(notifier, "last_error", None),
        pending_writes=manager.pending_writes
    )
