"""FastAPI web application for Quiet Hours."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import Body, Depends, FastAPI, HTTPException, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from quiethours import __version__
from quiethours.api.models import (
    BlockCreateRequest,
    BlockListResponse,
    BlockResponse,
    CronTriggerRequest,
    MessageResponse,
    SchedulerActionRequest,
    SchedulerResponse,
    SweepResponse,
)
from quiethours.auth.dependencies import cron_secret_matches, get_current_user, security
from quiethours.database.database import get_db, init_db
from quiethours.database.study_block_repository import StudyBlockRepository
from quiethours.database.user_repository import UserRepository
from quiethours.engine.notifier import ReminderNotifier
from quiethours.engine.scheduler import get_scheduler, reset_scheduler
from quiethours.engine.sweep import SweepSelectionError, run_sweep
from quiethours.engine.sweep_runner import get_lookahead_minutes
from quiethours.integrations.email_client import SMTPEmailClient
from quiethours.models.study_block import StudyBlock, new_block_id, to_utc_naive, utc_isoformat, utc_now
from quiethours.models.user import User

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    if os.getenv("REMINDER_SCHEDULER_AUTOSTART", "False").lower() == "true":
        logger.info("Auto-starting reminder scheduler")
        # The first sweep does blocking DB and SMTP work.
        await run_in_threadpool(get_scheduler().start)
    try:
        yield
    finally:
        reset_scheduler()


app = FastAPI(
    title="Quiet Hours API",
    description="Study blocks with a one-time email reminder before each block starts",
    version=__version__,
    lifespan=lifespan,
)


def get_notifier(db: Session = Depends(get_db)) -> ReminderNotifier:
    """Notifier dependency (overridable in tests)."""
    return ReminderNotifier(UserRepository(db), SMTPEmailClient())


def _bearer(credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    return credentials.credentials if credentials else None


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.get("/blocks", response_model=BlockListResponse)
def list_blocks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """List the current user's study blocks ordered by start time."""
    return BlockListResponse(blocks=StudyBlockRepository(db).get_all(current_user.id))


@app.post("/blocks", response_model=BlockResponse, status_code=status.HTTP_201_CREATED)
def create_block(
    request: BlockCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Create a study block. The start must be in the future and before the end."""
    start_time = to_utc_naive(request.start_time)
    end_time = to_utc_naive(request.end_time)
    if start_time >= end_time:
        raise HTTPException(status_code=400, detail="End time must be after start time")
    now = utc_now()
    if start_time <= now:
        raise HTTPException(status_code=400, detail="Start time must be in the future")

    block = StudyBlock(
        block_id=new_block_id(),
        user_id=current_user.id,
        start_time=start_time,
        end_time=end_time,
        reminder_sent=False,
        created_at=now,
    )
    try:
        created = StudyBlockRepository(db).create(block)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to create study block: {str(e)}")
    return BlockResponse(block=created)


@app.delete("/blocks/{block_id}", response_model=MessageResponse)
def delete_block(
    block_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete one of the current user's blocks."""
    if not StudyBlockRepository(db).delete(current_user.id, block_id):
        raise HTTPException(status_code=404, detail="Block not found or could not be deleted")
    return MessageResponse(message="Block deleted successfully")


@app.delete("/blocks", response_model=MessageResponse)
def delete_all_blocks(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Delete all of the current user's blocks."""
    deleted = StudyBlockRepository(db).delete_all_for_user(current_user.id)
    if deleted == 0:
        raise HTTPException(status_code=404, detail="Block not found or could not be deleted")
    return MessageResponse(message=f"Deleted {deleted} blocks")


def _run_triggered_sweep(db: Session, notifier: ReminderNotifier, lookahead_minutes: Optional[int]):
    try:
        result = run_sweep(
            StudyBlockRepository(db),
            notifier,
            lookahead_minutes=lookahead_minutes if lookahead_minutes is not None else get_lookahead_minutes(),
        )
    except SweepSelectionError as e:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": str(e), "timestamp": utc_isoformat(utc_now())},
        )
    return SweepResponse(
        blocks_found=result.blocks_found,
        reminders_sent=result.reminders_sent,
        errors=result.errors,
        success_rate=result.success_rate,
        timestamp=result.timestamp,
    )


@app.get("/reminders/run", response_model=SweepResponse)
def trigger_sweep(
    lookahead_minutes: Optional[int] = Query(None, gt=0),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    notifier: ReminderNotifier = Depends(get_notifier),
):
    """Run one reminder sweep now (for external cron services)."""
    if not cron_secret_matches(_bearer(credentials)):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return _run_triggered_sweep(db, notifier, lookahead_minutes)


@app.post("/reminders/run", response_model=SweepResponse)
def trigger_sweep_post(
    body: Optional[CronTriggerRequest] = Body(None),
    lookahead_minutes: Optional[int] = Query(None, gt=0),
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
    notifier: ReminderNotifier = Depends(get_notifier),
):
    """Run one reminder sweep now; the secret may also be sent as a JSON `token`."""
    if not cron_secret_matches(_bearer(credentials), body.token if body else None):
        raise HTTPException(status_code=401, detail="Unauthorized")
    return _run_triggered_sweep(db, notifier, lookahead_minutes)


@app.get("/scheduler", response_model=SchedulerResponse)
def scheduler_status():
    """Report whether the internal reminder scheduler is running."""
    return SchedulerResponse(scheduler=get_scheduler().status(), timestamp=utc_now())


@app.post("/scheduler", response_model=SchedulerResponse)
def control_scheduler(
    request: SchedulerActionRequest,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
):
    """Start or stop the internal reminder scheduler."""
    if not cron_secret_matches(_bearer(credentials), request.token):
        raise HTTPException(status_code=401, detail="Unauthorized")
    if request.action not in ("start", "stop"):
        raise HTTPException(status_code=400, detail='Invalid action. Use "start" or "stop"')

    scheduler = get_scheduler()
    if request.action == "start":
        scheduler.start()
        message = "Scheduler started successfully"
    else:
        scheduler.stop()
        message = "Scheduler stopped successfully"
    return SchedulerResponse(message=message, scheduler=scheduler.status(), timestamp=utc_now())


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
