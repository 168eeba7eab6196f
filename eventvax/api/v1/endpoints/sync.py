# eventvax/api/v1/endpoints/sync.py
from fastapi import APIRouter, Depends, HTTPException, status

from eventvax.api import deps
from eventvax.background_tasks.chain_sync_tasks import ChainSyncTask
from eventvax.core.exceptions import SyncInProgressError
from eventvax.scheduler import get_scheduler_status
from eventvax.schemas.sync import SyncState, SyncTriggerResponse

router = APIRouter(prefix="/sync", tags=["Blockchain Sync"])


@router.get("/status", response_model=SyncState)
def read_sync_status(sync_task: ChainSyncTask = Depends(deps.get_sync_task)):
    """Whether a pass is running, the last pass report and the periodic job."""
    state = sync_task.state()
    state.scheduler = get_scheduler_status()
    return state


@router.post(
    "",
    response_model=SyncTriggerResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def trigger_sync(sync_task: ChainSyncTask = Depends(deps.get_sync_task)):
    """Starts a reconciliation pass in the background."""
    try:
        sync_task.start()
    except SyncInProgressError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)
    return {"status": "started", "message": "Blockchain sync started"}
