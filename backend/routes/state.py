"""Health check, application state, save and backup endpoints."""

from fastapi import APIRouter, Request

from slidestate.models import AppState
from slidestate.storage import AppStorage

from .models import BackupResult, SaveResult

router = APIRouter()


def _storage(request: Request) -> AppStorage:
    return request.app.state.storage


@router.get("/health")
async def health():
    """Health check."""
    return {"status": "ok"}


@router.get("/state")
async def get_state(request: Request):
    """The in-memory application state, camelCase as it is saved."""
    state: AppState = request.app.state.app_state
    return state.dump()


@router.put("/state")
async def save_state(request: Request, body: AppState) -> SaveResult:
    """Replace the in-memory state and write it to data.json.

    Only the primary instance writes; others report saved=false.
    """
    request.app.state.app_state = body
    return SaveResult(saved=_storage(request).save(body))


@router.post("/backup")
async def backup(request: Request) -> BackupResult:
    """Archive data.json as it is on disk now."""
    archived = _storage(request).backup()
    return BackupResult(archived=archived.name if archived else None)
