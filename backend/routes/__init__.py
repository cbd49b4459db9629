"""FastAPI API endpoints under /api.

The UI layer gets its initial state from GET /api/state and hands the
current state back through PUT /api/state on its own schedule (explicit
save, autosave, shutdown). POST /api/backup archives data.json before a
risky operation.
"""

from fastapi import APIRouter

from .state import router as state_router

router = APIRouter()
router.include_router(state_router)
