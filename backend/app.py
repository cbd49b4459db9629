import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI

from backend.routes import router
from slidestate import __version__
from slidestate.storage import AppStorage

load_dotenv(Path(__file__).parent.parent / ".env")

DEFAULT_DATA_DIR = Path(__file__).parent.parent / "data"


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def create_app(
    data_dir: Path | None = None,
    primary: bool | None = None,
    app_version: str | None = None,
) -> FastAPI:
    resolved = data_dir or Path(os.getenv("DATA_DIR", str(DEFAULT_DATA_DIR)))
    if primary is None:
        primary = _env_flag("PRIMARY_WINDOW", True)
    version = app_version or os.getenv("APP_VERSION") or __version__

    storage = AppStorage(resolved, primary=primary, app_version=version)

    app = FastAPI(title="slidestate", version=version)
    app.state.storage = storage
    # Loaded once, before anything can mutate it.
    app.state.app_state = storage.load()
    app.include_router(router, prefix="/api")
    return app


# Default app instance for uvicorn (uses DATA_DIR / PRIMARY_WINDOW env vars)
app = create_app()
