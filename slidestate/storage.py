"""JSON file storage for the application state.

The whole AppState lives in one file and is read and written as one unit:

    {save_dir}/
      data.json                  ← current state
      data.json.1697040000123    ← archived copies (unix epoch millis)

Loading never fails. A file that cannot be read, parsed or migrated is
archived next to the original name and the caller gets a blank state, so
the user's data is always still on disk for inspection.

Only the primary instance writes. Other windows of the same application
load the state read-only; save() and backup() are no-ops for them, and a
pre-2.0.0 file they migrate stays in place.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path

from slidestate import __version__
from slidestate.document import Document
from slidestate.migrations import MigrationEngine
from slidestate.models import AppState

logger = logging.getLogger(__name__)

DATA_FILE = "data.json"


def archive_file(path: Path) -> Path | None:
    """Rename ``path`` to ``<name>.<epoch millis>``; None if it does not exist."""
    if not path.exists():
        return None
    stamp = int(time.time() * 1000)
    target = path.with_name(f"{path.name}.{stamp}")
    while target.exists():
        stamp += 1
        target = path.with_name(f"{path.name}.{stamp}")
    path.rename(target)
    logger.warning("Archived %s to %s", path, target.name)
    return target


class AppStorage:
    def __init__(
        self,
        save_dir: Path,
        *,
        primary: bool,
        app_version: str = __version__,
        engine: MigrationEngine | None = None,
        file_name: str = DATA_FILE,
    ) -> None:
        self._save_dir = save_dir
        self._path = save_dir / file_name
        self._primary = primary
        self._engine = engine or MigrationEngine(app_version)
        if primary:
            logger.info("Saving to %s", self._path)

    @property
    def save_path(self) -> Path:
        return self._path

    @property
    def primary(self) -> bool:
        return self._primary

    @property
    def app_version(self) -> str:
        return self._engine.app_version

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> AppState:
        """Read and migrate data.json, or return a blank state.

        Any failure along the way archives the file and falls back to the
        default state; nothing is raised to the caller.
        """
        try:
            self._save_dir.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                return self._engine.default_state()
            document = Document.parse(self._path.read_text(encoding="utf-8"))
            result = self._engine.migrate(document)
        except Exception:
            logger.exception("Could not load %s, starting from a blank state", self._path)
            self._archive_quietly()
            return self._engine.default_state()

        # Read-only instances leave the original where the primary will find it.
        if result.path.preserve_original and self._primary:
            self._archive_quietly()
        return result.state

    def _archive_quietly(self) -> None:
        try:
            archive_file(self._path)
        except OSError:
            logger.exception("Could not archive %s", self._path)

    # ------------------------------------------------------------------
    # Save / backup (primary instance only)
    # ------------------------------------------------------------------

    def save(self, state: AppState) -> bool:
        """Overwrite data.json with ``state``. Returns False when not primary.

        A state without a version is stamped with ``app_version`` first;
        an unversioned file would load as a pre-2.0.0 save.
        """
        if not self._primary:
            return False
        if state.version is None:
            state.version = self.app_version
        self._path.write_text(
            state.model_dump_json(by_alias=True, indent=2), encoding="utf-8"
        )
        return True

    def backup(self) -> Path | None:
        """Archive the file on disk as it is now, e.g. before a risky change."""
        if not self._primary:
            return None
        return archive_file(self._path)
