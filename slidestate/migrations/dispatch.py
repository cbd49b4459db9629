"""Version dispatch: pick the one migration path for a loaded document.

Paths are checked in order and the first match wins. The last path
matches everything, so dispatch cannot fail: current and future versions
are copied through as-is. A new historical format gets its own entry
ahead of "passthrough".
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from slidestate.document import Document
from slidestate.errors import MigrationError
from slidestate.models import AppState

from .current import BETA3_VERSION, migrate_beta3, migrate_passthrough
from .early import EARLY_VERSIONS, migrate_early
from .legacy import migrate_legacy

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationPath:
    name: str
    matches: Callable[[Document], bool]
    migrate: Callable[[Document, str], AppState]
    # Archive the source file once migrated so the old format survives on disk.
    preserve_original: bool = False


MIGRATION_PATHS: tuple[MigrationPath, ...] = (
    MigrationPath(
        name="legacy",
        matches=lambda doc: not doc.has("version"),
        migrate=migrate_legacy,
        preserve_original=True,
    ),
    MigrationPath(
        name="early",
        matches=lambda doc: doc.version in EARLY_VERSIONS,
        migrate=migrate_early,
    ),
    MigrationPath(
        name="beta3",
        matches=lambda doc: doc.version == BETA3_VERSION,
        migrate=migrate_beta3,
    ),
    MigrationPath(
        name="passthrough",
        matches=lambda doc: True,
        migrate=migrate_passthrough,
    ),
)


@dataclass
class MigrationResult:
    state: AppState
    path: MigrationPath


class MigrationEngine:
    """Turns a parsed document from any release into a current AppState.

    ``app_version`` is stamped on every state the engine produces.
    """

    def __init__(
        self,
        app_version: str,
        paths: tuple[MigrationPath, ...] = MIGRATION_PATHS,
    ) -> None:
        self.app_version = app_version
        self.paths = paths

    def select_path(self, document: Document) -> MigrationPath:
        for path in self.paths:
            if path.matches(document):
                return path
        raise MigrationError(f"No migration path for version {document.version!r}")

    def migrate(self, document: Document) -> MigrationResult:
        path = self.select_path(document)
        logger.info(
            "Loading state saved by version %s via %s migration",
            document.version or "<none>", path.name,
        )
        state = path.migrate(document, self.app_version)
        state.version = self.app_version
        return MigrationResult(state=state, path=path)

    def default_state(self) -> AppState:
        return AppState.default(self.app_version)
