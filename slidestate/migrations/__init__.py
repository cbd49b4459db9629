"""Schema migrations, one module per era of the data.json format.

  legacy   pre-2.0.0, no version field, directories listed per scene
  early    2.0.0 … 3.0.0-beta2, serialised tag/scene weight maps
  current  3.0.0-beta3 (library renumbered) and every later version
"""

from .common import renumber_library
from .current import BETA3_VERSION, migrate_beta3, migrate_passthrough
from .dispatch import MIGRATION_PATHS, MigrationEngine, MigrationPath, MigrationResult
from .early import EARLY_VERSIONS, migrate_early
from .legacy import migrate_legacy

__all__ = [
    "BETA3_VERSION",
    "EARLY_VERSIONS",
    "MIGRATION_PATHS",
    "MigrationEngine",
    "MigrationPath",
    "MigrationResult",
    "migrate_beta3",
    "migrate_early",
    "migrate_legacy",
    "migrate_passthrough",
    "renumber_library",
]
