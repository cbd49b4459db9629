"""3.0.0-beta3 and everything after: already in the current shape.

Fields are copied one to one with light defaulting, and keys this release
does not know are carried along untouched. beta3 additionally renumbers
the library, whose ids could still be stale in that release.
"""

from __future__ import annotations

from slidestate.document import Document
from slidestate.models import AppState

from .common import (
    build_config,
    build_grids,
    build_library,
    build_routes,
    build_scenes,
    build_tags,
    extra_fields,
    renumber_library,
)

BETA3_VERSION = "3.0.0-beta3"


def migrate_passthrough(document: Document, app_version: str) -> AppState:
    tags = build_tags(document)
    tags_by_id = {tag.id: tag for tag in tags}
    theme = document.get("theme")
    return AppState(
        version=app_version,
        config=build_config(document),
        scenes=build_scenes(document, tags_by_id),
        grids=build_grids(document),
        library=build_library(document, tags_by_id),
        tags=tags,
        route=build_routes(document),
        auto_edit=document.get_bool("autoEdit"),
        is_select=document.get_bool("isSelect"),
        is_batch_tag=document.get_bool("isBatchTag"),
        open_tab=document.get_int("openTab"),
        tutorial=document.get_str("tutorial"),
        theme=theme if isinstance(theme, dict) else {},
        **extra_fields(document, AppState),
    )


def migrate_beta3(document: Document, app_version: str) -> AppState:
    state = migrate_passthrough(document, app_version)
    renumber_library(state.library)
    return state
