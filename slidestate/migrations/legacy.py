"""Pre-versioning saves (before 2.0.0): no version field, no library.

Each scene listed its own directories. The library is rebuilt from every
directory across every scene, de-duplicated in first-seen order.
"""

from __future__ import annotations

from slidestate.document import Document
from slidestate.models import AppState, LibrarySource, Scene

from .common import build_config, build_routes, require_documents


def _directories(scene: Document) -> list[str]:
    return [d for d in scene.get_list("directories") if isinstance(d, str)]


def migrate_legacy(
    document: Document,
    app_version: str,
    *,
    scene_local_ids: bool = False,
) -> AppState:
    """Build an AppState with a shared library out of per-scene directories.

    Scene sources are the library's own records (and carry library ids).
    ``scene_local_ids=True`` instead gives each scene fresh copies numbered
    0..n-1 within that scene, which is what 2.0.0 wrote on its first save.
    """
    old_scenes = require_documents(document, "scenes")

    urls: list[str] = []
    for old in old_scenes:
        urls.extend(_directories(old))
    unique = list(dict.fromkeys(urls))

    library = [LibrarySource(id=i, url=url) for i, url in enumerate(unique)]
    by_url = {source.url: source for source in library}

    scenes: list[Scene] = []
    for old in old_scenes:
        scene = Scene.model_validate(
            {key: value for key, value in old.raw.items() if key != "directories"}
        )
        directories = _directories(old)
        if scene_local_ids:
            scene.sources = [
                LibrarySource(id=i, url=url) for i, url in enumerate(directories)
            ]
        else:
            scene.sources = [by_url[url] for url in directories]
        scenes.append(scene)

    return AppState(
        version=app_version,
        config=build_config(document),
        scenes=scenes,
        library=library,
        route=build_routes(document),
        auto_edit=document.get_bool("autoEdit"),
        is_select=document.get_bool("isSelect"),
        is_batch_tag=document.get_bool("isBatchTag"),
        open_tab=document.get_int("openTab"),
    )
