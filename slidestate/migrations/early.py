"""Releases 2.0.0 through 3.0.0-beta2.

These saves already have a library and tags, but generator scenes keep
their weights in the serialised tagWeights/sceneWeights maps. Each such
scene gets a normalised generatorWeights list and its legacy maps are
cleared. Grids and routes did not exist yet and start empty.
"""

from __future__ import annotations

import logging

from slidestate.document import Document
from slidestate.errors import MigrationError
from slidestate.models import AppState
from slidestate.weights import build_generator_weights

from .common import (
    build_config,
    build_library,
    build_scenes,
    build_tags,
    renumber_library,
    tag_resolver,
)

logger = logging.getLogger(__name__)

EARLY_VERSIONS = (
    "2.0.0",
    "2.1.0",
    "2.1.1",
    "2.2.0",
    "2.2.1",
    "2.3.0",
    "2.3.1",
    "2.3.2",
    "3.0.0-beta1",
    "3.0.0-beta2",
)


def migrate_early(document: Document, app_version: str) -> AppState:
    tags = build_tags(document)
    tags_by_id = {tag.id: tag for tag in tags}
    library = build_library(document, tags_by_id)
    scenes = build_scenes(document, tags_by_id)

    # Referenced scenes are expanded from their weights as saved, whatever
    # order the scenes are migrated in.
    saved_tag_weights: dict[int, str | None] = {}
    for scene in scenes:
        saved_tag_weights.setdefault(scene.id, scene.tag_weights)

    def scene_tag_weights(scene_id: int) -> str | None:
        if scene_id not in saved_tag_weights:
            raise MigrationError(f"Weighted scene {scene_id} does not exist")
        return saved_tag_weights[scene_id]

    resolve_tag = tag_resolver(tags_by_id)
    for scene in scenes:
        if not scene.tag_weights and not scene.scene_weights:
            continue
        scene.generator_weights = build_generator_weights(
            scene.tag_weights, scene.scene_weights, scene_tag_weights, resolve_tag,
        )
        scene.tag_weights = None
        scene.scene_weights = None
        logger.debug(
            "scene %s: %d generator weight groups", scene.id, len(scene.generator_weights)
        )

    renumber_library(library)

    return AppState(
        version=app_version,
        config=build_config(document),
        scenes=scenes,
        library=library,
        tags=tags,
        auto_edit=document.get_bool("autoEdit"),
        is_select=document.get_bool("isSelect"),
        is_batch_tag=document.get_bool("isBatchTag"),
    )
