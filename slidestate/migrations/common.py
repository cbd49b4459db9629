"""Pieces shared by the migration paths."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from slidestate.document import Document
from slidestate.errors import MigrationError
from slidestate.models import (
    Config,
    LibrarySource,
    Route,
    Scene,
    SceneGrid,
    Tag,
    WeightGroup,
)


def require_documents(document: Document, key: str) -> list[Document]:
    """The objects of a list field that every format of its era must carry."""
    items = document.require_list(key)
    for item in items:
        if not isinstance(item, Mapping):
            raise MigrationError(f"Expected every entry of '{key}' to be an object")
    return [Document(item) for item in items]


def renumber_library(library: list[LibrarySource]) -> None:
    """Reassign library ids to their list position: 0..N-1."""
    for i, source in enumerate(library):
        source.id = i


def extra_fields(document: Document, model: type[BaseModel]) -> dict[str, Any]:
    """Top-level keys of ``document`` that ``model`` has no field for."""
    known: set[str] = set()
    for name, field in model.model_fields.items():
        known.add(name)
        known.add(field.alias or name)
    return {key: value for key, value in document.raw.items() if key not in known}


def build_tags(document: Document) -> list[Tag]:
    return [Tag.model_validate(t.raw) for t in document.get_documents("tags")]


def build_config(document: Document) -> Config:
    return Config.model_validate(document.get_mapping("config"))


def build_routes(document: Document) -> list[Route]:
    return [Route.model_validate(r.raw) for r in document.get_documents("route")]


def build_grids(document: Document) -> list[SceneGrid]:
    return [SceneGrid.model_validate(g.raw) for g in document.get_documents("grids")]


def build_library(document: Document, tags_by_id: dict[int, Tag]) -> list[LibrarySource]:
    library = [LibrarySource.model_validate(s.raw) for s in require_documents(document, "library")]
    for source in library:
        share_tags(source, tags_by_id)
    return library


def build_scenes(document: Document, tags_by_id: dict[int, Tag]) -> list[Scene]:
    scenes = [Scene.model_validate(s.raw) for s in require_documents(document, "scenes")]
    for scene in scenes:
        for source in scene.sources:
            share_tags(source, tags_by_id)
        if scene.generator_weights:
            share_weight_tags(scene.generator_weights, tags_by_id)
    return scenes


def share_tags(source: LibrarySource, tags_by_id: dict[int, Tag]) -> None:
    """Point a source's tags at the AppState's own Tag records."""
    source.tags = [tags_by_id.get(tag.id, tag) for tag in source.tags]


def share_weight_tags(groups: list[WeightGroup], tags_by_id: dict[int, Tag]) -> None:
    for group in groups:
        if group.tag is not None:
            group.tag = tags_by_id.get(group.tag.id, group.tag)
        if group.rules:
            share_weight_tags(group.rules, tags_by_id)


def tag_resolver(tags_by_id: dict[int, Tag]):
    """Map raw tag data from a legacy weight map onto the shared Tag records."""

    def resolve(data: Mapping[str, Any]) -> Tag:
        tag = Tag.model_validate(data)
        return tags_by_id.get(tag.id, tag)

    return resolve
