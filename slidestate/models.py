"""Core entity model.

Everything the migration engine produces is one of these types. The whole
AppState is a single unit on disk (data.json); nothing here has its own
persistence.

On disk every field is camelCase ("tagWeights", "isBatchTag"); attributes
are snake_case. Construction is lenient on purpose: loosely-typed values
fall back to defaults field by field, so documents written by older
releases still validate. Unknown keys are dropped, except on the records
that carry user data (AppState, Scene, LibrarySource), which keep them
and write them back out unchanged.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

WeightType = Literal["weight", "all", "none"]

TT_WEIGHT: WeightType = "weight"
TT_ALL: WeightType = "all"
TT_NONE: WeightType = "none"

HTF_VALUES = ("none", "left", "right", "random")
VTF_VALUES = ("none", "up", "down", "random")
TF_VALUES = ("constant", "random", "sin", "bpm")

EMPTY_CELL = -1


def _choice(value: Any, allowed: tuple[str, ...], default: str) -> str:
    return value if value in allowed else default


class Entity(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def dump(self) -> dict[str, Any]:
        """JSON-ready dict using the on-disk (camelCase) field names."""
        return self.model_dump(by_alias=True, mode="json")


class Tag(Entity):
    """A named label shared by library sources and weight groups."""

    id: int
    name: str = ""


class LibrarySource(Entity):
    """A directory or URL in the shared library."""

    model_config = ConfigDict(extra="allow")

    id: int = 0
    url: str
    tags: list[Tag] = Field(default_factory=list)


class WeightGroup(Entity):
    """One weighted choice of a generator scene.

    A group either stands for a single tag (``tag`` set) or for another
    scene's whole weight configuration (``rules`` set, one level deep).
    ``percent`` only means something when ``type == "weight"``.
    """

    type: WeightType = TT_WEIGHT
    percent: int = 0
    name: str = ""
    tag: Tag | None = None
    rules: list[WeightGroup] | None = None


class Scene(Entity):
    model_config = ConfigDict(extra="allow")

    id: int = 0
    name: str = ""
    sources: list[LibrarySource] = Field(default_factory=list)

    # Serialised weight maps written before 3.0.0-beta3. Cleared by migration.
    tag_weights: str | None = None
    scene_weights: str | None = None
    generator_weights: list[WeightGroup] | None = None

    zoom: bool = False
    zoom_start: float = 0
    zoom_end: float = 0
    horiz_trans_type: str = "none"
    horiz_trans_level: float = 0
    vert_trans_type: str = "none"
    vert_trans_level: float = 0
    trans_tf: str = Field(default="constant", alias="transTF")
    trans_duration: float = 0
    trans_duration_min: float = 0
    trans_duration_max: float = 0
    trans_sin_rate: float = 0
    trans_bpm_multi: float = Field(default=0, alias="transBPMMulti")

    @field_validator(
        "zoom_start", "zoom_end", "horiz_trans_level", "vert_trans_level",
        "trans_duration", "trans_duration_min", "trans_duration_max",
        "trans_sin_rate", "trans_bpm_multi",
        mode="before",
    )
    @classmethod
    def _number_or_zero(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return 0
        return value

    @field_validator("zoom", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        return bool(value)

    @field_validator("horiz_trans_type", mode="before")
    @classmethod
    def _horiz(cls, value: Any) -> str:
        return _choice(value, HTF_VALUES, "none")

    @field_validator("vert_trans_type", mode="before")
    @classmethod
    def _vert(cls, value: Any) -> str:
        return _choice(value, VTF_VALUES, "none")

    @field_validator("trans_tf", mode="before")
    @classmethod
    def _tf(cls, value: Any) -> str:
        return _choice(value, TF_VALUES, "constant")


class SceneGrid(Entity):
    """A height × width matrix of scene ids (EMPTY_CELL for blanks)."""

    id: int = 0
    name: str = ""
    height: int = 1
    width: int = 1
    grid: list[list[int]] = Field(default_factory=list)

    @field_validator("height", "width", mode="before")
    @classmethod
    def _positive(cls, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            return 1
        return value

    @model_validator(mode="after")
    def _fit_grid(self) -> SceneGrid:
        rows = [list(row[: self.width]) for row in self.grid[: self.height]]
        for row in rows:
            row.extend([EMPTY_CELL] * (self.width - len(row)))
        while len(rows) < self.height:
            rows.append([EMPTY_CELL] * self.width)
        self.grid = rows
        return self


class Route(Entity):
    """A navigation breadcrumb (e.g. kind="scene", value=<scene id>)."""

    kind: str
    value: Any = None


_CONFIG_DEFAULTS: dict[str, dict[str, Any]] = {
    "default_scene": {
        "zoom": False,
        "zoomStart": 1,
        "zoomEnd": 2,
        "horizTransType": "none",
        "horizTransLevel": 10,
        "vertTransType": "none",
        "vertTransLevel": 10,
        "transTF": "constant",
        "transDuration": 5000,
        "transDurationMin": 1000,
        "transDurationMax": 7000,
        "transSinRate": 100,
        "transBPMMulti": 10,
    },
    "display_settings": {
        "fullScreen": False,
        "startImmediately": False,
        "minImageSize": 200,
        "minVideoSize": 200,
        "maxInMemory": 120,
        "maxLoadingAtOnce": 25,
    },
    "general_settings": {
        "autoBackup": False,
        "autoBackupDays": 1,
        "confirmDelete": True,
    },
    "caching_settings": {
        "enabled": True,
        "directory": "",
        "maxSize": 500,
    },
}


class Config(Entity):
    """Application-wide settings.

    Each section is its defaults merged key-by-key with whatever was
    stored; sections the app no longer knows about are dropped.
    """

    default_scene: dict[str, Any] = Field(default_factory=dict)
    display_settings: dict[str, Any] = Field(default_factory=dict)
    general_settings: dict[str, Any] = Field(default_factory=dict)
    caching_settings: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _merge_defaults(cls, data: Any) -> dict[str, Any]:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if not isinstance(data, dict):
            data = {}
        merged: dict[str, Any] = {}
        for field, defaults in _CONFIG_DEFAULTS.items():
            section = dict(defaults)
            stored = data.get(to_camel(field), data.get(field))
            if isinstance(stored, dict):
                section.update(stored)
            merged[field] = section
        return merged


class AppState(Entity):
    """The root document: everything that lives in data.json."""

    model_config = ConfigDict(extra="allow")

    version: str | None = None
    config: Config = Field(default_factory=Config)
    scenes: list[Scene] = Field(default_factory=list)
    grids: list[SceneGrid] = Field(default_factory=list)
    library: list[LibrarySource] = Field(default_factory=list)
    tags: list[Tag] = Field(default_factory=list)
    route: list[Route] = Field(default_factory=list)

    # UI fields persisted alongside the data; carried, never interpreted.
    auto_edit: bool = False
    is_select: bool = False
    is_batch_tag: bool = False
    open_tab: int = 0
    tutorial: str | None = None
    theme: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def default(cls, version: str) -> AppState:
        return cls(version=version)
