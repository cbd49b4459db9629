"""Weight normalizer — legacy weight maps to WeightGroup trees.

Generator scenes saved before 3.0.0-beta3 stored their weights as two
serialised maps:

    tagWeights    [[{"id": 1, "name": "A"}, {"type": "weight", "value": 30}], ...]
    sceneWeights  [[7, {"type": "weight", "value": 10}], ...]

Values are arbitrary non-negative numbers. The current format stores a
list of WeightGroup whose "weight"-typed percents add up to exactly 100
(or to 0 when nothing had a positive weight). Conversion:

  1. sum   = every value in both maps together
  2. tag entry kept when type != "weight" or value > 0;
     percent = round(value / sum * 100), 0 for non-positive values
  3. scene entry with value > 0 becomes one group whose rules are the
     referenced scene's own tag weights, normalised the same way against
     that scene's own sum. Only one level: the referenced scene's
     sceneWeights are never followed.
  4. rounding slack (100 - Σ weight percents) goes to the first
     "weight"-typed entry, for the top level and for each rules list.
"""

from __future__ import annotations

import json
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from slidestate.errors import MigrationError
from slidestate.models import TT_ALL, TT_NONE, TT_WEIGHT, Tag, WeightGroup

_WEIGHT_TYPES = (TT_WEIGHT, TT_ALL, TT_NONE)

TagResolver = Callable[[Mapping[str, Any]], Tag]
SceneTagWeights = Callable[[int], "str | None"]


@dataclass(frozen=True)
class WeightSpec:
    """One legacy {type, value} weight descriptor."""

    type: str
    value: float


def _number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return 0.0
    return 0.0


def _entries(raw: str | list | None, field: str) -> list[tuple[Any, WeightSpec]]:
    if raw is None or raw == "":
        return []
    data = json.loads(raw) if isinstance(raw, str) else raw
    if data is None:
        return []
    if not isinstance(data, list):
        raise MigrationError(f"{field} must hold a list of [key, weight] pairs")

    entries: list[tuple[Any, WeightSpec]] = []
    for item in data:
        if not isinstance(item, (list, tuple)) or len(item) != 2:
            raise MigrationError(f"{field} entry is not a [key, weight] pair: {item!r}")
        key, spec = item
        if not isinstance(spec, Mapping):
            raise MigrationError(f"{field} weight must be an object: {spec!r}")
        weight_type = spec.get("type", TT_WEIGHT)
        if weight_type not in _WEIGHT_TYPES:
            raise MigrationError(f"Unknown weight type {weight_type!r} in {field}")
        entries.append((key, WeightSpec(type=weight_type, value=_number(spec.get("value")))))
    return entries


def decode_tag_weights(raw: str | list | None) -> list[tuple[Mapping[str, Any], WeightSpec]]:
    """Decode a serialised tagWeights map into (tag data, weight) pairs."""
    entries = _entries(raw, "tagWeights")
    for tag_data, _ in entries:
        if not isinstance(tag_data, Mapping):
            raise MigrationError(f"tagWeights key must be a tag object: {tag_data!r}")
    return entries


def decode_scene_weights(raw: str | list | None) -> list[tuple[int, WeightSpec]]:
    """Decode a serialised sceneWeights map into (scene id, weight) pairs.

    Ids are map keys: a repeated id keeps its first position and its last
    weight.
    """
    by_id: dict[int, WeightSpec] = {}
    for key, spec in _entries(raw, "sceneWeights"):
        try:
            scene_id = int(key)
        except (TypeError, ValueError) as exc:
            raise MigrationError(f"sceneWeights key is not a scene id: {key!r}") from exc
        by_id[scene_id] = spec
    return list(by_id.items())


def weight_sum(specs: list[WeightSpec]) -> float:
    return sum((spec.value for spec in specs), 0.0)


def round_half_away(value: float) -> int:
    return int(math.copysign(math.floor(abs(value) + 0.5), value))


def to_percent(value: float, total: float) -> int:
    """value as an integer share of total; 0 when there is nothing to share."""
    if value <= 0 or total == 0:
        return 0
    return round_half_away(value / total * 100)


def tag_groups(
    entries: list[tuple[Mapping[str, Any], WeightSpec]],
    total: float,
    resolve_tag: TagResolver,
) -> list[WeightGroup]:
    groups: list[WeightGroup] = []
    for tag_data, spec in entries:
        if spec.type == TT_WEIGHT and spec.value <= 0:
            continue
        tag = resolve_tag(tag_data)
        groups.append(WeightGroup(
            type=spec.type,
            percent=to_percent(spec.value, total),
            name=tag.name,
            tag=tag,
        ))
    return groups


def describe_rules(rules: list[WeightGroup]) -> str:
    """Display name for a group of rules, e.g. "75% Red, Y Blue, N Green"."""
    parts: list[str] = []
    for rule in rules:
        if rule.type == TT_WEIGHT:
            parts.append(f"{rule.percent}% {rule.name}")
        elif rule.type == TT_ALL:
            parts.append(f"Y {rule.name}")
        else:
            parts.append(f"N {rule.name}")
    return ", ".join(parts)


def correct_rounding(groups: list[WeightGroup]) -> None:
    """Make the "weight"-typed percents of one sibling list add up to 100."""
    weighted = [g for g in groups if g.type == TT_WEIGHT]
    remaining = 100 - sum(g.percent for g in weighted)
    if weighted and remaining != 0 and remaining != 100:
        weighted[0].percent += remaining


def _scene_group(
    raw_tag_weights: str | list,
    percent: int,
    resolve_tag: TagResolver,
) -> WeightGroup:
    entries = decode_tag_weights(raw_tag_weights)
    rules = tag_groups(entries, weight_sum([spec for _, spec in entries]), resolve_tag)
    # Label shows the uncorrected percents.
    name = describe_rules(rules)
    correct_rounding(rules)
    return WeightGroup(type=TT_WEIGHT, percent=percent, name=name, rules=rules)


def build_generator_weights(
    tag_weights: str | list | None,
    scene_weights: str | list | None,
    scene_tag_weights: SceneTagWeights,
    resolve_tag: TagResolver = Tag.model_validate,
) -> list[WeightGroup]:
    """Convert one scene's legacy weight maps into its generator weights.

    ``scene_tag_weights(scene_id)`` returns the raw tagWeights of the
    referenced scene (None when it has none) and raises MigrationError for
    an id that does not exist.
    """
    tag_entries = decode_tag_weights(tag_weights)
    scene_entries = decode_scene_weights(scene_weights)
    total = weight_sum(
        [spec for _, spec in tag_entries] + [spec for _, spec in scene_entries]
    )

    groups = tag_groups(tag_entries, total, resolve_tag)
    for scene_id, spec in scene_entries:
        if spec.value <= 0:
            continue
        referenced = scene_tag_weights(scene_id)
        if not referenced:
            continue
        groups.append(_scene_group(referenced, to_percent(spec.value, total), resolve_tag))

    correct_rounding(groups)
    return groups
