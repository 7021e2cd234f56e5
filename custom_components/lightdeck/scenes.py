"""Scene catalog for Tuya lights.

Scenes are canned multi-step light-shows bound to slots 1-8. The table is
kept as data in ``scenes.json`` next to this module and loaded once at
import time; adding a scene only means editing that file.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .models import SceneDescriptor, SceneUnit, TransitionMode

_LOGGER = logging.getLogger(__name__)

CATALOG_FILE = Path(__file__).parent / "scenes.json"


@dataclass(frozen=True)
class SceneCatalog:
    """Static scene table with a synthesized default for unknown slots."""

    scenes: dict[int, SceneDescriptor]
    default_name: str
    default_units: tuple[SceneUnit, ...]

    def lookup(self, slot: int) -> SceneDescriptor:
        """Return the descriptor for a slot, never raising."""
        if slot in self.scenes:
            return self.scenes[slot]
        return SceneDescriptor(
            scene_num=slot, units=self.default_units, name=self.default_name
        )

    def available_slots(self) -> list[int]:
        return sorted(self.scenes)


def _parse_unit(raw: dict[str, Any]) -> SceneUnit:
    return SceneUnit(
        unit_change_mode=TransitionMode(raw["unit_change_mode"]),
        unit_switch_duration=int(raw["unit_switch_duration"]),
        unit_gradient_duration=int(raw["unit_gradient_duration"]),
        h=int(raw["h"]),
        s=int(raw["s"]),
        v=int(raw["v"]),
        bright=int(raw["bright"]),
        temperature=int(raw["temperature"]),
    )


def parse_catalog(data: dict[str, Any]) -> SceneCatalog:
    """Build a SceneCatalog from its JSON representation.

    Args:
        data: Mapping with a "default" entry and a "scenes" mapping keyed
            by slot number.

    Returns:
        The parsed catalog.

    Raises:
        KeyError: If a required field is missing.
        ValueError: If a transition mode or slot number is invalid.

    """
    scenes = {}
    for slot, raw_scene in data["scenes"].items():
        scene_num = int(slot)
        scenes[scene_num] = SceneDescriptor(
            scene_num=scene_num,
            units=tuple(_parse_unit(unit) for unit in raw_scene["units"]),
            name=raw_scene.get("name", f"Scene {scene_num}"),
        )

    default = data["default"]
    return SceneCatalog(
        scenes=scenes,
        default_name=default.get("name", ""),
        default_units=tuple(_parse_unit(unit) for unit in default["units"]),
    )


def load_catalog(path: Path = CATALOG_FILE) -> SceneCatalog:
    with path.open(encoding="utf-8") as catalog_file:
        catalog = parse_catalog(json.load(catalog_file))
    _LOGGER.debug("Loaded %d scenes from %s", len(catalog.scenes), path.name)
    return catalog


CATALOG = load_catalog()


def lookup(slot: int) -> SceneDescriptor:
    """Return the scene descriptor for a slot.

    Slots 1-8 come from the catalog file. Any other slot gets a single
    static white unit tagged with the requested slot number so the vendor
    request stays self-consistent.
    """
    return CATALOG.lookup(slot)


def available_slots() -> list[int]:
    return CATALOG.available_slots()


def scene_name(slot: int) -> str:
    return f"Scene {slot}: {CATALOG.lookup(slot).name}"
