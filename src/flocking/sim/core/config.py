from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, replace
from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from ..utils.math2d import _clamp_value

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised for configuration input that cannot be mapped onto a flock."""


class Shape(IntEnum):
    CIRCLE = 0
    TRIANGLE = 1


@dataclass(frozen=True)
class SettingDomain:
    min: float
    max: float
    step: float


# Declared input domains. Speeds and turn factor are fractions of canvas height.
SETTING_DOMAINS: Dict[str, SettingDomain] = {
    "size": SettingDomain(5, 25, 1),
    "shape": SettingDomain(0, 1, 1),
    "flock_size": SettingDomain(0, 50, 1),
    "min_speed": SettingDomain(0, 0.8, 0.01),
    "max_speed": SettingDomain(0.1, 2, 0.01),
    "perception_radius": SettingDomain(20, 100, 1),
    "turn_factor": SettingDomain(0, 2, 0.1),
    "separation_radius": SettingDomain(10, 50, 1),
    "separation_weight": SettingDomain(0, 2, 0.1),
    "alignment_weight": SettingDomain(0, 2, 0.1),
    "cohesion_weight": SettingDomain(0, 2, 0.1),
    "anchor_radius": SettingDomain(0, 100, 1),
    "anchored_cohesion_weight": SettingDomain(0, 2, 0.1),
}

SETTINGS_ORDER = (
    "size",
    "shape",
    "flock_size",
    "min_speed",
    "max_speed",
    "turn_factor",
    "separation_radius",
    "perception_radius",
    "separation_weight",
    "alignment_weight",
    "cohesion_weight",
    "anchor_radius",
    "anchored_cohesion_weight",
)

HEIGHT_SCALED_SETTINGS = frozenset({"min_speed", "max_speed", "turn_factor"})
INTEGER_SETTINGS = frozenset({"size", "shape", "flock_size"})


@dataclass
class BoidTypeConfig:
    name: str = "Boid"
    color: str = "#ffffff"
    size: int = 10
    shape: Shape = Shape.TRIANGLE
    flock_size: int = 20
    min_speed: float = 60.0
    max_speed: float = 180.0
    turn_factor: float = 60.0
    perception_radius: float = 50.0
    separation_radius: float = 20.0
    separation_weight: float = 1.0
    alignment_weight: float = 1.0
    cohesion_weight: float = 1.0
    anchor_radius: float = 50.0
    anchored_cohesion_weight: float = 1.0


# Preset values in declared units (speeds and turn factor relative to height).
_PRESETS: Dict[str, Dict[str, Any]] = {
    "Red": dict(
        color="#ff0000",
        size=10,
        shape=Shape.TRIANGLE,
        flock_size=5,
        min_speed=0.3,
        max_speed=0.3,
        perception_radius=100,
        turn_factor=0.15,
        separation_radius=50,
        separation_weight=1.0,
        alignment_weight=1.0,
        cohesion_weight=1.0,
        anchor_radius=50,
        anchored_cohesion_weight=1.0,
    ),
    "Yellow": dict(
        color="#ffff00",
        size=16,
        shape=Shape.TRIANGLE,
        flock_size=40,
        min_speed=0.8,
        max_speed=2.0,
        perception_radius=60,
        turn_factor=0.10,
        separation_radius=40,
        separation_weight=1.5,
        alignment_weight=1.0,
        cohesion_weight=0.5,
        anchor_radius=50,
        anchored_cohesion_weight=1.0,
    ),
    "Blue": dict(
        color="#0000ff",
        size=5,
        shape=Shape.TRIANGLE,
        flock_size=20,
        min_speed=1.4,
        max_speed=3.5,
        perception_radius=30,
        turn_factor=0.20,
        separation_radius=7,
        separation_weight=1.0,
        alignment_weight=1.5,
        cohesion_weight=1.3,
        anchor_radius=50,
        anchored_cohesion_weight=1.0,
    ),
    "Green": dict(
        color="#00ff00",
        size=12,
        shape=Shape.TRIANGLE,
        flock_size=2,
        min_speed=2.5,
        max_speed=5.0,
        perception_radius=40,
        turn_factor=0.10,
        separation_radius=15,
        separation_weight=0.8,
        alignment_weight=1.6,
        cohesion_weight=1.0,
        anchor_radius=50,
        anchored_cohesion_weight=1.0,
    ),
    "White": dict(
        color="#ffffff",
        size=10,
        shape=Shape.CIRCLE,
        flock_size=30,
        min_speed=1.0,
        max_speed=3.0,
        perception_radius=15,
        turn_factor=0.08,
        separation_radius=5,
        separation_weight=0.2,
        alignment_weight=0.5,
        cohesion_weight=0.5,
        anchor_radius=50,
        anchored_cohesion_weight=0.0,
    ),
}

PRESET_NAMES = tuple(_PRESETS)


def _to_world_units(values: Dict[str, Any], canvas_height: float) -> Dict[str, Any]:
    return {
        key: value * canvas_height if key in HEIGHT_SCALED_SETTINGS else value
        for key, value in values.items()
    }


def preset(name: str, canvas_height: float = 600.0) -> BoidTypeConfig:
    try:
        values = _PRESETS[name]
    except KeyError:
        raise ConfigError(f"unknown flock preset {name!r}; expected one of {', '.join(PRESET_NAMES)}") from None
    return BoidTypeConfig(name=name, **_to_world_units(values, canvas_height))


def default_boid_types(canvas_height: float = 600.0) -> List[BoidTypeConfig]:
    return [preset(name, canvas_height) for name in PRESET_NAMES]


def _parse_shape(value: Any) -> Shape:
    if isinstance(value, Shape):
        return value
    if isinstance(value, str):
        try:
            return Shape[value.upper()]
        except KeyError:
            raise ConfigError(f"unknown shape {value!r}") from None
    try:
        return Shape(int(value))
    except (TypeError, ValueError):
        raise ConfigError(f"unknown shape {value!r}") from None


def apply_setting(config: BoidTypeConfig, name: str, value: float, canvas_height: float) -> float:
    """Clamp ``value`` to the declared domain of ``name`` and write it to ``config``.

    Height-scaled settings are given as a fraction of canvas height and stored
    in world units. Returns the stored value. Callers changing ``flock_size``
    must reconcile the owning flock afterwards.
    """
    domain = SETTING_DOMAINS.get(name)
    if domain is None:
        raise ConfigError(f"unknown setting {name!r}")
    value = float(value)
    if math.isnan(value):
        raise ConfigError(f"setting {name!r} is not a number")
    clamped = _clamp_value(value, domain.min, domain.max)
    if name in INTEGER_SETTINGS:
        clamped = int(round(clamped))
    if name == "shape":
        stored: Any = Shape(clamped)
    elif name in HEIGHT_SCALED_SETTINGS:
        stored = clamped * canvas_height
    else:
        stored = clamped
    setattr(config, name, stored)
    return stored


def setting_value(config: BoidTypeConfig, name: str, canvas_height: float) -> float:
    """Read ``name`` back in its declared unit."""
    if name not in SETTING_DOMAINS:
        raise ConfigError(f"unknown setting {name!r}")
    value = getattr(config, name)
    if name in HEIGHT_SCALED_SETTINGS:
        return value / canvas_height if canvas_height else 0.0
    return value


@dataclass
class SimulationConfig:
    canvas_width: float = 800.0
    canvas_height: float = 600.0
    edge_margin: float = 25.0
    time_step: float = 1.0 / 60.0
    seed: Optional[int] = None
    active_flock: int = 0
    solo: bool = False
    cross_flock_collisions: bool = False
    flocks: Optional[List[BoidTypeConfig]] = None

    def __post_init__(self) -> None:
        if self.flocks is None:
            self.flocks = default_boid_types(self.canvas_height)
        if self.flocks and not 0 <= self.active_flock < len(self.flocks):
            raise ConfigError(f"active_flock {self.active_flock} out of range for {len(self.flocks)} flock(s)")

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        config = load_config(data)
        logger.info("Loaded %d flock(s) from %s", len(config.flocks), path)
        return config


_FLOCK_FIELDS = {f.name for f in fields(BoidTypeConfig)}
_SIM_FIELDS = {f.name for f in fields(SimulationConfig)} - {"flocks"}


def _load_flock(raw: Dict[str, Any], canvas_height: float) -> BoidTypeConfig:
    raw = dict(raw)
    base_name = raw.pop("preset", None)
    unknown = set(raw) - _FLOCK_FIELDS
    if unknown:
        raise ConfigError(f"unknown flock setting(s): {', '.join(sorted(unknown))}")
    if "shape" in raw:
        raw["shape"] = _parse_shape(raw["shape"])
    values = _to_world_units(raw, canvas_height)
    if base_name is not None:
        return replace(preset(base_name, canvas_height), **values)
    return BoidTypeConfig(**values)


def load_config(raw: dict) -> SimulationConfig:
    unknown = set(raw) - _SIM_FIELDS - {"flocks"}
    if unknown:
        raise ConfigError(f"unknown simulation setting(s): {', '.join(sorted(unknown))}")
    sim_values = {k: v for k, v in raw.items() if k != "flocks"}
    canvas_height = float(sim_values.get("canvas_height", SimulationConfig.canvas_height))
    if "flocks" in raw:
        flocks = [_load_flock(entry, canvas_height) for entry in raw["flocks"] or []]
    else:
        flocks = default_boid_types(canvas_height)
    return SimulationConfig(flocks=flocks, **sim_values)
