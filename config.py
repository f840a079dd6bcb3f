"""
config.py

Central defaults for the gravity simulator (tune here, not scattered across files).

A JSON file can override any field of SimConfig, e.g.

    {"width": 800, "height": 600, "mass_range": [5, 1000]}
"""

import json
import logging
import math
from dataclasses import dataclass, fields
from typing import Tuple

from simulation import DEFAULT_MASS, GRAVITY, V_MAX

logger = logging.getLogger("gravity_sim.config")

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


class ConfigError(ValueError):
    """Raised for configuration values the simulator cannot run with."""


def _require_number(name, value, integral=False):
    kinds = int if integral else (int, float)
    if isinstance(value, bool) or not isinstance(value, kinds):
        kind = "an integer" if integral else "a number"
        raise ConfigError(f"{name} must be {kind}, got {value!r}")


@dataclass
class SimConfig:
    # Window
    width: int = 512
    height: int = 512
    resizable: bool = False
    title: str = "Gravity simulation"
    background: str = "black"
    frame_ms: int = 16

    # Physics
    gravity: float = GRAVITY
    v_max: float = V_MAX
    default_mass: float = DEFAULT_MASS

    # Toolbar sliders
    mass_range: Tuple[float, float] = (1.0, 500.0)
    velocity_range: Tuple[float, float] = (-5.0, 5.0)

    log_level: str = "INFO"

    def __post_init__(self):
        self.validate()

    def validate(self):
        for name in ("width", "height", "frame_ms"):
            _require_number(name, getattr(self, name), integral=True)
        for name in ("gravity", "v_max", "default_mass"):
            _require_number(name, getattr(self, name))
        for name in ("mass_range", "velocity_range"):
            value = getattr(self, name)
            if not isinstance(value, (tuple, list)) or len(value) != 2:
                raise ConfigError(f"{name} must be a pair of numbers, got {value!r}")
            for v in value:
                _require_number(name, v)
        if not isinstance(self.log_level, (str, int)) or isinstance(self.log_level, bool):
            raise ConfigError(f"log_level must be a level name or number, got {self.log_level!r}")
        if isinstance(self.log_level, str) and not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"unknown log_level {self.log_level!r}")

        if self.width <= 0 or self.height <= 0:
            raise ConfigError(f"window size must be positive, got {self.width}x{self.height}")
        if self.frame_ms <= 0:
            raise ConfigError(f"frame_ms must be positive, got {self.frame_ms}")
        if not math.isfinite(self.gravity):
            raise ConfigError(f"gravity must be finite, got {self.gravity}")
        if not self.v_max > 0:
            raise ConfigError(f"v_max must be positive, got {self.v_max}")
        if not self.default_mass > 0:
            raise ConfigError(f"default_mass must be positive, got {self.default_mass}")
        lo, hi = self.mass_range
        if not 0 < lo <= hi:
            raise ConfigError(f"mass_range must be positive and ordered, got {self.mass_range}")
        lo, hi = self.velocity_range
        if lo > hi:
            raise ConfigError(f"velocity_range must be ordered, got {self.velocity_range}")

    @classmethod
    def from_dict(cls, data: dict) -> "SimConfig":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r", key)
                continue
            kwargs[key] = tuple(value) if isinstance(value, list) else value
        return cls(**kwargs)


def load_config(path: str) -> SimConfig:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a JSON object at top level")
    return SimConfig.from_dict(data)


def configure_logging(level="INFO"):
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger("gravity_sim").setLevel(level)
