"""
controls.py

Glue between input events and the physics core.

Provides:
- PendingBodySettings: mass/velocity/color the next body will be created with
- AddBody / RemoveLast: commands produced by the GUI
- SimulationContext: owns the registry and applies commands between frames
- rgb_to_hex / hex_to_rgb: color conversions for the GUI
- screen_to_world / world_to_screen: canvas pixels <-> centre-origin, y-up space
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

import numpy as np

from simulation import (
    BLUEVIOLET, DEFAULT_MASS, GRAVITY, V_MAX,
    Body, BodyRegistry, InvalidBodyError,
)

logger = logging.getLogger("gravity_sim.controls")

Vec2 = Tuple[float, float]
RGB = Tuple[float, float, float]


def rgb_to_hex(color: RGB) -> str:
    """(r, g, b) floats in [0, 1] -> '#rrggbb'"""
    channels = [int(round(min(max(float(c), 0.0), 1.0) * 255)) for c in color]
    return "#{:02x}{:02x}{:02x}".format(*channels)


def hex_to_rgb(value: str) -> RGB:
    value = value.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"expected a #rrggbb color, got {value!r}")
    return tuple(int(value[i:i + 2], 16) / 255 for i in (0, 2, 4))


# world origin is the canvas centre, y up, one unit per pixel
def screen_to_world(sx, sy, width, height) -> Vec2:
    return sx - width / 2, height / 2 - sy


def world_to_screen(wx, wy, width, height) -> Vec2:
    return wx + width / 2, height / 2 - wy


@dataclass
class PendingBodySettings:
    mass: float = DEFAULT_MASS
    velocity: Vec2 = (0.0, 0.0)
    color: RGB = BLUEVIOLET


@dataclass(frozen=True)
class AddBody:
    position: Vec2
    mass: float = DEFAULT_MASS
    velocity: Vec2 = (0.0, 0.0)
    color: RGB = BLUEVIOLET

    @classmethod
    def from_settings(cls, position, settings: PendingBodySettings) -> "AddBody":
        return cls(tuple(position), settings.mass, tuple(settings.velocity), tuple(settings.color))


@dataclass(frozen=True)
class RemoveLast:
    pass


@dataclass
class SimulationContext:
    """
    All state of one running simulation.

    Commands submitted while a frame is being handled are queued and only
    applied at the start of the next step, never in the middle of one.
    """
    registry: BodyRegistry = field(default_factory=BodyRegistry)
    settings: PendingBodySettings = field(default_factory=PendingBodySettings)
    gravity: float = GRAVITY
    v_max: float = V_MAX
    paused: bool = False
    frame: int = 0
    _queue: deque = field(default_factory=deque, repr=False)

    # ------------- body management -------------
    def add_body(self, position, mass=DEFAULT_MASS, velocity=(0.0, 0.0), color=BLUEVIOLET) -> Body:
        b = Body(position, velocity, mass, color=color)
        self.registry.add(b)
        logger.info("Added body mass=%.3g at (%.1f, %.1f); planets: %d",
                    b.mass, b.position[0], b.position[1], len(self.registry))
        return b

    def remove_last_body(self) -> Optional[Body]:
        b = self.registry.remove_last()
        if b is None:
            logger.debug("Nothing to remove, registry is empty")
            return None
        logger.info("Planets left: %d", len(self.registry))
        return b

    def clear(self):
        self._queue.clear()
        self.registry.clear()
        logger.info("Cleared all bodies")

    # ------------- commands -------------
    def apply(self, command):
        if isinstance(command, AddBody):
            try:
                return self.add_body(command.position, command.mass, command.velocity, command.color)
            except InvalidBodyError as e:
                logger.warning("Rejected body: %s", e)
                return None
        if isinstance(command, RemoveLast):
            return self.remove_last_body()
        raise TypeError(f"unknown command: {command!r}")

    def submit(self, command):
        self._queue.append(command)

    def apply_pending(self) -> int:
        n = 0
        while self._queue:
            self.apply(self._queue.popleft())
            n += 1
        return n

    # ------------- frame -------------
    def step(self) -> bool:
        """Apply queued commands, then advance one frame unless paused."""
        self.apply_pending()
        if self.paused:
            return False
        self.registry.step(self.gravity, self.v_max)
        self.frame += 1
        return True

    def for_each_body(self, callback: Callable[[np.ndarray, float, RGB], None]):
        for b in self.registry:
            callback(b.position.copy(), b.mass, b.color)