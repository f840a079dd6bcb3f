"""
simulation.py

Physics core for the gravity simulator.

Provides:
- Body class (pos/vel/acc/mass/color)
- normalize_or_zero, clamp_length_max: small vector helpers
- pairwise_force / net_forces: inverse-square attraction between bodies
- step: advance bodies in place by one frame
- BodyRegistry: ordered stack of live bodies
"""

import math
from typing import Iterator, List, Optional, Sequence

import numpy as np

GRAVITY = 6.674
V_MAX = 5.0
DEFAULT_MASS = 100.0
# below this squared distance two bodies count as coincident
MIN_DISTANCE_SQUARED = 1e-12
BLUEVIOLET = (138 / 255, 43 / 255, 226 / 255)


class InvalidBodyError(ValueError):
    """Raised when a body is created with state the engine cannot integrate."""


class InvalidMassError(InvalidBodyError):
    """Raised when a body is created with a non-positive or non-finite mass."""


def _finite_vec2(value, name) -> np.ndarray:
    try:
        v = np.array(value, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidBodyError(f"body {name} must be a 2D vector, got {value!r}") from e
    if v.shape != (2,):
        raise InvalidBodyError(f"body {name} must be a 2D vector, got shape {v.shape}")
    if not np.all(np.isfinite(v)):
        raise InvalidBodyError(f"body {name} must be finite, got {v}")
    return v


class Body:
    def __init__(self,
                 position,
                 velocity=(0.0, 0.0),
                 mass=DEFAULT_MASS,
                 color=BLUEVIOLET):
        """
        position, velocity : 2-element iterables (pixel space)
        mass : strictly positive scalar
        color : (r, g, b) floats in [0, 1], only used by the GUI
        """
        mass = float(mass)
        if not math.isfinite(mass) or mass <= 0.0:
            raise InvalidMassError(f"body mass must be positive and finite, got {mass!r}")
        self.mass = mass
        self.position = _finite_vec2(position, "position")
        self.velocity = _finite_vec2(velocity, "velocity")
        self.acceleration = np.zeros(2, dtype=float)
        self.color = tuple(float(c) for c in color)

    @property
    def radius(self) -> float:
        return self.mass / 20.0

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    def __repr__(self):
        return f"<Body mass={self.mass:.3g} pos={self.position} vel={self.velocity}>"

# --- Vector helpers ---


def normalize_or_zero(v) -> np.ndarray:
    """Unit vector along `v`, or the zero vector if `v` has no usable length."""
    v = np.asarray(v, dtype=float)
    norm = np.linalg.norm(v)
    if norm == 0.0 or not np.isfinite(norm):
        return np.zeros_like(v)
    return v / norm


def clamp_length_max(v, max_length: float) -> np.ndarray:
    v = np.asarray(v, dtype=float)
    norm = np.linalg.norm(v)
    if norm > max_length:
        out = v * (max_length / norm)
        # rounding can leave the result a few ulps long
        while np.linalg.norm(out) > max_length:
            out *= np.nextafter(1.0, 0.0)
        return out
    return v.copy()

# --- Force law ---


def pairwise_force(position, other_position, mass: float, other_mass: float,
                   G_const: float = GRAVITY) -> np.ndarray:
    """
    Force on the body at `position` caused by the body at `other_position`.
    Coincident bodies exert no force on each other.
    """
    position = np.asarray(position, dtype=float)
    r = np.asarray(other_position, dtype=float) - position
    dist2 = float(np.dot(r, r))
    if dist2 <= MIN_DISTANCE_SQUARED:
        return np.zeros(2, dtype=float)
    direction = r / math.sqrt(dist2)
    return G_const * mass * other_mass * direction / dist2


def net_forces(positions: np.ndarray, masses: np.ndarray, G_const: float = GRAVITY) -> np.ndarray:
    """
    positions: (N,2) array
    masses: (N,) array
    returns: (N,2) net force on each body, row i holding the pull of every j != i
    """
    positions = np.asarray(positions, dtype=float)
    masses = np.asarray(masses, dtype=float)
    N = positions.shape[0]
    if N == 0:
        return np.zeros((0, 2), dtype=float)

    # r_ij = r_j - r_i
    r = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]  # (N,N,2)
    dist2 = np.sum(r * r, axis=2)                                   # (N,N)
    # diagonal is always coincident, so self pairs drop out here too
    coincident = dist2 <= MIN_DISTANCE_SQUARED
    safe_dist2 = np.where(coincident, 1.0, dist2)
    direction = r / np.sqrt(safe_dist2)[:, :, np.newaxis]
    magnitude = G_const * masses[:, np.newaxis] * masses[np.newaxis, :] / safe_dist2
    magnitude[coincident] = 0.0
    return np.sum(direction * magnitude[:, :, np.newaxis], axis=1)


def step(bodies: Sequence[Body], G_const: float = GRAVITY, v_max: float = V_MAX):
    """
    Advance `bodies` in place by one frame and return them.

    All forces are computed from the positions at the start of the step
    before any body is moved.
    """
    if not bodies:
        return bodies

    positions = np.array([b.position for b in bodies], dtype=float)
    masses = np.array([b.mass for b in bodies], dtype=float)
    forces = net_forces(positions, masses, G_const)

    for b, force in zip(bodies, forces):
        b.acceleration = normalize_or_zero(force) / b.mass
        b.velocity = clamp_length_max(b.velocity + b.acceleration, v_max)
        b.position = b.position + b.velocity
    return bodies


class BodyRegistry:
    """Ordered collection of live bodies. Removal is always of the newest one."""

    def __init__(self, bodies=None):
        self._bodies: List[Body] = list(bodies) if bodies else []

    def add(self, body: Body) -> Body:
        self._bodies.append(body)
        return body

    def remove_last(self) -> Optional[Body]:
        if not self._bodies:
            return None
        return self._bodies.pop()

    def clear(self):
        self._bodies.clear()

    def step(self, G_const: float = GRAVITY, v_max: float = V_MAX):
        step(self._bodies, G_const, v_max)
        return self

    def __len__(self):
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def __getitem__(self, index) -> Body:
        return self._bodies[index]

    def __repr__(self):
        return f"<BodyRegistry n={len(self._bodies)}>"
