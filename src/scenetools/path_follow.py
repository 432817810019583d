"""
Runtime followers that move an object along a path.

PathFollower loops along the path at a fixed speed. ClosestPointFollower
tracks the point of the path closest to a listener (e.g. an audio source
following a river while staying as close as possible to the player's head).

Positions are measured in path units: the integer part is the waypoint
segment, the fractional part the position inside it. PathFollower works in
distance along the path instead.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import math
from typing import Optional, Sequence, Tuple

import numpy as np

Vector3 = np.ndarray

MIN_SPEED = 0.1
MAX_SPEED = 10.0


def vec3(v) -> Vector3:
    return np.asarray(v, dtype=np.float64).reshape(3)


WORLD_UP = vec3((0.0, 1.0, 0.0))


def normalized(v: Vector3) -> Vector3:
    n = np.linalg.norm(v)
    return v / n if n > 1e-9 else np.zeros(3)


def closest_on_segment(p: Vector3, a: Vector3, b: Vector3) -> float:
    """Parameter in [0, 1] of the point on segment ab closest to p."""
    ab = b - a
    denom = np.dot(ab, ab)
    if denom < 1e-12:
        return 0.0
    return float(np.clip(np.dot(p - a, ab) / denom, 0.0, 1.0))


@dataclass(frozen=True, eq=False)
class Frame:
    """Orthonormal orientation: right is X, up is Y, forward is Z."""
    right: Vector3 = field(default_factory=lambda: vec3((1.0, 0.0, 0.0)))
    up: Vector3 = field(default_factory=lambda: vec3((0.0, 1.0, 0.0)))
    forward: Vector3 = field(default_factory=lambda: vec3((0.0, 0.0, 1.0)))

    @classmethod
    def look_along(cls, forward, up=WORLD_UP) -> 'Frame':
        forward = normalized(vec3(forward))
        if not forward.any():
            return cls()
        right = normalized(np.cross(vec3(up), forward))
        if not right.any():
            # Looking straight up or down
            right = vec3((1.0, 0.0, 0.0))
        return cls(right=right, up=np.cross(forward, right), forward=forward)

    @property
    def basis(self) -> np.ndarray:
        """3x3 matrix with right, up and forward as columns."""
        return np.column_stack((self.right, self.up, self.forward))

    def transform(self, local) -> Vector3:
        """Local offset (x right, y up, z forward) to world space."""
        return self.basis @ vec3(local)


@dataclass(frozen=True, eq=False)
class Pose:
    position: Vector3
    frame: Frame


class PathCurve(ABC):
    """A path through waypoints, evaluated in path units."""

    @property
    @abstractmethod
    def max_unit(self) -> float:
        """Last valid path unit; the first is 0."""

    @property
    @abstractmethod
    def path_length(self) -> float:
        """Total length in distance units."""

    @abstractmethod
    def evaluate_position(self, unit: float) -> Vector3:
        pass

    @abstractmethod
    def evaluate_tangent(self, unit: float) -> Vector3:
        pass

    @abstractmethod
    def unit_from_distance(self, distance: float) -> float:
        pass

    def evaluate_frame(self, unit: float) -> Frame:
        return Frame.look_along(self.evaluate_tangent(unit))

    def evaluate_pose(self, unit: float) -> Pose:
        return Pose(self.evaluate_position(unit), self.evaluate_frame(unit))

    def find_closest_point(self, p, start_segment: int = 0, search_radius: int = -1,
                           steps_per_segment: int = 2) -> float:
        """Path unit of the point closest to ``p``.

        Args:
            p: World position to approach.
            start_segment: Segment the search is centred on.
            search_radius: Segments searched on either side of the start;
                negative searches the whole path.
            steps_per_segment: Straight pieces each segment is divided into.
                Higher is more accurate and proportionally slower.
        """
        p = vec3(p)
        start, end = 0.0, self.max_unit
        if search_radius >= 0:
            radius = int(math.floor(min(search_radius, (end - start) / 2)))
            start = max(start, float(start_segment - radius))
            end = min(end, float(start_segment + radius + 1))

        steps_per_segment = int(round(min(100, max(1, steps_per_segment))))
        step = 1.0 / steps_per_segment
        best_unit = float(start_segment)
        best_distance = math.inf
        iterations = 1 if steps_per_segment == 1 else 3

        for _ in range(iterations):
            v0 = self.evaluate_position(start)
            count = int(math.floor((end - start) / step + 1e-6))
            for i in range(1, count + 1):
                f = start + i * step
                v = self.evaluate_position(f)
                t = closest_on_segment(p, v0, v)
                d = float(np.sum((p - (v0 + (v - v0) * t)) ** 2))
                if d < best_distance:
                    best_distance = d
                    best_unit = f - (1.0 - t) * step
                v0 = v
            start = max(0.0, best_unit - step)
            end = min(self.max_unit, best_unit + step)
            step *= 0.25

        return best_unit


class PolylinePath(PathCurve):
    """Straight segments between waypoints."""

    def __init__(self, waypoints: Sequence[Sequence[float]]):
        if len(waypoints) < 2:
            raise ValueError("A path needs at least two waypoints")
        self.waypoints = np.asarray(waypoints, dtype=np.float64).reshape(-1, 3)
        segment_lengths = np.linalg.norm(np.diff(self.waypoints, axis=0), axis=1)
        self._distances = np.concatenate(([0.0], np.cumsum(segment_lengths)))

    @property
    def max_unit(self) -> float:
        return float(len(self.waypoints) - 1)

    @property
    def path_length(self) -> float:
        return float(self._distances[-1])

    def _segment(self, unit: float) -> Tuple[int, float]:
        unit = float(np.clip(unit, 0.0, self.max_unit))
        index = min(int(math.floor(unit)), len(self.waypoints) - 2)
        return index, unit - index

    def evaluate_position(self, unit: float) -> Vector3:
        index, t = self._segment(unit)
        a, b = self.waypoints[index], self.waypoints[index + 1]
        return a + (b - a) * t

    def evaluate_tangent(self, unit: float) -> Vector3:
        index, _ = self._segment(unit)
        return normalized(self.waypoints[index + 1] - self.waypoints[index])

    def unit_from_distance(self, distance: float) -> float:
        distance = float(np.clip(distance, 0.0, self.path_length))
        index = int(np.searchsorted(self._distances, distance, side='right')) - 1
        index = min(index, len(self.waypoints) - 2)
        span = self._distances[index + 1] - self._distances[index]
        return index + (float((distance - self._distances[index]) / span) if span > 0 else 0.0)


class PathFollower:
    """Moves along a path by ``speed`` distance units per second, restarting at the end."""

    def __init__(self, path: Optional[PathCurve] = None, speed: float = 1.0):
        self.path = path
        self.speed = 1.0
        self.distance = 0.0
        self.set_speed(speed)

    def set_speed(self, speed: float) -> None:
        self.speed = float(np.clip(speed, MIN_SPEED, MAX_SPEED))

    def update(self, dt: float) -> Optional[Pose]:
        if self.path is None:
            return None
        self.distance += self.speed * dt
        if self.distance > self.path.path_length:
            self.distance = 0.0
        return self.path.evaluate_pose(self.path.unit_from_distance(self.distance))


class ClosestPointFollower:
    """Tracks the path point closest to a listener.

    ``path_offset`` is applied in the path's local frame: X perpendicular to
    the path, Y up and Z along it. ``position_offset`` shifts the closest
    point along the path, in path units.
    """

    def __init__(self, path: Optional[PathCurve] = None, *, path_offset=(0.0, 0.0, 0.0),
                 position_offset: float = 0.0, search_radius: int = 2, search_resolution: int = 2):
        self.path = path
        self.path_offset = vec3(path_offset)
        self.position_offset = position_offset
        self.search_radius = search_radius
        self.search_resolution = search_resolution
        self.enabled = path is not None
        self.path_position = 0.0
        self._previous_position = 0.0

    def move_along_track(self, listener) -> Optional[Pose]:
        if not self.enabled or self.path is None:
            return None

        closest = self.path.find_closest_point(
            listener,
            int(math.floor(self._previous_position)),
            -1 if self.search_radius <= 0 else self.search_radius,
            self.search_resolution,
        )
        self.path_position = closest + self.position_offset
        self._previous_position = self.path_position

        frame = self.path.evaluate_frame(self.path_position)
        position = self.path.evaluate_position(self.path_position) + frame.transform(self.path_offset)
        return Pose(position, Frame.look_along(frame.forward))
