"""K-means over pixel positions; each centroid keeps its seed pixel's color."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from .errors import EmptyImageError
from .models import Color


DEFAULT_CLUSTERS = 5
DEFAULT_ITERATIONS = 10


@dataclass(frozen=True)
class Point:
    x: int
    y: int
    color: Color


@dataclass
class Cluster:
    centroid: Point
    points: list[Point] = field(default_factory=list)


def pixel_arrays(pixels: bytes, width: int) -> tuple[np.ndarray, np.ndarray]:
    if width <= 0:
        raise ValueError("width must be positive")
    count = len(pixels) // 3
    colors = np.frombuffer(pixels, dtype=np.uint8, count=count * 3).reshape(-1, 3)
    index = np.arange(count, dtype=np.int64)
    positions = np.stack((index % width, index // width), axis=1)
    return positions, colors


def points_from_pixels(pixels: bytes, width: int) -> list[Point]:
    positions, colors = pixel_arrays(pixels, width)
    return [
        Point(x=x, y=y, color=tuple(color))
        for (x, y), color in zip(positions.tolist(), colors.tolist())
    ]


def _assign(positions: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    deltas = positions[:, None, :] - centroids[None, :, :]
    distances = (deltas * deltas).sum(axis=2)
    # argmin returns the first minimal centroid on ties
    return distances.argmin(axis=1)


def _update(positions: np.ndarray, labels: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    updated = centroids.copy()
    for index in range(len(centroids)):
        members = positions[labels == index]
        if len(members):
            updated[index] = members.sum(axis=0) // len(members)
    return updated


def _cluster(
    positions: np.ndarray,
    k: int,
    max_iterations: int,
    rng: np.random.Generator | None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    if not len(positions):
        raise EmptyImageError("cannot cluster an empty point set")
    if k < 1:
        raise ValueError("k must be at least 1")

    rng = rng or np.random.default_rng()
    seeds = rng.integers(0, len(positions), size=k)
    centroids = positions[seeds].copy()

    labels = np.zeros(len(positions), dtype=np.int64)
    for _ in range(max_iterations):
        labels = _assign(positions, centroids)
        centroids = _update(positions, labels, centroids)
    return centroids, seeds, labels


def k_means(
    points: list[Point],
    k: int = DEFAULT_CLUSTERS,
    max_iterations: int = DEFAULT_ITERATIONS,
    rng: np.random.Generator | None = None,
) -> list[Cluster]:
    positions = np.array([(p.x, p.y) for p in points], dtype=np.int64).reshape(-1, 2)
    centroids, seeds, labels = _cluster(positions, k, max_iterations, rng)

    clusters = [
        Cluster(centroid=Point(x=int(x), y=int(y), color=points[seed].color))
        for (x, y), seed in zip(centroids.tolist(), seeds.tolist())
    ]
    if max_iterations > 0:
        for point, label in zip(points, labels.tolist()):
            clusters[label].points.append(point)
    return clusters


def extract_palette(
    pixels: bytes,
    width: int,
    k: int = DEFAULT_CLUSTERS,
    max_iterations: int = DEFAULT_ITERATIONS,
    rng: np.random.Generator | None = None,
) -> list[Color]:
    positions, colors = pixel_arrays(pixels, width)
    _, seeds, _ = _cluster(positions, k, max_iterations, rng)
    return [tuple(colors[seed].tolist()) for seed in seeds.tolist()]
