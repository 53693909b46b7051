"""
Periodic image helpers shared by the cutoff and Voronoi strategies.

Positions are first wrapped into the unit cell along periodic axes, then
replicated over the lattice translations needed to cover a search radius.
Every replicated point remembers its source site and its integer image
relative to the *unwrapped* input positions, so edges can report the exact
lattice translation that realises them.
"""

import itertools
from dataclasses import dataclass
from typing import Tuple

import numpy as np

from atomgraph.data.structure import Structure

# Relative + absolute slack added to search radii (floating point noise)
_RADIUS_SLACK = 1e-6


def plane_spacings(lattice: np.ndarray) -> np.ndarray:
    """
    Perpendicular distance between opposite faces of the cell, per axis.

    d_i = Volume / Area(face_i), valid for arbitrary (skewed) cells.
    """
    a, b, c = lattice
    volume = abs(np.linalg.det(lattice))
    areas = np.array([
        np.linalg.norm(np.cross(b, c)),
        np.linalg.norm(np.cross(c, a)),
        np.linalg.norm(np.cross(a, b)),
    ])
    return volume / areas


def search_cells(lattice: np.ndarray, pbc: Tuple[bool, bool, bool], radius: float) -> np.ndarray:
    """
    Number of cells to search in each direction to cover ``radius``.

    The +1 margin covers wrapped fractional differences in (-1, 1).
    Non-periodic axes get 0.
    """
    if lattice is None:
        return np.zeros(3, dtype=np.int64)
    cells = np.ceil(radius / plane_spacings(lattice)).astype(np.int64) + 1
    return np.where(np.asarray(pbc, dtype=bool), cells, 0)


def lattice_translations(
    lattice: np.ndarray, pbc: Tuple[bool, bool, bool], radius: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Integer images and Cartesian translation vectors covering ``radius``.

    Returns:
        images: (M, 3) int array, (0, 0, 0) first
        vectors: (M, 3) Cartesian translations
    """
    if lattice is None or not any(pbc):
        return np.zeros((1, 3), dtype=np.int64), np.zeros((1, 3))
    n = search_cells(lattice, pbc, radius)
    ranges = [range(-int(k), int(k) + 1) for k in n]
    images = np.array(list(itertools.product(*ranges)), dtype=np.int64)
    vectors = images @ lattice
    # Deterministic order: shortest translation first, then lexicographic
    lengths = np.round(np.linalg.norm(vectors, axis=1), 8)
    order = np.lexsort((images[:, 2], images[:, 1], images[:, 0], lengths))
    images = images[order]
    return images, images @ lattice


def wrap_positions(structure: Structure) -> Tuple[np.ndarray, np.ndarray]:
    """
    Wrap positions into [0, 1) fractional range along periodic axes.

    Returns:
        positions: (N, 3) wrapped Cartesian positions
        shifts: (N, 3) integer translation applied to each site
    """
    n = structure.num_sites
    if not structure.is_periodic:
        return np.array(structure.positions), np.zeros((n, 3), dtype=np.int64)
    frac = structure.frac_coords
    periodic = np.asarray(structure.pbc, dtype=bool)
    shifts = np.where(periodic[None, :], -np.floor(frac), 0.0).astype(np.int64)
    positions = np.asarray(structure.positions) + shifts @ structure.lattice
    return positions, shifts


def body_diagonal(lattice: np.ndarray, pbc: Tuple[bool, bool, bool]) -> float:
    """
    Longest body diagonal spanned by the periodic lattice vectors.

    Half of it bounds the Wigner-Seitz radius, so any Voronoi neighbor of a
    site lies within this distance.
    """
    if lattice is None or not any(pbc):
        return 0.0
    vectors = [v for v, p in zip(lattice, pbc) if p]
    best = 0.0
    for signs in itertools.product((1.0, -1.0), repeat=len(vectors)):
        diag = sum(s * v for s, v in zip(signs, vectors))
        best = max(best, float(np.linalg.norm(diag)))
    return best


@dataclass(frozen=True)
class ImageCloud:
    """
    Central sites plus their periodic copies.

    The first ``n_sites`` points are the (wrapped) central sites, in order.
    ``image[k]`` is the lattice translation of point k relative to the
    unwrapped input position of ``site[k]``.
    """

    points: np.ndarray
    site: np.ndarray
    image: np.ndarray
    n_sites: int

    def relative_image(self, p: int, q: int) -> Tuple[int, int, int]:
        """Image of point q's site relative to point p's site."""
        return tuple(int(x) for x in self.image[q] - self.image[p])


def build_image_cloud(structure: Structure, radius: float) -> ImageCloud:
    """
    Replicate sites over all translations needed to cover ``radius``.
    """
    positions, shifts = wrap_positions(structure)
    n = structure.num_sites
    images, vectors = lattice_translations(
        structure.lattice, structure.pbc, radius * (1 + _RADIUS_SLACK) + _RADIUS_SLACK
    )
    points = (vectors[:, None, :] + positions[None, :, :]).reshape(-1, 3)
    site = np.tile(np.arange(n, dtype=np.int64), len(images))
    image = (images[:, None, :] + shifts[None, :, :]).reshape(-1, 3)
    return ImageCloud(points=points, site=site, image=image, n_sites=n)


def minimum_image(
    structure: Structure, i: np.ndarray, j: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Minimum-image distance and image between site pairs (i[k], j[k]).

    Equally short images resolve to the first translation in search order
    (shortest translation, then lexicographic). For i == j the zero
    translation is skipped.

    Returns:
        distances: (P,) float array
        images: (P, 3) int array, translation of j relative to i
    """
    i = np.asarray(i, dtype=np.int64).reshape(-1)
    j = np.asarray(j, dtype=np.int64).reshape(-1)
    positions, shifts = wrap_positions(structure)
    if structure.is_periodic:
        # Any displacement is within half a body diagonal of some lattice point
        radius = 0.5 * body_diagonal(structure.lattice, structure.pbc)
    else:
        radius = 0.0
    images, vectors = lattice_translations(
        structure.lattice, structure.pbc, radius * (1 + _RADIUS_SLACK) + _RADIUS_SLACK
    )
    # (P, M, 3) displacements between wrapped positions
    disp = positions[j][:, None, :] + vectors[None, :, :] - positions[i][:, None, :]
    dist = np.linalg.norm(disp, axis=2)
    self_pair = (i == j)[:, None] & np.all(images == 0, axis=1)[None, :]
    dist = np.where(self_pair, np.inf, dist)

    # Translations are pre-sorted, so argmin keeps the first of equal distances
    best = np.argmin(np.round(dist, 8), axis=1)
    rel = images[best] + shifts[j] - shifts[i]
    return dist[np.arange(len(i)), best], rel
