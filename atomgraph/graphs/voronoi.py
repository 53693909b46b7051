"""
Voronoi face-sharing edge construction.

The tessellation is computed with scipy (Qhull) over the central sites plus
enough periodic copies that every central cell is complete. Two sites are
connected when their cells share a face larger than ``tolerance`` times the
largest face of the cell it is seen from.
"""

import logging
from itertools import product
from typing import Dict, List, Tuple

import numpy as np
from scipy.spatial import QhullError, Voronoi, cKDTree

from atomgraph.data.structure import Structure
from atomgraph.exceptions import DegenerateGeometryError
from atomgraph.graphs.cutoff import COINCIDENT_TOL, EdgeRecord
from atomgraph.graphs.periodic import ImageCloud, body_diagonal, build_image_cloud, minimum_image

logger = logging.getLogger(__name__)


def face_area(vertices: np.ndarray, normal: np.ndarray) -> float:
    """
    Area of a planar convex polygon with unordered vertices.

    Vertices are sorted by angle around their centroid in the plane
    orthogonal to ``normal``, then the shoelace formula is applied.
    """
    if len(vertices) < 3:
        return 0.0
    normal = normal / np.linalg.norm(normal)
    center = vertices.mean(axis=0)
    vecs = vertices - center
    ref = vecs[np.argmax(np.linalg.norm(vecs, axis=1))]
    ref_norm = np.linalg.norm(ref)
    if ref_norm == 0:
        return 0.0
    e1 = ref / ref_norm
    e2 = np.cross(normal, e1)
    x, y = vecs @ e1, vecs @ e2
    order = np.argsort(np.arctan2(y, x))
    x, y = x[order], y[order]
    return float(0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))


def _extension_radius(structure: Structure) -> float:
    """Distance from the central sites within which periodic copies matter."""
    radius = body_diagonal(structure.lattice, structure.pbc)
    if not all(structure.pbc):
        # Cells are unbounded along open axes; pad by the extent of the sites
        spread = np.ptp(np.asarray(structure.positions), axis=0)
        radius += float(np.linalg.norm(spread))
    return radius


def _periodic_cloud(structure: Structure) -> Tuple[ImageCloud, np.ndarray]:
    """Image cloud pruned to the points that can bound a central cell."""
    n = structure.num_sites
    if not structure.is_periodic:
        cloud = build_image_cloud(structure, 0.0)
        return cloud, np.arange(n)

    radius = _extension_radius(structure)
    cloud = build_image_cloud(structure, radius)
    dist, _ = cKDTree(cloud.points[:n]).query(cloud.points, k=1)
    keep = dist <= radius * (1 + 1e-6) + 1e-6
    keep[:n] = True
    return cloud, np.flatnonzero(keep)


def _check_coincident(structure: Structure, cloud: ImageCloud, points: np.ndarray, index: np.ndarray):
    close = cKDTree(points).query_pairs(r=COINCIDENT_TOL, output_type="ndarray")
    if len(close):
        a, b = (int(cloud.site[index[k]]) for k in close[0])
        raise DegenerateGeometryError(
            f"Sites {a} ({structure.species[a]}) and {b} ({structure.species[b]}) coincide; "
            "Voronoi tessellation is undefined"
        )


def _needs_enclosure(structure: Structure, points: np.ndarray) -> bool:
    """Qhull needs at least five points spanning all three dimensions."""
    if not all(structure.pbc) or len(points) < 5:
        return True
    centered = points - points.mean(axis=0)
    return int(np.linalg.matrix_rank(centered, tol=COINCIDENT_TOL)) < 3


def _enclosing_points(points: np.ndarray) -> np.ndarray:
    """Eight corners of a box far outside the sites, one per octant."""
    lo, hi = points.min(axis=0), points.max(axis=0)
    center = 0.5 * (lo + hi)
    pad = 10.0 * (float(np.linalg.norm(hi - lo)) + 10.0)
    signs = np.array(list(product((-1.0, 1.0), repeat=3)))
    return center + pad * signs


def voronoi_faces(
    structure: Structure, tolerance: float
) -> Dict[int, List[Tuple[int, float, Tuple[int, int, int]]]]:
    """
    Faces of every central cell that pass the area threshold.

    Open structures, flat point sets and tiny inputs are closed off by eight
    distant enclosing points before tessellation. Faces shared with those
    points are discarded. A face that reaches an enclosing cell was unbounded,
    so bounded and open faces are thresholded separately: each against the
    largest face of its own kind in the cell. Unbounded faces without an
    enclosure count as infinite.

    Returns:
        {site: [(neighbor_site, face_area, image)]}, self faces excluded
    """
    n = structure.num_sites
    if n == 1 and not structure.is_periodic:
        return {0: []}

    cloud, index = _periodic_cloud(structure)
    points = cloud.points[index]
    _check_coincident(structure, cloud, points, index)

    n_real = len(points)
    if _needs_enclosure(structure, points):
        points = np.vstack([points, _enclosing_points(points)])

    try:
        vor = Voronoi(points)
    except (QhullError, ValueError) as exc:
        raise DegenerateGeometryError(f"Voronoi tessellation failed: {exc}") from exc

    outer = set()
    for k in range(n_real, len(points)):
        outer.update(v for v in vor.regions[vor.point_region[k]] if v >= 0)

    # Central sites come first in the cloud, so local index k < n is site k
    faces: Dict[int, List[Tuple[int, float, bool]]] = {k: [] for k in range(n)}
    for (p, q), verts in zip(vor.ridge_points, vor.ridge_vertices):
        if (p >= n and q >= n) or p >= n_real or q >= n_real:
            continue
        if -1 in verts:
            area, is_open = float("inf"), True
        else:
            area = face_area(vor.vertices[verts], points[q] - points[p])
            is_open = any(v in outer for v in verts)
        if p < n:
            faces[int(p)].append((int(q), area, is_open))
        if q < n:
            faces[int(q)].append((int(p), area, is_open))

    kept: Dict[int, List[Tuple[int, float, Tuple[int, int, int]]]] = {}
    for site, cell in faces.items():
        threshold = {}
        for kind in (False, True):
            finite = [area for _, area, o in cell if o is kind and np.isfinite(area)]
            threshold[kind] = tolerance * max(finite) if finite else 0.0
        kept[site] = []
        for other, area, is_open in cell:
            nbr = int(cloud.site[index[other]])
            if nbr == site or area <= threshold[is_open]:
                continue
            kept[site].append((nbr, area, cloud.relative_image(site, int(index[other]))))
    return kept


def voronoi_edges(structure: Structure, tolerance: float) -> Dict[Tuple[int, int], EdgeRecord]:
    """
    Edge candidates for the Voronoi strategy.

    Returns:
        {(i, j): (distance, image)} with i < j, distance being the
        minimum-image distance between the two sites
    """
    faces = voronoi_faces(structure, tolerance)
    pairs = sorted({(min(s, nbr), max(s, nbr)) for s, cell in faces.items() for nbr, _, _ in cell})
    if not pairs:
        return {}

    i, j = np.array(pairs, dtype=np.int64).T
    distances, images = minimum_image(structure, i, j)
    logger.debug(f"Voronoi: {structure.num_sites} sites, {len(pairs)} face-sharing pairs")
    return {
        pair: (float(d), tuple(int(x) for x in img))
        for pair, d, img in zip(pairs, distances, images)
    }
