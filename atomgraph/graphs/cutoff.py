"""
Cutoff-radius edge construction.

For every site, periodic copies of all sites within the cutoff are found
with a KD-tree over the replicated point cloud. Candidates are reduced to
one per neighbor (shortest image), truncated to ``max_num_neighbors`` and
merged symmetrically: an edge survives if either endpoint kept it.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

from atomgraph.data.structure import Structure
from atomgraph.graphs.periodic import ImageCloud, build_image_cloud

logger = logging.getLogger(__name__)

# Distances at or below this are coincident sites, never edges (Å)
COINCIDENT_TOL = 1e-8

Candidate = Tuple[int, float, Tuple[int, int, int]]
EdgeRecord = Tuple[float, Tuple[int, int, int]]


def node_candidates(
    cloud: ImageCloud,
    tree: cKDTree,
    node: int,
    cutoff: float,
    max_num_neighbors: int,
) -> List[Candidate]:
    """
    Truncated neighbor list of one node.

    Returns:
        [(neighbor, distance, image)] sorted by distance then neighbor index,
        at most ``max_num_neighbors`` long
    """
    center = cloud.points[node]
    idx = np.asarray(tree.query_ball_point(center, r=cutoff * (1 + 1e-9)), dtype=np.int64)
    if idx.size == 0:
        return []

    dist = np.linalg.norm(cloud.points[idx] - center, axis=1)
    sites = cloud.site[idx]
    keep = (dist <= cutoff) & (dist > COINCIDENT_TOL) & (sites != node)
    idx, dist, sites = idx[keep], dist[keep], sites[keep]
    if idx.size == 0:
        return []

    # Shortest image per neighbor; equal distances keep the earlier translation
    rounded = np.round(dist, 8)
    order = np.lexsort((idx, sites, rounded))
    _, first = np.unique(sites[order], return_index=True)
    chosen = order[first]

    # Nearest first, ties by ascending neighbor index
    chosen = chosen[np.lexsort((sites[chosen], rounded[chosen]))][:max_num_neighbors]
    return [
        (int(sites[k]), float(dist[k]), cloud.relative_image(node, int(idx[k])))
        for k in chosen
    ]


def _chunk_candidates(
    cloud: ImageCloud,
    tree: cKDTree,
    nodes: Sequence[int],
    cutoff: float,
    max_num_neighbors: int,
) -> Dict[int, List[Candidate]]:
    return {
        node: node_candidates(cloud, tree, node, cutoff, max_num_neighbors)
        for node in nodes
    }


def merge_candidates(candidates: Dict[int, List[Candidate]]) -> Dict[Tuple[int, int], EdgeRecord]:
    """
    Symmetric union of per-node candidate lists.

    Nodes are merged in index order, so the record seen from the lower
    endpoint wins unless the other endpoint found a strictly shorter image.
    """
    edges: Dict[Tuple[int, int], EdgeRecord] = {}
    for node in sorted(candidates):
        for nbr, dist, image in candidates[node]:
            if node < nbr:
                pair, record = (node, nbr), (dist, image)
            else:
                pair, record = (nbr, node), (dist, tuple(-x for x in image))
            current = edges.get(pair)
            if current is None or round(dist, 8) < round(current[0], 8):
                edges[pair] = record
    return edges


def cutoff_edges(
    structure: Structure,
    cutoff: float,
    max_num_neighbors: int,
    n_jobs: int = 1,
) -> Dict[Tuple[int, int], EdgeRecord]:
    """
    Edge candidates for the cutoff strategy.

    Args:
        structure: input structure (at least one site)
        cutoff: maximum minimum-image distance (Å)
        max_num_neighbors: per-node cap applied before the symmetric union
        n_jobs: worker threads over disjoint node chunks

    Returns:
        {(i, j): (distance, image)} with i < j
    """
    cloud = build_image_cloud(structure, cutoff)
    tree = cKDTree(cloud.points)
    n = structure.num_sites

    if n_jobs <= 1 or n < 2:
        candidates = _chunk_candidates(cloud, tree, range(n), cutoff, max_num_neighbors)
    else:
        chunks = [c.tolist() for c in np.array_split(np.arange(n), min(n_jobs, n))]
        candidates = {}
        with ThreadPoolExecutor(max_workers=n_jobs) as pool:
            futures = [
                pool.submit(_chunk_candidates, cloud, tree, chunk, cutoff, max_num_neighbors)
                for chunk in chunks
            ]
            # Merge only after every chunk is done
            for future in futures:
                candidates.update(future.result())

    logger.debug(
        f"Cutoff search: {n} sites, {len(cloud.points)} image points, r={cutoff}"
    )
    return merge_candidates(candidates)
