"""
Neighbor Graph Builder

Converts atomic structures into weighted, undirected neighbor graphs.

Nodes: one per site, same order as the structure
Edges: cutoff-radius neighbors or Voronoi face-sharing neighbors, weighted by
       a distance-decay function of the minimum-image distance

Optimization:
- Per-node cutoff searches can run in threads (GraphConfig.n_jobs)
- Batches of structures can run in processes (build_graphs n_workers)
"""

import logging
import math
from concurrent.futures import ProcessPoolExecutor, as_completed
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from tqdm import tqdm

from atomgraph.config import GraphConfig
from atomgraph.data.structure import Structure
from atomgraph.exceptions import AtomGraphError, InvalidConfigError, InvalidStructureError
from atomgraph.graphs.cutoff import EdgeRecord, cutoff_edges
from atomgraph.graphs.graph import Edge, Graph
from atomgraph.graphs.voronoi import voronoi_edges

logger = logging.getLogger(__name__)


def as_structure(obj) -> Structure:
    """Accept a Structure, a pymatgen Structure/Molecule or an ASE Atoms."""
    if isinstance(obj, Structure):
        return obj
    module = type(obj).__module__
    if module.startswith("pymatgen"):
        from atomgraph.data.io import from_pymatgen
        return from_pymatgen(obj)
    if module.startswith("ase"):
        from atomgraph.data.io import from_ase
        return from_ase(obj)
    raise InvalidStructureError(f"Cannot build a graph from {type(obj).__name__}")


def _weighted_edges(
    records: Dict[Tuple[int, int], EdgeRecord],
    decay: Callable[[float], float],
    normalize: bool,
) -> List[Edge]:
    edges = []
    for (i, j), (distance, image) in sorted(records.items()):
        weight = float(decay(distance))
        if not (math.isfinite(weight) and weight > 0):
            raise InvalidConfigError(
                f"weight_decay returned {weight} for distance {distance:.4f}; "
                "weights must be positive and finite"
            )
        edges.append(Edge(i, j, weight, float(distance), image))

    if normalize and edges:
        top = max(e.weight for e in edges)
        edges = [Edge(e.i, e.j, e.weight / top, e.distance, e.image) for e in edges]
    return edges


def build_graph(structure, config: Optional[GraphConfig] = None) -> Graph:
    """
    Build the neighbor graph of one structure.

    Args:
        structure: Structure (or pymatgen / ASE object)
        config: graph options; GraphConfig() defaults when None

    Returns:
        Graph with one node per site

    Raises:
        InvalidStructureError: no sites or malformed input
        InvalidConfigError: out-of-range options
        DegenerateGeometryError: ill-posed Voronoi input
    """
    config = (config or GraphConfig()).validate()
    structure = as_structure(structure)
    if structure.num_sites == 0:
        raise InvalidStructureError("Structure has no sites")

    if config.strategy == "cutoff":
        records = cutoff_edges(
            structure,
            cutoff=float(config.cutoff_radius),
            max_num_neighbors=config.max_num_neighbors,
            n_jobs=config.n_jobs,
        )
    else:
        records = voronoi_edges(structure, float(config.voronoi_tolerance))

    edges = _weighted_edges(records, config.resolve_decay(), config.normalize_weights)
    graph = Graph(structure.species, tuple(edges), config.strategy)
    logger.debug(
        f"Built {config.strategy} graph for {structure.formula}: "
        f"{graph.num_nodes} nodes, {graph.num_edges} edges"
    )
    return graph


def _build_one(structure, config: GraphConfig) -> Graph:
    """Top-level worker so it can be pickled by the process pool."""
    return build_graph(structure, config)


def build_graphs(
    structures: Iterable,
    config: Optional[GraphConfig] = None,
    n_workers: int = 1,
    show_progress: bool = False,
    skip_failures: bool = False,
) -> List[Optional[Graph]]:
    """
    Build graphs for many structures, preserving input order.

    Args:
        structures: iterable of structures
        config: graph options shared by every structure
        n_workers: processes for the batch (callable decays must be picklable)
        show_progress: show a tqdm progress bar
        skip_failures: log AtomGraphError failures and leave None in that slot

    Returns:
        list of Graph (or None for skipped failures)
    """
    config = (config or GraphConfig()).validate()
    structures = list(structures)
    results: List[Optional[Graph]] = [None] * len(structures)
    n_failed = 0

    def _handle(idx: int, exc: AtomGraphError):
        nonlocal n_failed
        if not skip_failures:
            raise exc
        n_failed += 1
        logger.warning(f"Skipping structure {idx}: {exc}")

    if n_workers <= 1:
        for idx, structure in enumerate(
            tqdm(structures, desc="Building graphs", disable=not show_progress)
        ):
            try:
                results[idx] = build_graph(structure, config)
            except AtomGraphError as exc:
                _handle(idx, exc)
    else:
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            futures = {
                executor.submit(_build_one, structure, config): idx
                for idx, structure in enumerate(structures)
            }
            for future in tqdm(
                as_completed(futures),
                total=len(futures),
                desc="Building graphs",
                disable=not show_progress,
            ):
                idx = futures[future]
                try:
                    results[idx] = future.result()
                except AtomGraphError as exc:
                    _handle(idx, exc)

    logger.info(
        f"Built {len(structures) - n_failed}/{len(structures)} graphs "
        f"({config.strategy}, {n_failed} skipped)"
    )
    return results
