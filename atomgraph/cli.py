"""
CLI entrypoint: build neighbor graphs and inspect element features.
"""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Sequence
from pathlib import Path

from atomgraph.config import STRATEGIES, Config, GraphConfig, RuntimeConfig
from atomgraph.exceptions import AtomGraphError
from atomgraph.featurize.codecs import GraphFeaturizer
from atomgraph.featurize.registry import create_default_registry
from atomgraph.graphs.atom_graph import AtomGraph
from atomgraph.graphs.decay import list_decay_functions

logger = logging.getLogger(__name__)

_DEFAULTS = GraphConfig()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atomgraph", description="Neighbor graphs of atomic structures."
    )
    parser.add_argument("--log-level", type=str, default=None, help="Logging level (default: ATOMGRAPH_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    build = sub.add_parser("build", help="Build the neighbor graph of a structure file")
    build.add_argument("path", type=str, help="Structure file (CIF, POSCAR, XYZ, ...)")
    build.add_argument("--strategy", choices=STRATEGIES, default=_DEFAULTS.strategy)
    build.add_argument("--cutoff", type=float, default=_DEFAULTS.cutoff_radius, help="Cutoff radius in Å")
    build.add_argument("--max-neighbors", type=int, default=_DEFAULTS.max_num_neighbors)
    build.add_argument("--decay", choices=list_decay_functions(), default=_DEFAULTS.weight_decay)
    build.add_argument("--no-normalize", action="store_true", help="Keep raw decay weights")
    build.add_argument("--voronoi-tolerance", type=float, default=_DEFAULTS.voronoi_tolerance)
    build.add_argument("--jobs", type=int, default=_DEFAULTS.n_jobs, help="Threads for the cutoff search")
    build.add_argument("--reader", choices=("pymatgen", "ase"), default="pymatgen")
    build.add_argument("--features", type=str, nargs="*", default=None, help="Element feature names to encode")
    build.add_argument("--output", type=str, default="", help="Output JSON path")

    sub.add_parser("features", help="List registered element features")

    encodable = sub.add_parser("encodable", help="List elements a feature can encode")
    encodable.add_argument("name", type=str, help="Feature name")
    return parser


def _run_build(args, config: Config) -> int:
    atom_graph = AtomGraph.from_file(args.path, config=config.graph, reader=args.reader)
    graph = atom_graph.graph
    degree = graph.degree()

    print(f"Structure: {atom_graph.id} ({atom_graph.structure.formula})")
    print(f"Strategy : {graph.strategy}")
    print(f"Sites    : {graph.num_nodes}")
    print(f"Edges    : {graph.num_edges}")
    print(f"Avg deg  : {degree.mean():.3f}")
    for i, (symbol, d) in enumerate(zip(graph.species, degree)):
        print(f"  {i:4d} {symbol:>3s}  degree={int(d)}")

    payload = {"id": atom_graph.id, "graph": graph.to_dict()}
    if args.features:
        registry = create_default_registry(config.paths.element_table)
        unknown = [name for name in args.features if name not in registry]
        if unknown:
            print(f"[ERROR] Unknown features: {', '.join(unknown)}")
            return 2
        featurizer = GraphFeaturizer(registry.build_many(args.features))
        features = featurizer.featurize(atom_graph)
        print(f"Features : {', '.join(featurizer.names)} (width {featurizer.feature_width})")
        payload["feature_names"] = featurizer.names
        payload["node_features"] = features.tolist()

    if args.output:
        out_path = Path(args.output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        print(f"Graph written to {out_path}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    runtime = RuntimeConfig(log_level=args.log_level)
    try:
        logging.basicConfig(
            level=runtime.log_level_value,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        if args.command == "build":
            config = Config(
                graph=GraphConfig(
                    strategy=args.strategy,
                    cutoff_radius=args.cutoff,
                    max_num_neighbors=args.max_neighbors,
                    weight_decay=args.decay,
                    normalize_weights=not args.no_normalize,
                    voronoi_tolerance=args.voronoi_tolerance,
                    n_jobs=args.jobs,
                ).validate(),
                runtime=runtime,
            )
            logger.debug("\n" + config.summary())
            return _run_build(args, config)

        registry = create_default_registry(Config().paths.element_table)
        if args.command == "features":
            for name in registry.names():
                print(name)
            return 0

        if args.name not in registry:
            print(f"[ERROR] Unknown feature '{args.name}'. Available: {', '.join(registry.names())}")
            return 2
        elements = sorted(registry.build(args.name).encodable_elements())
        print(f"{args.name}: {len(elements)} elements")
        print(" ".join(elements))
        return 0
    except (AtomGraphError, FileNotFoundError) as exc:
        print(f"[ERROR] {exc}")
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
