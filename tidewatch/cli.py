"""Tidewatch CLI — explore the investigation graph from the command line.

Usage:
    tidewatch summary MC1_cleaned.json --projection MC1_out_vessel_pca.json
    tidewatch inspect MC1_cleaned.json 8327
    tidewatch layout MC1_cleaned.json --ticks 300 --output scene.json
    tidewatch search MC1_cleaned.json "oasis"

Exit codes: 0 success, 1 error, 2 search found nothing, 130 interrupted.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys

from tidewatch.config.settings import settings

logger = logging.getLogger(__name__)

EXIT_NOT_FOUND = 2


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="tidewatch",
        description="Tidewatch — linked multi-view exploration of an investigation graph",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Verbose output"
    )

    subparsers = parser.add_subparsers(dest="command")

    def add_sources(sub: argparse.ArgumentParser) -> None:
        sub.add_argument(
            "graph", nargs="?", default=None,
            help=f"Graph document path or URL (default: {settings.GRAPH_SOURCE})",
        )
        sub.add_argument(
            "--projection", default=None,
            help="Projection document path or URL ('' to skip)",
        )
        sub.add_argument(
            "--seed", action="append", dest="seeds",
            help="Entity of interest (repeatable; default: configured seeds)",
        )

    # summary
    summ = subparsers.add_parser("summary", help="Load, sample and summarise the graph")
    add_sources(summ)

    # inspect
    insp = subparsers.add_parser("inspect", help="Show the info panel for one entity")
    add_sources(insp)
    insp.add_argument("entity", help="Entity identifier")

    # layout
    lay = subparsers.add_parser("layout", help="Settle the layout and write the scene")
    add_sources(lay)
    lay.add_argument("--ticks", type=int, default=1000, help="Max simulation ticks")
    lay.add_argument("--output", "-o", help="Write D3 JSON scene to file")
    lay.add_argument("--csv", help="Write node table CSV to file")

    # search
    srch = subparsers.add_parser("search", help="Search rendered entities by id")
    add_sources(srch)
    srch.add_argument("term", help="Case-insensitive id substring")

    args = parser.parse_args(argv)

    # Logging
    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Dispatch
    try:
        if args.command == "summary":
            _cmd_summary(args)
        elif args.command == "inspect":
            _cmd_inspect(args)
        elif args.command == "layout":
            _cmd_layout(args)
        elif args.command == "search":
            _cmd_search(args)
    except KeyboardInterrupt:
        print("\nInterrupted.")
        sys.exit(130)
    except Exception as exc:
        logger.error("Error: %s", exc)
        if args.verbose:
            raise
        sys.exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _load(args: argparse.Namespace):
    from tidewatch.explorer import Explorer

    return asyncio.run(
        Explorer.load(
            graph_source=args.graph,
            projection_source=args.projection,
            seeds=args.seeds,
        )
    )


def _cmd_summary(args: argparse.Namespace) -> None:
    """Print load statistics, working subgraph size and mean distribution."""
    explorer = _load(args)
    summary = explorer.summary()

    print("=" * 60)
    print("TIDEWATCH — graph summary")
    print("=" * 60)

    graph = summary["graph"]
    print(f"  Entities:      {graph['node_count']}")
    print(f"  Relationships: {graph['edge_count']}")
    for type_name, count in sorted(graph["type_counts"].items()):
        print(f"    {type_name:13s} {count}")

    load = summary.get("load")
    if load:
        print(f"  Dropped links: {load['dropped_relationships']}")
        print(f"  Link key:      {load['relationship_key'] or '(none)'}")

    work = summary["working_subgraph"]
    print(f"\n  Seeds:         {', '.join(summary['seeds']) or '(none)'}")
    if summary["missing_seeds"]:
        print(f"  Missing seeds: {', '.join(summary['missing_seeds'])}")
    print(f"  Working set:   {work['entities']} entities / {work['relationships']} relationships"
          + (" (second-order)" if work["expanded"] else ""))

    proj = summary["projection"]
    if proj["enabled"]:
        print(f"  Projection:    {proj['points']} visible point(s)")
    else:
        print("  Projection:    unavailable")

    means = summary["mean_connection_types"]
    print("\nMEAN CONNECTIONS PER NODE:")
    for type_name, mean in means.items():
        print(f"  {type_name:13s} {mean:.2f}")
    print(f"  {'total':13s} {sum(means.values()):.2f}")


def _cmd_inspect(args: argparse.Namespace) -> None:
    """Print the info panel for one entity."""
    explorer = _load(args)
    info = explorer.info_panel(args.entity)
    if info is None:
        print(f"Entity not found: {args.entity}")
        sys.exit(EXIT_NOT_FOUND)

    print(f"ID:          {info.id}")
    print(f"Type:        {info.type_label}")
    if info.country:
        print(f"Country:     {info.country}")
    print(f"Connections: {info.connections}")
    print(f"\nRisk:        {info.risk.score:.1f}/10 ({info.risk.label})")
    print(f"             {info.risk.message}")
    print(f"             {info.risk.explanation}")

    print("\nCONNECTION TYPES (entity / dataset mean):")
    for row in explorer.analysis.compare(explorer.graph.get(info.id)):
        print(f"  {row['type']:13s} {row['count']:>4}   {row['mean']:.2f}")


def _cmd_layout(args: argparse.Namespace) -> None:
    """Settle the force layout and export the scene."""
    from tidewatch.export.scene import SceneExporter

    explorer = _load(args)
    frame = explorer.layout.run_until_settled(max_ticks=args.ticks)
    print(f"Layout: {frame.ticks} ticks, alpha={frame.alpha:.4f}, "
          f"{'settled' if frame.settled else 'still moving'}")

    exporter = SceneExporter(explorer)
    if args.output:
        exporter.to_json_file(args.output)
        print(f"Saved scene to {args.output}")
    if args.csv:
        with open(args.csv, "w", newline="", encoding="utf-8") as fp:
            fp.write(exporter.to_csv_nodes())
        print(f"Saved node table to {args.csv}")
    if not args.output and not args.csv:
        print(json.dumps(exporter.to_d3_json(), indent=2, default=str))


def _cmd_search(args: argparse.Namespace) -> None:
    """Run the search transition and print the result."""
    explorer = _load(args)
    result = explorer.search(args.term)

    if result.status == "empty":
        print("Empty search term.")
        sys.exit(EXIT_NOT_FOUND)
    if not result.found:
        for notice in explorer.notices:
            print(notice)
        sys.exit(EXIT_NOT_FOUND)

    highlight = explorer.controller.highlight
    print(f"Found: {result.entity.id} ({result.entity.type.label})"
          + (f" — first of {result.matches} matches" if result.matches > 1 else ""))
    print(f"  Highlighted: {len(highlight.nodes)} entities, "
          f"{len(highlight.relationships)} relationships")
    neighbours = sorted(highlight.nodes - {result.entity.id})
    for entity_id in neighbours:
        print(f"    {entity_id}")


if __name__ == "__main__":
    main()
