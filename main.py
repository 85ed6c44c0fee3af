#!/usr/bin/env python3
"""
Pipeline Graph - Command Line Entry Point

Loads a stored pipeline definition and prints dependency queries or
renderer-ready graph tables as JSON.
"""

import argparse
import json
import sys

from pipegraph.config import settings
from pipegraph.exceptions import PipelineGraphError
from pipegraph.graph.json_graph_client import JsonGraphClient
from pipegraph.processor.graph_info import graph_info
from pipegraph.query.traversal import dependencies
from pipegraph.utils.logger import app_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pipeline Graph - dependency queries")
    parser.add_argument("--storage", default=settings.graph_storage_path, help="Pipeline definition JSON file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    info = subparsers.add_parser("info", help="Print node and edge tables")
    info.add_argument("--from", dest="from_nodes", nargs="*", default=None, help="Neighborhood seeds")
    info.add_argument("--mode", default=settings.default_mode, choices=["out", "in", "all", "downstream", "upstream", "both"])
    info.add_argument("--order", type=int, default=None, help="Maximum hops from the seeds")
    info.add_argument("--subset", nargs="*", default=None, help="Nodes to keep")
    info.add_argument("--targets-only", action="store_true", help="Drop imports")
    info.add_argument("--from-scratch", action="store_true", help="Treat every target as outdated")
    info.add_argument("--build-times", default=settings.build_times, choices=["build", "command", "none"])
    info.add_argument("--digits", type=int, default=settings.digits)
    info.add_argument("--group", default=None, help="Node attribute to cluster on")
    info.add_argument("--clusters", nargs="*", default=None, help="Values of --group that form clusters")

    deps = subparsers.add_parser("deps", help="Print transitive dependencies")
    deps.add_argument("targets", nargs="+")
    deps.add_argument("--reverse", action="store_true", help="List dependents instead")

    subparsers.add_parser("stats", help="Print storage statistics")
    return parser


def run(args: argparse.Namespace) -> dict:
    client = JsonGraphClient(args.storage)

    if args.command == "stats":
        return client.get_database_stats()

    graph = client.build_graph()
    if args.command == "deps":
        names = dependencies(graph, args.targets, reverse=args.reverse)
        return {"targets": args.targets, "reverse": args.reverse, "dependencies": sorted(names)}

    info = graph_info(
        graph,
        status_table=client.get_status_table(),
        from_nodes=args.from_nodes,
        mode=args.mode,
        order=args.order,
        subset=args.subset,
        build_times=client.get_build_times(),
        build_times_kind=args.build_times,
        digits=args.digits,
        targets_only=args.targets_only,
        from_scratch=args.from_scratch,
        default_status=settings.default_status,
        group=args.group,
        clusters=args.clusters,
    )
    return info.to_dict()


def main(argv=None):
    """Main entry point for the command line tool."""
    args = build_parser().parse_args(argv)
    app_logger.debug(f"Running '{args.command}' against {args.storage}")

    try:
        result = run(args)
    except PipelineGraphError as e:
        app_logger.error(f"{args.command} failed: {e}")
        sys.exit(1)

    print(json.dumps(result, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
