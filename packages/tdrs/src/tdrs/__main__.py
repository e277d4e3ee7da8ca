"""CLI entry point for the social engine.

Usage:
    # Load a content file, advance 5 ticks and print every stat
    python -m tdrs run content.yaml --ticks 5

    # Dispatch events before ticking
    python -m tdrs run content.yaml --event "befriend astrid jordan"

    # Query the fact database after loading content
    python -m tdrs query content.yaml "?owner.relationships.?other.traits.friends"

    # Verbose logging
    python -m tdrs --log-level DEBUG run content.yaml
"""

from __future__ import annotations

import argparse
import logging
import sys

from repraxis import DBQuery

from .content import apply_content, load_content_file
from .engine import SocialEngine
from .settings import get_settings


def _load_engine(path: str) -> SocialEngine:
    engine = SocialEngine()
    apply_content(engine, load_content_file(path))
    return engine


def _print_stats(label: str, entity) -> None:
    print(label)
    for name, stat in entity.stats.stats.items():
        print(f"  {name:<20} {stat.value:g}")
    traits = ", ".join(instance.trait_id for instance in entity.traits.traits)
    if traits:
        print(f"  traits: {traits}")


def _cmd_run(args: argparse.Namespace) -> None:
    """Load content, dispatch events, tick, then print stats."""
    engine = _load_engine(args.content)

    for event in args.event:
        name, *agent_uids = event.split()
        engine.dispatch_event(name, agent_uids)

    for _ in range(args.ticks):
        engine.tick()

    print(f"--- Agents ({len(engine.agents)}) ---")
    for agent in engine.agents:
        _print_stats(agent.uid, agent)

    print()
    print(f"--- Relationships ({len(engine.relationships)}) ---")
    for relationship in engine.relationships:
        _print_stats(f"{relationship.owner_uid} -> {relationship.target_uid}", relationship)
        for entry in relationship.active_social_rules:
            print(f"  rule: {entry.rule.rule_id} {entry.description}".rstrip())


def _cmd_query(args: argparse.Namespace) -> None:
    """Load content and run a query against its facts."""
    engine = _load_engine(args.content)
    result = DBQuery(args.clauses).run(engine.db)

    if not result.success:
        print("No results")
        sys.exit(1)

    if not result.bindings:
        print("True")
        return

    for bindings in result.bindings:
        print("  ".join(f"{name}={value}" for name, value in bindings.items()))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="tdrs",
        description="Social simulation engine driven by a RePraxis fact database",
    )
    parser.add_argument(
        "--log-level",
        help="Logging level (default: TDRS_LOG_LEVEL or WARNING)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # run
    run_parser = subparsers.add_parser("run", help="Run a simulation from a content file")
    run_parser.add_argument("content", help="Path to a YAML content file")
    run_parser.add_argument(
        "--ticks",
        type=int,
        default=0,
        help="Number of time steps to advance (default: 0)",
    )
    run_parser.add_argument(
        "--event",
        action="append",
        default=[],
        help='Event to dispatch before ticking, e.g. "befriend astrid jordan" (repeatable)',
    )

    # query
    query_parser = subparsers.add_parser("query", help="Query the facts of a content file")
    query_parser.add_argument("content", help="Path to a YAML content file")
    query_parser.add_argument("clauses", nargs="+", help="Query clauses")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=(args.log_level or get_settings().log_level).upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "run":
        _cmd_run(args)
    elif args.command == "query":
        _cmd_query(args)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
