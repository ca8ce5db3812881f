"""
Ringsolve CLI - Command-line interface for the solver.

Usage:
    ringsolve solve -e "c2 124" -e "c3 3" [--in N] [--fast]   Solve an arena
    ringsolve catalog [catalog_file]                          Validate and list a catalog
    ringsolve serve [--host H] [--port P]                     Run the HTTP API
"""

import argparse
import dataclasses
import logging
import sys

from .config import load_settings
from .errors import RingSolveError


def _count(minimum):
    """argparse type for integers of at least ``minimum``."""
    def parse(text):
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"'{text}' is not an integer")
        if value < minimum:
            raise argparse.ArgumentTypeError(f"must be at least {minimum}, got {value}")
        return value
    return parse


def _seconds(text):
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{text}' is not a number")
    if value <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return value


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Ringsolve - Ring Arena Solver",
        prog="ringsolve",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Solve command
    solve_parser = subparsers.add_parser("solve", help="Solve an arena")
    solve_parser.add_argument(
        "-e", "--enemies", action="append", default=[], metavar="PLACEMENT",
        help="Enemy placement, e.g. 'c2 124' or 'c3 3 H' (repeatable)",
    )
    solve_parser.add_argument(
        "-x", "--execute", action="append", default=[], metavar="MOVE",
        help="Move to execute before solving, e.g. 'r1 3' (repeatable)",
    )
    solve_parser.add_argument("--in", dest="bound", type=_count(0), help="Maximum number of moves")
    solve_parser.add_argument("--fast", action="store_true", help="Best-first instead of optimal")
    solve_parser.add_argument("--groups", type=_count(0), help="Number of enemy groups")
    solve_parser.add_argument("--no-hammer", action="store_true", help="No throwing hammer")
    solve_parser.add_argument("--no-boots", action="store_true", help="No iron boots")
    solve_parser.add_argument("--catalog", help="JSON attack catalog")
    solve_parser.add_argument("--timeout", type=_seconds, help="Seconds before giving up")
    solve_parser.add_argument("--workers", type=_count(1), help="Search threads")

    # Catalog command
    catalog_parser = subparsers.add_parser("catalog", help="Validate and list a catalog")
    catalog_parser.add_argument("catalog_file", nargs="?", help="JSON catalog (default: built-in)")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=_count(1), default=8000)

    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except RingSolveError as e:
        print(f"Error: {e.message}")
        return 1
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "solve":
        return cmd_solve(args, settings)
    elif args.command == "catalog":
        return cmd_catalog(args)
    elif args.command == "serve":
        return cmd_serve(args, settings)
    parser.print_help()
    return 1


def cmd_solve(args, settings):
    """Build an arena from placements and solve it."""
    from .engine_core.goal import GoalModel
    from .notation import format_solution, parse_move, parse_placement
    from .search import CancelToken, SearchEngine, SolveMode
    from .session import ArenaSession

    overrides = {}
    if args.catalog:
        overrides["catalog_path"] = args.catalog
    if args.workers:
        overrides["search_workers"] = args.workers
    settings = dataclasses.replace(settings, **overrides)

    try:
        engine = SearchEngine.from_settings(settings, GoalModel(settings.catalog()))
        session = ArenaSession(engine=engine)
        results = []
        for text in args.enemies:
            placement = parse_placement(text)
            results.append(session.apply_edit(
                placement.column, placement.rows, placement.requirement
            ))
        if args.groups is not None:
            results.append(session.set_group_count(args.groups))
        if args.no_hammer:
            results.append(session.set_tool("hammer", False))
        if args.no_boots:
            results.append(session.set_tool("iron_boots", False))
        for text in args.execute:
            results.append(session.execute(parse_move(text)))
    except (RingSolveError, OSError) as e:
        print(f"Error: {e}")
        return 1

    for result in results:
        if not result.success:
            print(f"Error: {result.error}")
            return 1

    if args.fast:
        mode = SolveMode.fast_bounded(args.bound) if args.bound is not None else SolveMode.fast()
    else:
        mode = (
            SolveMode.optimal_bounded(args.bound)
            if args.bound is not None else SolveMode.optimal()
        )

    print("solving...")
    token = CancelToken(args.timeout if args.timeout else settings.solve_timeout)
    try:
        result = session.solve(mode, token)
    except KeyboardInterrupt:
        token.cancel()
        print("Search interrupted")
        return 130

    if not result.success:
        print(f"No solution was found: {result.error}")
        return 1

    solution = result.solution
    if solution.is_empty:
        print(format_solution(solution))
    else:
        print(f"Solution in {len(solution)} move(s): {format_solution(solution)}")
    return 0


def cmd_catalog(args):
    """Validate a catalog and list its shapes."""
    from .catalog import CatalogValidationError, default_catalog, load_catalog

    try:
        catalog = load_catalog(args.catalog_file) if args.catalog_file else default_catalog()
    except CatalogValidationError as e:
        print(f"Invalid catalog: {e.message}")
        for error in e.errors:
            print(f"  - {error}")
        return 1
    except OSError as e:
        print(f"Error: {e}")
        return 1

    print(f"Catalog: {catalog.name} ({len(catalog)} shapes)")
    for shape in catalog:
        weapon = shape.weapon.value if shape.weapon else "any"
        tool = f", needs {shape.tool.value}" if shape.tool else ""
        print(
            f"  {shape.name}: {shape.size} cells, {weapon}{tool}, "
            f"{len(shape.placements())} placements"
        )
    return 0


def cmd_serve(args, settings):
    """Run the HTTP API with uvicorn."""
    import uvicorn

    uvicorn.run(
        "ringsolve.api.app:app",
        host=args.host,
        port=args.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
