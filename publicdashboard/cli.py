"""
PublicDashboard CLI — Bootstrap and dashboard management commands.

Commands:
- publicdashboard init          — Create the dashboard table
- publicdashboard list          — Print dashboards in display order
- publicdashboard create        — Add a dashboard at the end of the list
- publicdashboard move-up       — Swap a dashboard with the one above it
- publicdashboard move-down     — Swap a dashboard with the one below it
- publicdashboard remove        — Delete a dashboard
- publicdashboard components    — List registered dashboard component types
- publicdashboard run           — Start the Reflex dev server
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from publicdashboard.engine.errors import PublicDashboardError

logger = logging.getLogger("publicdashboard.cli")

DEFAULT_CONFIG = "publicdashboard.yaml"


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="publicdashboard",
        description="PublicDashboard — ordered dashboards administration",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help=f"Path to config file (default: {DEFAULT_CONFIG})"
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init", help="Create the dashboard table")
    subparsers.add_parser("list", help="List dashboards by position")

    create_parser = subparsers.add_parser("create", help="Create a dashboard")
    create_parser.add_argument("name", help="Dashboard name (may be empty)")
    create_parser.add_argument("component_id", help="Dashboard component type id")

    up_parser = subparsers.add_parser("move-up", help="Move a dashboard one slot up")
    up_parser.add_argument("record_id", type=int, help="Dashboard id")

    down_parser = subparsers.add_parser("move-down", help="Move a dashboard one slot down")
    down_parser.add_argument("record_id", type=int, help="Dashboard id")

    remove_parser = subparsers.add_parser("remove", help="Remove a dashboard")
    remove_parser.add_argument("record_id", type=int, help="Dashboard id")

    subparsers.add_parser("components", help="List dashboard component types")

    run_parser = subparsers.add_parser("run", help="Start the Reflex dev server")
    run_parser.add_argument("--host", default="0.0.0.0", help="Backend host to bind (default: 0.0.0.0)")
    run_parser.add_argument("--port", type=int, default=3000, help="Frontend port (default: 3000)")
    run_parser.add_argument("--backend-port", type=int, default=8000, help="Backend port (default: 8000)")
    run_parser.add_argument("--env", choices=["dev", "prod"], default="dev", help="Environment (default: dev)")

    args = parser.parse_args(argv)

    commands = {
        "init": cmd_init,
        "list": cmd_list,
        "create": cmd_create,
        "move-up": cmd_move_up,
        "move-down": cmd_move_down,
        "remove": cmd_remove,
        "components": cmd_components,
        "run": cmd_run,
    }
    handler = commands.get(args.command)
    if handler is None:
        parser.print_help()
        return 0
    return handler(args)


def _service(args: argparse.Namespace, create_tables: bool = False):
    """Load config and wire the admin service for one command."""
    from sqlalchemy.exc import SQLAlchemyError

    from publicdashboard.dashboards.service import create_admin_service
    from publicdashboard.engine.config import load_config
    from publicdashboard.engine.errors import DashboardStoreError
    from publicdashboard.engine.logging import configure_logging

    config = load_config(args.config)
    configure_logging(config.logging.level)
    if create_tables:
        config.database.create_tables = True
    try:
        return create_admin_service(config)
    except SQLAlchemyError as e:
        raise DashboardStoreError(f"Database initialization failed: {e}", operation="init") from e


def cmd_init(args: argparse.Namespace) -> int:
    """Create the dashboard table in the configured database."""
    print("=" * 60)
    print("  PublicDashboard Initialization")
    print("=" * 60)
    try:
        service = _service(args, create_tables=True)
        count = len(service.store.list_ids_ordered_by_position())
    except PublicDashboardError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1
    print(f"[OK] Dashboard table ready ({count} dashboards)")
    return 0


def cmd_list(args: argparse.Namespace) -> int:
    """Print every dashboard in display order."""
    try:
        service = _service(args)
        session = service.open_session(username="cli")
        ids = service.list_ordered_ids(session, refresh=True)
        records = service.resolve_records(session, ids)
    except PublicDashboardError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1

    if not records:
        print("No dashboards.")
        return 0
    labels = service.registry.as_map()
    print(f"{'ID':>6}  {'POS':>6}  {'NAME':<30} COMPONENT")
    for record in records:
        component = labels.get(record.component_type_id, record.component_type_id)
        print(f"{record.id:>6}  {record.position:>6}  {record.name:<30} {component}")
    return 0


def cmd_create(args: argparse.Namespace) -> int:
    """Create a dashboard through the same validation as the admin form."""
    from publicdashboard.engine.errors import DashboardValidationError

    try:
        service = _service(args)
        session = service.open_session(username="cli")
        view = service.create_view(session)
        record = service.create(
            session,
            {"name": args.name, "component_type_id": args.component_id},
            view.token,
        )
    except DashboardValidationError as e:
        for err in e.validation_errors:
            print(f"[ERROR] {err['field']}: {err['message']}", file=sys.stderr)
        return 1
    except PublicDashboardError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1

    print(f"[OK] Created dashboard {record.id} at position {record.position}")
    return 0


def _move(args: argparse.Namespace, up: bool) -> int:
    try:
        service = _service(args)
        session = service.open_session(username="cli")
        moved = service.move_up(session, args.record_id) if up else service.move_down(session, args.record_id)
    except PublicDashboardError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1

    if moved:
        print(f"[OK] Moved dashboard {args.record_id} {'up' if up else 'down'}")
    else:
        print(f"[SKIP] Dashboard {args.record_id} was not moved")
    return 0


def cmd_move_up(args: argparse.Namespace) -> int:
    return _move(args, up=True)


def cmd_move_down(args: argparse.Namespace) -> int:
    return _move(args, up=False)


def cmd_remove(args: argparse.Namespace) -> int:
    """Remove a dashboard after checking that it exists."""
    try:
        service = _service(args)
        session = service.open_session(username="cli")
        service.confirm_remove(session, args.record_id)
        service.remove(session, args.record_id)
    except PublicDashboardError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1
    print(f"[OK] Removed dashboard {args.record_id}")
    return 0


def cmd_components(args: argparse.Namespace) -> int:
    """List the registered dashboard component types."""
    try:
        service = _service(args)
    except PublicDashboardError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        return 1

    components = service.components()
    if not components:
        print("No dashboard components registered.")
        return 0
    for component_id, description in components:
        print(f"{component_id:<30} {description}")
    return 0


def cmd_run(args: argparse.Namespace) -> int:
    """Start the Reflex dev server."""
    import subprocess

    print("Starting PublicDashboard (Reflex) server...")
    try:
        cmd = [
            "reflex", "run",
            "--backend-host", args.host,
            "--frontend-port", str(args.port),
            "--backend-port", str(args.backend_port),
            "--env", args.env,
        ]
        result = subprocess.run(cmd, check=True)
        return result.returncode
    except FileNotFoundError:
        print("[ERROR] 'reflex' command not found. Install: pip install reflex", file=sys.stderr)
        return 1
    except subprocess.CalledProcessError as e:
        return e.returncode
    except KeyboardInterrupt:
        print("\nServer stopped.")
        return 0


if __name__ == "__main__":
    sys.exit(main())
