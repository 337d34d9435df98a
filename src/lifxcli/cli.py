from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from . import config
from .commands import UNIMPLEMENTED_COMMANDS, CommandResult, Orchestrator
from .errors import LifxError, ParseError, ServiceError, UnsupportedCommandError, UsageError
from .listing import HEADERS, ListingRow

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # keep urllib3 connection chatter out of -v output
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def render_rows(rows: List[ListingRow], console: Optional[Console] = None) -> None:
    console = console or Console(stderr=False)
    table = Table(title=f"Lights ({len(rows)})", box=None)
    for h in HEADERS:
        table.add_column(h, justify="left")
    for row in rows:
        table.add_row(*(escape(c) for c in row))
    console.print(table)
    if not rows:
        console.print("[yellow]No lights returned for this selector.[/yellow]")


def report_failures(result: CommandResult) -> None:
    err = Console(stderr=True)
    for r in result.outcome.failures():
        if isinstance(r.error, ServiceError):
            err.print(f"[red]{escape(r.target)}: HTTP {r.error.status_code}[/red]")
            # echo the service's own explanation
            print(r.error.text, file=sys.stderr)
        else:
            err.print(f"[red]{escape(r.target)}: {escape(str(r.error))}[/red]")
    failed = len(result.outcome.failures())
    if failed and len(result.outcome.results) > 1:
        err.print(f"[red]{result.command}: {failed} of {len(result.outcome.results)} targets failed[/red]")


def _orchestrator(args: argparse.Namespace) -> Orchestrator:
    settings = config.resolve_settings(
        token=args.token,
        url=args.url,
        timeout=args.timeout,
        toggle_duration=getattr(args, "duration", None),
    )
    return Orchestrator(settings)


def cmd_list(args: argparse.Namespace) -> int:
    result = _orchestrator(args).dispatch("list", [args.bulb_id] if args.bulb_id else [])
    if not result.ok:
        report_failures(result)
        return 1
    if args.json:
        json.dump([r._asdict() for r in result.rows], sys.stdout, indent=2)
        sys.stdout.write("\n")
        return 0
    render_rows(result.rows)
    return 0


def _cmd_mutation(args: argparse.Namespace, command: str, positional: List[str]) -> int:
    result = _orchestrator(args).dispatch(command, positional)
    if not result.ok:
        report_failures(result)
        return 1
    Console().print({command: [r.target for r in result.outcome.results], "ok": True})
    return 0


def cmd_toggle(args: argparse.Namespace) -> int:
    return _cmd_mutation(args, "toggle", args.bulb_ids)


def cmd_bri(args: argparse.Namespace) -> int:
    return _cmd_mutation(args, "bri", [*args.bulb_ids, args.value])


def cmd_power(args: argparse.Namespace) -> int:
    return _cmd_mutation(args, "power", [*args.bulb_ids, args.state])


def cmd_unimplemented(args: argparse.Namespace) -> int:
    result = _orchestrator(args).dispatch(args.cmd, args.rest)
    Console().print(f"[yellow]{args.cmd}: {result.message}[/yellow]")
    return 0


def cmd_config_set_token(args: argparse.Namespace) -> int:
    cfg = config.load_config()
    if not isinstance(cfg.get("auth"), dict):
        cfg["auth"] = {}
    cfg["auth"]["token"] = str(args.value)
    config.save_config(cfg)
    Console().print({"config": config.CONFIG_PATH, "token": "saved"})
    return 0


def cmd_config_show(args: argparse.Namespace) -> int:
    settings = config.resolve_settings(token=args.token, url=args.url, timeout=args.timeout)
    data = {
        "config": config.CONFIG_PATH,
        "url": settings.base_url,
        "timeout": settings.timeout,
        "token": settings.masked_token(),
    }
    if args.json:
        json.dump(data, sys.stdout, indent=2)
        sys.stdout.write("\n")
    else:
        Console().print(data)
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="lifx", description="LIFX cloud HTTP API CLI")
    p.add_argument("--token", default=None, help=f"LIFX OAuth access token (overrides ${config.TOKEN_ENV}/config)")
    p.add_argument("--url", default=None, help="API base URL (overrides config)")
    p.add_argument("--timeout", type=float, default=None, help=f"HTTP timeout seconds (default ${config.TIMEOUT_ENV} or 5)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    lp = sub.add_parser("list", help="List status for all bulbs or one bulb")
    lp.add_argument("bulb_id", nargs="?", help="Bulb ID (default: all)")
    lp.add_argument("--json", action="store_true", help="Output JSON instead of a table")
    lp.set_defaults(func=cmd_list)

    tp = sub.add_parser("toggle", help="Toggle power of one or more bulbs")
    tp.add_argument("bulb_ids", nargs="+", metavar="bulb_id")
    tp.add_argument("--duration", type=float, default=None, help="Transition seconds (default 2)")
    tp.set_defaults(func=cmd_toggle)

    bp = sub.add_parser("bri", help="Set brightness (0.0-1.0) of one or more bulbs")
    bp.add_argument("bulb_ids", nargs="+", metavar="bulb_id")
    bp.add_argument("value", help="Brightness as a fraction, e.g. 0.5")
    bp.set_defaults(func=cmd_bri)

    pp = sub.add_parser("power", help="Switch one or more bulbs on or off")
    pp.add_argument("bulb_ids", nargs="+", metavar="bulb_id")
    pp.add_argument("state", help="on or off")
    pp.set_defaults(func=cmd_power)

    for name, what in UNIMPLEMENTED_COMMANDS.items():
        up = sub.add_parser(name, help=f"Adjust {what} (not implemented)")
        up.add_argument("rest", nargs="*", help=argparse.SUPPRESS)
        up.set_defaults(func=cmd_unimplemented)

    cp = sub.add_parser("config", help="Stored configuration")
    csub = cp.add_subparsers(dest="action", required=True)
    cst = csub.add_parser("set-token", help="Persist the access token to the config file")
    cst.add_argument("value")
    cst.set_defaults(func=cmd_config_set_token)
    csh = csub.add_parser("show", help="Show resolved settings (token masked)")
    csh.add_argument("--json", action="store_true")
    csh.set_defaults(func=cmd_config_show)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)
    try:
        return args.func(args)
    except (ParseError, UsageError, UnsupportedCommandError) as e:
        Console(stderr=True).print(f"[red]{escape(str(e))}[/red]")
        return 2
    except LifxError as e:
        Console(stderr=True).print(f"[red]{escape(str(e))}[/red]")
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
