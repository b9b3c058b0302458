"""
Usage:
  dodgem bump                 → bump all trades every 15 minutes
  dodgem bump oldest 20       → bump only the oldest trade every 20 minutes
  dodgem login                → save your Rocket League Garage credentials
"""

import argparse
import asyncio
import sys

from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from dodgem import VERSION
from dodgem.bumper import login, schedule
from dodgem.config import (
    DEFAULT_INTERVAL,
    LOG_LEVELS,
    CredentialStore,
    RunConfig,
    Target,
    app_dir,
    load_settings,
    parse_interval,
)
from dodgem.driver import PageDriver
from dodgem.errors import AuthError, ConfigError
from dodgem.logs import console, log, setup_logging
from dodgem.wizard import run_login


def _interval_arg(value: str) -> int:
    try:
        return parse_interval(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dodgem",
        description="Dodgem - Automatically bump your Rocket League Garage trades",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  dodgem login               # save your login credentials\n"
            "  dodgem bump                # bump all trades every 15 min\n"
            "  dodgem bump oldest 20      # bump the oldest trade every 20 min\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "--log-level", default=None, type=str.upper, choices=LOG_LEVELS,
        help="Override logging.level from settings.yaml",
    )

    commands = parser.add_subparsers(dest="command", required=True)

    bump = commands.add_parser("bump", help="Begin bumping active trades")
    bump.add_argument(
        "target", nargs="?", default=Target.ALL.value,
        choices=[t.value for t in Target],
        help="Which trades to bump - all or oldest",
    )
    bump.add_argument(
        "interval", nargs="?", default=DEFAULT_INTERVAL, type=_interval_arg,
        help="How many minutes to wait before bumping again",
    )
    bump.add_argument("--headed", action="store_true", help="Show the browser window")

    commands.add_parser("login", help="Set login credentials for Rocket League Garage")
    return parser


def _print_banner() -> None:
    console.print()
    console.print(Panel(
        Text.assemble(
            ("Dodgem", "bold magenta"),
            ("  v" + VERSION, "italic yellow"),
        ),
        border_style="magenta",
        padding=(0, 2),
        expand=False,
    ))
    console.print()


async def _bump(args, store: CredentialStore, settings: dict) -> int:
    creds = store.get()
    if creds is None:
        console.print("  [red bold]ERROR:[/] No credentials saved — run  [bold]dodgem login[/]  first")
        return 1

    config  = RunConfig(target=Target(args.target), interval_minutes=args.interval)
    browser = settings["browser"]

    _print_banner()
    log.info(
        f"Dodgem will bump [blue]{config.target.description}[/] "
        f"every [blue]{config.interval_minutes}[/] minutes  [dim](Ctrl+C to stop)[/]"
    )

    async with PageDriver(
        headless=browser.get("headless", True) and not args.headed,
        timeout_seconds=browser.get("timeout_seconds", 30),
    ) as driver:
        session = await login(driver, creds, config)
        await schedule(session)
    return 0


async def main(argv: list[str] = None) -> int:
    args  = build_parser().parse_args(argv)
    home  = app_dir()
    store = CredentialStore(home / "credentials.yaml")

    try:
        settings = load_settings(home / "settings.yaml")
    except ConfigError as e:
        console.print(f"  [red bold]ERROR:[/] {escape(str(e))}")
        return 1

    setup_logging(args.log_level or settings["logging"].get("level", "INFO"), home / "logs" / "dodgem.log")

    if args.command == "login":
        creds = await run_login(store)
        return 0 if creds else 1

    try:
        return await _bump(args, store, settings)
    except ConfigError as e:
        console.print(f"  [red bold]ERROR:[/] {escape(str(e))}")
        return 1
    except AuthError as e:
        log.error(f"Login failed — {escape(str(e))}", exc_info=True)
        log.error("Stopping bot — check your credentials with  [bold]dodgem login[/]  and restart.")
        return 1


def run() -> None:
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        console.print("\n  [dim]Bye![/]")


if __name__ == "__main__":
    run()
