import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from rich import box
from rich.markup import escape
from rich.table import Table

from dodgem.config import Credentials, RunConfig, Target
from dodgem.errors import AuthError, BumpError, DiscoveryError
from dodgem.logs import console, log

# ──────────────────────────────────────────────────────────
# SITE CONTRACT
# ──────────────────────────────────────────────────────────

LOGIN_URL  = "https://rocket-league.com/login"
TRADES_URL = "https://rocket-league.com/trades/{username}"

EMAIL_INPUT    = '.rlg-form .rlg-input[type="email"]'
PASSWORD_INPUT = '.rlg-form .rlg-input[type="password"]'
LOGIN_SUBMIT   = '.rlg-form .rlg-btn-primary[type="submit"]'
EDIT_LINK      = "[href^='/trade/edit']"
SAVE_BUTTON    = "#rlg-addTradeForm input[type=submit]"

LISTING_EXTRACTOR = """() => Array.from(
    document.querySelectorAll('.rlg-trade-display-header > a')
).map(anchor => anchor.href)"""


# ──────────────────────────────────────────────────────────
# TYPES
# ──────────────────────────────────────────────────────────

@dataclass
class Session:
    """Everything a cycle needs, bound to one logged-in page driver."""
    driver: object
    credentials: Credentials
    config: RunConfig = field(default_factory=RunConfig)


class Outcome(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class BumpResult:
    index: int
    url: str
    outcome: Outcome
    elapsed_seconds: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


# ──────────────────────────────────────────────────────────
# SESSION
# ──────────────────────────────────────────────────────────

async def _authenticate(driver, credentials: Credentials) -> None:
    email = credentials.email_address
    try:
        with console.status(f"[dim]Logging in as: {escape(email)}...[/]", spinner="dots"):
            await driver.goto(LOGIN_URL)

            await driver.focus(EMAIL_INPUT)
            await driver.type(credentials.email_address)

            await driver.focus(PASSWORD_INPUT)
            await driver.type(credentials.password)

            await driver.click_and_wait(LOGIN_SUBMIT)
    except Exception as e:
        raise AuthError(f"Could not log in as {email}: {e}") from e

    log.info(f"Logged in as: [blue]{escape(email)}[/]")


async def login(driver, credentials: Credentials, config: RunConfig) -> Session:
    """Log in once and hand back the session every cycle runs on."""
    await _authenticate(driver, credentials)
    return Session(driver=driver, credentials=credentials, config=config)


# ──────────────────────────────────────────────────────────
# DISCOVERY
# ──────────────────────────────────────────────────────────

def select_targets(urls: list[str], target: Target) -> list[str]:
    if target is Target.OLDEST:
        return urls[-1:]
    return list(urls)


async def _open_trades_page(driver, username: str) -> bool:
    """Returns False when the site sent us to the login page instead."""
    try:
        with console.status("[dim]Opening active trades...[/]", spinner="dots"):
            await driver.goto(TRADES_URL.format(username=username))
    except Exception as e:
        raise DiscoveryError(f"Could not open trades page: {e}") from e
    return not driver.url.startswith(LOGIN_URL)


async def discover(session: Session, username: str, target: Target) -> list[str]:
    driver = session.driver

    if not await _open_trades_page(driver, username):
        log.warning("Session expired — logging in again")
        await _authenticate(driver, session.credentials)
        if not await _open_trades_page(driver, username):
            raise AuthError("Still not logged in after logging in again")

    try:
        with console.status("[dim]Finding active trades...[/]", spinner="dots"):
            urls = list(await driver.evaluate(LISTING_EXTRACTOR) or [])
    except Exception as e:
        raise DiscoveryError(f"Could not read active trades: {e}") from e

    # Cool-off filtering (15 min after each edit) is not applied here
    log.info(f"Found [blue]{len(urls)}[/] active trade{'' if len(urls) == 1 else 's'}")
    return select_targets(urls, target)


# ──────────────────────────────────────────────────────────
# BUMPING
# ──────────────────────────────────────────────────────────

async def _bump_one(driver, url: str) -> None:
    step = "open trade"
    try:
        await driver.goto(url)

        step = "open edit form"
        await driver.click_and_wait(EDIT_LINK)

        # Saving is what moves the trade back to the top
        step = "save trade"
        await driver.click_and_wait(SAVE_BUTTON)
    except Exception as e:
        raise BumpError(f"Could not {step}: {e}") from e


async def bump(session: Session, listing_urls: list[str], clock=time.monotonic) -> list[BumpResult]:
    oldest = session.config.target is Target.OLDEST
    total  = len(listing_urls)
    report: list[BumpResult] = []

    for index, url in enumerate(listing_urls, start=1):
        label = "oldest active trade" if oldest else f"trade {index}/{total}"
        start = clock()

        try:
            with console.status(f"[dim]Bumping {label}...[/]", spinner="dots"):
                await _bump_one(session.driver, url)
        except BumpError as e:
            elapsed = round(clock() - start)
            log.error(f"Failed to bump {label} [dim]({elapsed} seconds)[/]  {escape(str(e))}")
            report.append(BumpResult(index, url, Outcome.FAILURE, elapsed, str(e)))
            continue

        elapsed = round(clock() - start)
        log.info(f"[green]Bumped {label}[/] [dim]({elapsed} seconds)[/]")
        report.append(BumpResult(index, url, Outcome.SUCCESS, elapsed))

    return report


def render_report(report: list[BumpResult]) -> None:
    table = Table(box=box.SIMPLE, show_header=True, header_style="bold dim", padding=(0, 1))
    table.add_column("#",       justify="right", style="dim")
    table.add_column("Trade",   style="cyan", no_wrap=False)
    table.add_column("Result",  justify="left")
    table.add_column("Seconds", justify="right")

    for result in report:
        status = "[green]bumped[/]" if result.ok else "[red]failed[/]"
        table.add_row(str(result.index), escape(result.url), status, str(result.elapsed_seconds))

    console.print(table)


# ──────────────────────────────────────────────────────────
# SCHEDULER
# ──────────────────────────────────────────────────────────

async def run_cycle(session: Session) -> list[BumpResult]:
    urls = await discover(session, session.credentials.username, session.config.target)
    if not urls:
        log.info("Nothing to bump this time")
        return []

    report = await bump(session, urls)
    render_report(report)
    return report


async def schedule(session: Session, sleep=asyncio.sleep, now=datetime.now) -> None:
    """Bump now, then again every interval, until the process is stopped.

    A failed discovery only costs that cycle. An AuthError ends the loop.
    """
    interval  = session.config.interval_minutes
    iteration = 0

    while True:
        iteration += 1
        console.rule(
            f"[dim]Run #{iteration}  ·  {now().strftime('%Y-%m-%d %H:%M:%S')}[/]",
            style="dim",
        )

        try:
            await run_cycle(session)
        except DiscoveryError as e:
            log.error(f"Cycle skipped: {escape(str(e))}")

        next_run = now() + timedelta(minutes=interval)
        log.info(f"Dodgem will run again at: [green]{next_run.strftime('%H:%M:%S')}[/]")
        await sleep(interval * 60)
