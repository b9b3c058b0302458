"""Shared fixtures: an in-memory page driver standing in for the browser."""

from __future__ import annotations

import pytest

from dodgem.bumper import LOGIN_URL, SAVE_BUTTON, Session
from dodgem.config import Credentials, RunConfig, Target


class FakeDriver:
    """Records every call; fails where told to.

    broken_urls      goto() on these URLs raises
    broken_saves     the save click raises while on these URLs
    expired_visits   how many trades-page visits bounce to the login page
    """

    def __init__(
        self,
        listings: list[str] | None = None,
        broken_urls: set[str] | None = None,
        broken_saves: set[str] | None = None,
        expired_visits: int = 0,
    ) -> None:
        self.listings = list(listings or [])
        self.broken_urls = set(broken_urls or ())
        self.broken_saves = set(broken_saves or ())
        self.expired_visits = expired_visits
        self.calls: list[tuple[str, str]] = []
        self.url = "about:blank"

    async def goto(self, url: str) -> None:
        self.calls.append(("goto", url))
        if url in self.broken_urls:
            raise RuntimeError(f"Timeout 30000ms exceeded navigating to {url}")
        if "/trades/" in url and self.expired_visits:
            self.expired_visits -= 1
            self.url = LOGIN_URL
            return
        self.url = url

    async def focus(self, selector: str) -> None:
        self.calls.append(("focus", selector))

    async def type(self, text: str) -> None:
        self.calls.append(("type", text))

    async def click_and_wait(self, selector: str) -> None:
        self.calls.append(("click_and_wait", selector))
        if selector == SAVE_BUTTON and self.url in self.broken_saves:
            raise RuntimeError("waiting for selector failed")

    async def evaluate(self, expression: str):
        self.calls.append(("evaluate", expression))
        return list(self.listings)

    def visited(self) -> list[str]:
        return [arg for name, arg in self.calls if name == "goto"]


@pytest.fixture()
def creds() -> Credentials:
    return Credentials(username="jamie", email_address="jamie@example.com", password="hunter22")


@pytest.fixture()
def make_session(creds):
    def _make(driver: FakeDriver, target: Target = Target.ALL, interval: int = 15) -> Session:
        return Session(driver=driver, credentials=creds, config=RunConfig(target, interval))
    return _make


@pytest.fixture(autouse=True)
def app_home(tmp_path, monkeypatch):
    """Keep every test away from the real preferences directory."""
    home = tmp_path / "dodgem-home"
    monkeypatch.setenv("DODGEM_HOME", str(home))
    return home
