from __future__ import annotations

from steadyload.scenarios.base import Scenario


class _FrontPageScenario(Scenario):
    """Load a front page and scroll down it like a reader would."""

    url = ""
    scrolls = 8

    async def run(self, session, browser, credentials) -> None:
        await session.goto(self.url)
        await session.scroll_page(self.scrolls)


class MsnScenario(_FrontPageScenario):
    name = "msn"
    duration = 40
    url = "https://www.msn.com"


class MsnbcScenario(_FrontPageScenario):
    name = "msnbc"
    duration = 40
    url = "https://www.msnbc.com"
