from __future__ import annotations

from steadyload.scenarios.base import Scenario


GOOGLE_URL = "https://www.google.com"
GOOGLE_SEARCH_INPUT_SELECTOR = 'textarea[name="q"], input[name="q"]'
GOOGLE_QUERIES = ("seattle weather", "energy efficient browsers")

WIKIPEDIA_ARTICLE_URL = "https://en.wikipedia.org/wiki/Electric_power"
WIKIPEDIA_LINK_SELECTOR = "#mw-content-text a[href^='/wiki/Energy']"


class GoogleScenario(Scenario):
    """Run a couple of searches and scroll each result page."""

    name = "google"
    duration = 40

    async def run(self, session, browser, credentials) -> None:
        await session.goto(GOOGLE_URL)
        for query in GOOGLE_QUERIES:
            box = session.page.locator(GOOGLE_SEARCH_INPUT_SELECTOR).first
            await box.fill(query)
            await box.press("Enter")
            await session.page.wait_for_load_state("load")
            await session.scroll_page(3)


class WikipediaScenario(Scenario):
    """Read an article, then follow one of its links and read that too."""

    name = "wikipedia"
    duration = 40

    async def run(self, session, browser, credentials) -> None:
        await session.goto(WIKIPEDIA_ARTICLE_URL)
        await session.scroll_page(5)

        link = session.page.locator(WIKIPEDIA_LINK_SELECTOR).first
        if await link.count():
            await link.click()
            await session.page.wait_for_load_state("load")
            await session.scroll_page(5)
