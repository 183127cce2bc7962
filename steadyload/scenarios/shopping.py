from __future__ import annotations

from steadyload.scenarios.base import Scenario


AMAZON_URL = "https://www.amazon.com"
AMAZON_SEARCH_INPUT_SELECTOR = "#twotabsearchtextbox"
AMAZON_RESULT_LINK_SELECTOR = 'div.s-main-slot [data-component-type="s-search-result"] h2 a'
AMAZON_SEARCH_TERM = "game of thrones"


class AmazonScenario(Scenario):
    """Search the store, skim the results and open the first product."""

    name = "amazon"
    duration = 45

    async def run(self, session, browser, credentials) -> None:
        await session.goto(AMAZON_URL)
        search = session.page.locator(AMAZON_SEARCH_INPUT_SELECTOR)
        await search.fill(AMAZON_SEARCH_TERM)
        await search.press("Enter")
        await session.page.wait_for_load_state("load")
        await session.scroll_page(4)

        first_result = session.page.locator(AMAZON_RESULT_LINK_SELECTOR).first
        await first_result.click()
        await session.page.wait_for_load_state("load")
        await session.scroll_page(3)
