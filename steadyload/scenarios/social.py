from __future__ import annotations

from steadyload.core.logging import get_logger
from steadyload.scenarios.base import Scenario


log = get_logger("scenario.social")

FACEBOOK_URL = "https://www.facebook.com"
FACEBOOK_EMAIL_SELECTOR = "#email"
FACEBOOK_PASSWORD_SELECTOR = "#pass"
FACEBOOK_LOGIN_BUTTON_SELECTOR = 'button[name="login"]'

REDDIT_URL = "https://www.reddit.com"


class FacebookScenario(Scenario):
    """Sign in if needed and scroll through the news feed."""

    name = "facebook"
    duration = 60

    async def run(self, session, browser, credentials) -> None:
        await session.goto(FACEBOOK_URL)

        email = session.page.locator(FACEBOOK_EMAIL_SELECTOR)
        if await email.count():
            login = credentials.for_site(self.name)
            await email.fill(login.username)
            await session.page.locator(FACEBOOK_PASSWORD_SELECTOR).fill(login.password)
            await session.page.locator(FACEBOOK_LOGIN_BUTTON_SELECTOR).click()
            await session.page.wait_for_load_state("load")
            log.debug("facebook_signed_in", browser=browser)

        await session.scroll_page(10)


class RedditScenario(Scenario):
    """Scroll the front page feed."""

    name = "reddit"
    duration = 45

    async def run(self, session, browser, credentials) -> None:
        await session.goto(REDDIT_URL)
        await session.scroll_page(10)
