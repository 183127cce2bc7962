from __future__ import annotations

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from steadyload.core.logging import get_logger
from steadyload.scenarios.base import Scenario


log = get_logger("scenario.mail")

GMAIL_URL = "https://mail.google.com"
OUTLOOK_URL = "https://outlook.live.com/owa/?nlp=1"

EMAIL_INPUT_SELECTOR = 'input[type="email"]'
PASSWORD_INPUT_SELECTOR = 'input[type="password"]'
OUTLOOK_STAY_SIGNED_IN_SELECTOR = "#idSIButton9"
INBOX_ROW_SELECTOR = {
    "gmail": "tr.zA",
    "outlook": 'div[role="option"]',
}


class _WebmailScenario(Scenario):
    """Sign in through a two-step email/password form and open a message."""

    url = ""

    async def sign_in(self, session, credentials) -> None:
        login = credentials.for_site(self.name)
        page = session.page

        email = page.locator(EMAIL_INPUT_SELECTOR).first
        await email.wait_for(state="visible", timeout=15000)
        await email.fill(login.username)
        await email.press("Enter")

        password = page.locator(PASSWORD_INPUT_SELECTOR).first
        await password.wait_for(state="visible", timeout=15000)
        await password.fill(login.password)
        await password.press("Enter")

    async def after_sign_in(self, session) -> None:
        return

    async def run(self, session, browser, credentials) -> None:
        await session.goto(self.url)
        await self.sign_in(session, credentials)
        await self.after_sign_in(session)
        await session.page.wait_for_load_state("load")

        row = session.page.locator(INBOX_ROW_SELECTOR[self.name]).first
        await row.wait_for(state="visible", timeout=20000)
        await row.click()
        log.debug("mail_opened", scenario=self.name, browser=browser)
        await session.scroll_page(2)


class GmailScenario(_WebmailScenario):
    name = "gmail"
    duration = 45
    url = GMAIL_URL


class OutlookScenario(_WebmailScenario):
    name = "outlook"
    duration = 45
    url = OUTLOOK_URL

    async def after_sign_in(self, session) -> None:
        stay = session.page.locator(OUTLOOK_STAY_SIGNED_IN_SELECTOR)
        try:
            await stay.wait_for(state="visible", timeout=5000)
        except PlaywrightTimeoutError:
            return
        await stay.click()
