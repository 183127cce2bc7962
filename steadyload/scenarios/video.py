from __future__ import annotations

from steadyload.core.logging import get_logger
from steadyload.scenarios.base import Scenario


log = get_logger("scenario.youtube")

YOUTUBE_VIDEO_URL = "https://www.youtube.com/watch?v=aqz-KE-bpKQ"

# Autoplay is blocked in some browsers until the page has been interacted with.
PLAY_VIDEO_SCRIPT = """
() => {
    const video = document.querySelector('video');
    if (video && video.paused) { video.play(); }
    return !!video;
}
"""


class YoutubeScenario(Scenario):
    """Open a long video and let it play for the rest of the slot."""

    name = "youtube"
    duration = 60

    async def run(self, session, browser, credentials) -> None:
        await session.goto(YOUTUBE_VIDEO_URL)
        video = session.page.locator("video").first
        await video.wait_for(state="attached", timeout=15000)
        found = await session.page.evaluate(PLAY_VIDEO_SCRIPT)
        log.debug("youtube_playback_requested", browser=browser, video_found=found)
