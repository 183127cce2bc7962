"""Fixed-duration scheduling of scenario slots."""
from __future__ import annotations

import asyncio
from time import perf_counter
from typing import Awaitable, Callable, Optional

from playwright.async_api import async_playwright

from steadyload.core.config import SteadyloadConfig
from steadyload.core.credentials import Credentials
from steadyload.core.exceptions import SlotOverrunError
from steadyload.core.logging import get_logger
from steadyload.core.metrics import runs, slot_overruns, slot_work_seconds, slots_completed
from steadyload.core.schemas import RunPlan, RunTimeline, SlotRecord
from steadyload.session.driver import BrowserSession, open_session


log = get_logger("scheduler")

Clock = Callable[[], float]
Sleeper = Callable[[float], Awaitable[None]]
SlotCallback = Callable[[SlotRecord], None]


class FixedDurationScheduler:
    """
    Runs a RunPlan so that every scenario occupies exactly its declared slot.

    A single clock is read when the run starts and before and after each
    scenario. Whatever part of a slot the scenario did not use is slept away,
    so a run always lasts ``loops * sum(durations)`` no matter how fast pages
    load. Opening the scenario's tab counts as part of its slot.

    A scenario that is still working when its slot ends raises
    :class:`SlotOverrunError`. Nothing is retried and no later scenario runs;
    the comparison the run exists for is already broken at that point.

    Args:
        clock: Monotonic clock in seconds (default ``time.perf_counter``)
        sleep: Coroutine used to fill the rest of a slot (default ``asyncio.sleep``)
        on_slot: Optional callback invoked with each completed SlotRecord

    Example:
        >>> scheduler = FixedDurationScheduler()
        >>> async with open_session("chrome") as session:
        ...     timeline = await scheduler.run(plan, session, "chrome", credentials)
    """

    def __init__(
        self,
        clock: Clock = perf_counter,
        sleep: Sleeper = asyncio.sleep,
        on_slot: Optional[SlotCallback] = None,
    ) -> None:
        self.clock = clock
        self.sleep = sleep
        self.on_slot = on_slot
        self.timeline: Optional[RunTimeline] = None

    async def run(
        self,
        plan: RunPlan,
        session: BrowserSession,
        browser: str,
        credentials: Credentials,
    ) -> RunTimeline:
        timeline = RunTimeline(browser=browser, loops=plan.loops)
        self.timeline = timeline
        run_start = self.clock()
        awaiting_first = True

        log.info(
            "run_started",
            browser=browser,
            loops=plan.loops,
            scenarios=[s.name for s in plan.scenarios],
            planned_seconds=plan.planned_seconds,
        )

        for loop in range(plan.loops):
            for index, scenario in enumerate(plan.scenarios):
                start_time = self.clock() - run_start
                log.debug("slot_started", loop=loop, scenario=scenario.name, at=round(start_time, 3))

                # The first scenario uses the tab the browser opened with.
                new_tab = not awaiting_first
                if new_tab:
                    await session.open_new_tab_and_focus()
                awaiting_first = False

                await scenario.run(session, browser, credentials)

                elapsed = self.clock() - run_start - start_time
                remaining = scenario.duration - elapsed
                if remaining < 0:
                    slot_overruns.labels(scenario=scenario.name).inc()
                    log.error(
                        "slot_overrun",
                        loop=loop,
                        scenario=scenario.name,
                        duration=scenario.duration,
                        elapsed=round(elapsed, 3),
                    )
                    raise SlotOverrunError(scenario.name, loop, scenario.duration, elapsed)

                await self.sleep(remaining)

                record = SlotRecord(
                    loop=loop,
                    index=index,
                    scenario=scenario.name,
                    duration=scenario.duration,
                    started_at=start_time,
                    work_seconds=elapsed,
                    idle_seconds=remaining,
                    new_tab=new_tab,
                )
                timeline.slots.append(record)
                slots_completed.labels(scenario=scenario.name).inc()
                slot_work_seconds.labels(scenario=scenario.name).observe(elapsed)
                log.info(
                    "slot_completed",
                    loop=loop,
                    scenario=scenario.name,
                    work_seconds=round(elapsed, 3),
                    idle_seconds=round(remaining, 3),
                )
                if self.on_slot:
                    self.on_slot(record)

        log.info("run_completed", slots=len(timeline.slots), elapsed=round(self.clock() - run_start, 3))
        return timeline


async def execute_plan(
    plan: RunPlan,
    browser: str,
    credentials: Credentials,
    config: Optional[SteadyloadConfig] = None,
    scheduler: Optional[FixedDurationScheduler] = None,
    playwright_factory=async_playwright,
) -> RunTimeline:
    """Open one session, run the whole plan in it and release it.

    The session is closed on every exit path, including an overrun or a
    scenario error, which are then re-raised unchanged.
    """
    config = config or SteadyloadConfig()
    scheduler = scheduler or FixedDurationScheduler()
    try:
        async with open_session(browser, config, playwright_factory=playwright_factory) as session:
            timeline = await scheduler.run(plan, session, browser, credentials)
    except SlotOverrunError:
        runs.labels(outcome="overrun").inc()
        raise
    except Exception:
        runs.labels(outcome="aborted").inc()
        raise
    runs.labels(outcome="completed").inc()
    return timeline
