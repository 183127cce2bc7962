from typing import List, Optional

import pytest

from steadyload.core.config import SessionConfig, SteadyloadConfig
from steadyload.core.credentials import Credentials
from steadyload.core.exceptions import SlotOverrunError
from steadyload.core.schemas import RunPlan, SlotRecord
from steadyload.runner.scheduler import FixedDurationScheduler, execute_plan
from steadyload.scenarios.base import Scenario


class FakeClock:
    """Clock that only moves when scenarios work or the scheduler sleeps."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class FakeSession:
    def __init__(self, clock: FakeClock, tab_cost: float = 0.0) -> None:
        self.clock = clock
        self.tab_cost = tab_cost
        self.tab_requests = 0

    async def open_new_tab_and_focus(self) -> None:
        self.tab_requests += 1
        self.clock.now += self.tab_cost


class TimedScenario(Scenario):
    def __init__(
        self,
        name: str,
        duration: float,
        work: float,
        clock: FakeClock,
        calls: list,
        error: Optional[Exception] = None,
    ) -> None:
        self.name = name
        super().__init__(duration)
        self.work = work
        self.clock = clock
        self.calls = calls
        self.error = error

    async def run(self, session, browser, credentials) -> None:
        self.calls.append((self.name, getattr(session, "tab_requests", getattr(session, "tabs_opened", 0)), browser))
        self.clock.now += self.work
        if self.error is not None:
            raise self.error


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def _scheduler(clock: FakeClock, records: Optional[list] = None) -> FixedDurationScheduler:
    on_slot = records.append if records is not None else None
    return FixedDurationScheduler(clock=clock, sleep=clock.sleep, on_slot=on_slot)


@pytest.mark.asyncio
async def test_each_loop_fills_the_declared_slot(clock):
    calls: list = []
    scenario = TimedScenario("alpha", 10, 1, clock, calls)
    session = FakeSession(clock)

    timeline = await _scheduler(clock).run(
        RunPlan(scenarios=(scenario,), loops=3), session, "chrome", Credentials()
    )

    assert clock.now == pytest.approx(30)
    assert clock.sleeps == pytest.approx([9, 9, 9])
    assert [slot.started_at for slot in timeline.slots] == pytest.approx([0, 10, 20])
    assert timeline.elapsed_seconds == pytest.approx(30)


@pytest.mark.asyncio
async def test_only_the_very_first_slot_skips_the_new_tab(clock):
    calls: list = []
    a = TimedScenario("alpha", 10, 1, clock, calls)
    b = TimedScenario("beta", 5, 1, clock, calls)
    session = FakeSession(clock)

    timeline = await _scheduler(clock).run(
        RunPlan(scenarios=(a, b), loops=2), session, "firefox", Credentials()
    )

    # Tab count seen by each scenario when it starts running.
    assert calls == [
        ("alpha", 0, "firefox"),
        ("beta", 1, "firefox"),
        ("alpha", 2, "firefox"),
        ("beta", 3, "firefox"),
    ]
    assert session.tab_requests == 3
    assert [slot.new_tab for slot in timeline.slots] == [False, True, True, True]


@pytest.mark.asyncio
async def test_tab_creation_counts_against_the_slot(clock):
    calls: list = []
    scenario = TimedScenario("alpha", 10, 1, clock, calls)
    session = FakeSession(clock, tab_cost=2)

    timeline = await _scheduler(clock).run(
        RunPlan(scenarios=(scenario,), loops=2), session, "chrome", Credentials()
    )

    first, second = timeline.slots
    assert first.work_seconds == pytest.approx(1)
    assert second.work_seconds == pytest.approx(3)
    assert second.idle_seconds == pytest.approx(7)
    assert clock.now == pytest.approx(20)


@pytest.mark.asyncio
async def test_total_time_is_loops_times_sum_of_durations(clock):
    calls: list = []
    scenarios = (
        TimedScenario("alpha", 30, 5, clock, calls),
        TimedScenario("beta", 20, 12.5, clock, calls),
        TimedScenario("gamma", 15, 0.25, clock, calls),
    )
    plan = RunPlan(scenarios=scenarios, loops=4)

    await _scheduler(clock).run(plan, FakeSession(clock, tab_cost=2), "edge", Credentials())

    assert plan.planned_seconds == 260
    assert clock.now == pytest.approx(plan.planned_seconds)


@pytest.mark.asyncio
async def test_overrun_aborts_before_the_next_scenario(clock):
    calls: list = []
    a = TimedScenario("alpha", 30, 5, clock, calls)
    b = TimedScenario("beta", 20, 25, clock, calls)
    c = TimedScenario("gamma", 10, 1, clock, calls)
    scheduler = _scheduler(clock)

    with pytest.raises(SlotOverrunError) as excinfo:
        await scheduler.run(RunPlan(scenarios=(a, b, c), loops=1), FakeSession(clock), "chrome", Credentials())

    err = excinfo.value
    assert err.scenario == "beta"
    assert err.loop == 0
    assert err.overrun == pytest.approx(5)
    assert clock.now == pytest.approx(55)
    assert [name for name, _, _ in calls] == ["alpha", "beta"]
    assert clock.sleeps == pytest.approx([25])
    assert [slot.scenario for slot in scheduler.timeline.slots] == ["alpha"]


@pytest.mark.asyncio
async def test_work_exactly_filling_the_slot_is_not_an_overrun(clock):
    calls: list = []
    scenario = TimedScenario("alpha", 10, 10, clock, calls)

    timeline = await _scheduler(clock).run(
        RunPlan(scenarios=(scenario,), loops=1), FakeSession(clock), "chrome", Credentials()
    )

    assert clock.sleeps == [0]
    assert timeline.slots[0].idle_seconds == 0


@pytest.mark.asyncio
async def test_scenario_errors_propagate_unchanged(clock):
    calls: list = []
    boom = RuntimeError("page crashed")
    a = TimedScenario("alpha", 10, 1, clock, calls, error=boom)
    b = TimedScenario("beta", 10, 1, clock, calls)

    with pytest.raises(RuntimeError) as excinfo:
        await _scheduler(clock).run(RunPlan(scenarios=(a, b), loops=1), FakeSession(clock), "chrome", Credentials())

    assert excinfo.value is boom
    assert [name for name, _, _ in calls] == ["alpha"]
    assert clock.sleeps == []


@pytest.mark.asyncio
async def test_on_slot_receives_each_completed_record(clock):
    calls: list = []
    records: List[SlotRecord] = []
    scenario = TimedScenario("alpha", 4, 1, clock, calls)

    await _scheduler(clock, records).run(
        RunPlan(scenarios=(scenario, scenario), loops=1), FakeSession(clock), "chrome", Credentials()
    )

    assert [(r.loop, r.index, r.scenario) for r in records] == [(0, 0, "alpha"), (0, 1, "alpha")]


class _FakePage:
    async def bring_to_front(self) -> None:
        return


class _FakeContext:
    def __init__(self) -> None:
        self.closed = False

    async def new_page(self) -> _FakePage:
        return _FakePage()

    async def close(self) -> None:
        self.closed = True


class _FakeBrowser:
    def __init__(self) -> None:
        self.context = _FakeContext()
        self.closed = False

    async def new_context(self, **_kwargs) -> _FakeContext:
        return self.context

    async def close(self) -> None:
        self.closed = True


class _FakeLauncher:
    def __init__(self) -> None:
        self.browser = _FakeBrowser()

    async def launch(self, **_kwargs) -> _FakeBrowser:
        return self.browser


class _FakePlaywright:
    def __init__(self) -> None:
        self.chromium = _FakeLauncher()
        self.stopped = False

    async def stop(self) -> None:
        self.stopped = True


class _FakeFactory:
    def __init__(self) -> None:
        self.playwright = _FakePlaywright()

    async def start(self) -> _FakePlaywright:
        return self.playwright


def _instant_config() -> SteadyloadConfig:
    return SteadyloadConfig(
        session=SessionConfig(
            startup_wait_seconds=0,
            maximize_wait_seconds=0,
            new_tab_settle_seconds=0,
            scroll_pause_seconds=0,
        )
    )


@pytest.mark.asyncio
async def test_execute_plan_releases_the_session_after_an_overrun(clock):
    calls: list = []
    factory = _FakeFactory()
    plan = RunPlan(
        scenarios=(
            TimedScenario("alpha", 10, 1, clock, calls),
            TimedScenario("beta", 10, 11, clock, calls),
        ),
        loops=1,
    )

    with pytest.raises(SlotOverrunError):
        await execute_plan(
            plan,
            "chrome",
            Credentials(),
            config=_instant_config(),
            scheduler=_scheduler(clock),
            playwright_factory=lambda: factory,
        )

    playwright = factory.playwright
    assert playwright.chromium.browser.context.closed
    assert playwright.chromium.browser.closed
    assert playwright.stopped


@pytest.mark.asyncio
async def test_execute_plan_returns_timeline_and_closes_session(clock):
    calls: list = []
    factory = _FakeFactory()
    plan = RunPlan(scenarios=(TimedScenario("alpha", 10, 1, clock, calls),), loops=2)

    timeline = await execute_plan(
        plan,
        "chromium",
        Credentials(),
        config=_instant_config(),
        scheduler=_scheduler(clock),
        playwright_factory=lambda: factory,
    )

    assert len(timeline.slots) == 2
    assert timeline.browser == "chromium"
    assert factory.playwright.stopped
