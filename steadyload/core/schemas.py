from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

from steadyload.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from steadyload.scenarios.base import Scenario


@dataclass(frozen=True)
class RunPlan:
    """
    The ordered scenarios selected for one measurement run.

    Attributes:
        scenarios: Scenarios in execution order; the same scenario may appear
            more than once
        loops: How many times the whole sequence is repeated (>= 1)
    """
    scenarios: Tuple["Scenario", ...]
    loops: int = 1

    def __post_init__(self) -> None:
        if not self.scenarios:
            raise ConfigurationError("No scenarios selected")
        if isinstance(self.loops, bool) or not isinstance(self.loops, int) or self.loops < 1:
            raise ConfigurationError("Loop count must be a positive integer", context={"loops": self.loops})

    @property
    def slot_count(self) -> int:
        return len(self.scenarios) * self.loops

    @property
    def planned_seconds(self) -> float:
        """Sum of declared durations over every loop."""
        return self.loops * sum(s.duration for s in self.scenarios)


@dataclass
class SlotRecord:
    """
    Timing of one executed (loop, scenario) slot.

    Attributes:
        loop: Zero-based loop index
        index: Zero-based position of the scenario within the loop
        scenario: Scenario name
        duration: Declared slot length in seconds
        started_at: Slot start, in seconds since the run clock started
        work_seconds: Time spent opening the tab and running the scenario
        idle_seconds: Time slept to fill the rest of the slot
        new_tab: Whether a new tab was opened for this slot
    """
    loop: int
    index: int
    scenario: str
    duration: float
    started_at: float
    work_seconds: float
    idle_seconds: float
    new_tab: bool


@dataclass
class RunTimeline:
    """Every completed slot of a run, in execution order."""
    browser: str
    loops: int
    slots: List[SlotRecord] = field(default_factory=list)

    @property
    def elapsed_seconds(self) -> float:
        if not self.slots:
            return 0.0
        last = self.slots[-1]
        return last.started_at + last.work_seconds + last.idle_seconds

    def to_dict(self) -> Dict[str, Any]:
        return {
            "browser": self.browser,
            "loops": self.loops,
            "elapsed_seconds": round(self.elapsed_seconds, 3),
            "slots": [asdict(slot) for slot in self.slots],
        }
