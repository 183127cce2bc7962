from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Sequence, Tuple

from steadyload.core.exceptions import ConfigurationError, UnknownScenarioError
from steadyload.core.schemas import RunPlan

if TYPE_CHECKING:
    from steadyload.scenarios.base import Scenario


ALL_SELECTOR = "all"

# The "official" workload, in order. Reddit is left out: together with
# amazon it hangs Opera, and swapping their order crashes the other one.
CURATED_ORDER: Tuple[str, ...] = (
    "youtube",
    "amazon",
    "facebook",
    "google",
    "gmail",
    "wikipedia",
)


class ScenarioRegistry:
    """Maps scenario names to their single instance."""

    def __init__(self, curated_order: Sequence[str] = CURATED_ORDER) -> None:
        self._scenarios: Dict[str, Scenario] = {}
        self.curated_order = tuple(curated_order)

    def add(self, scenario: Scenario) -> Scenario:
        if scenario.name == ALL_SELECTOR:
            raise ConfigurationError(f"'{ALL_SELECTOR}' is reserved for the curated workload")
        if scenario.name in self._scenarios:
            raise ConfigurationError(
                "Duplicate scenario name", context={"scenario": scenario.name}
            )
        self._scenarios[scenario.name] = scenario
        return scenario

    def get(self, name: str) -> Scenario:
        try:
            return self._scenarios[name]
        except KeyError:
            raise UnknownScenarioError(name, self._scenarios) from None

    def names(self) -> List[str]:
        return sorted(self._scenarios)

    def curated(self) -> List[Scenario]:
        return [self.get(name) for name in self.curated_order]

    def __contains__(self, name: object) -> bool:
        return name in self._scenarios

    def __iter__(self) -> Iterator[Scenario]:
        return iter(self._scenarios.values())

    def __len__(self) -> int:
        return len(self._scenarios)

    def build_plan(self, names: Iterable[str], loops: int = 1) -> RunPlan:
        """Resolve a user selection into a RunPlan.

        ``["all"]`` expands to the curated order; otherwise the names are
        resolved in the order given and may repeat. Every problem is raised
        here, before a browser is launched.
        """
        selected = [name.strip().lower() for name in names]
        if selected == [ALL_SELECTOR]:
            scenarios = self.curated()
        elif ALL_SELECTOR in selected:
            raise ConfigurationError(f"'{ALL_SELECTOR}' cannot be combined with other scenarios")
        else:
            scenarios = [self.get(name) for name in selected]
        return RunPlan(scenarios=tuple(scenarios), loops=loops)
