"""Site scenarios shipped with Steadyload."""
from steadyload.core.registry import ScenarioRegistry
from steadyload.scenarios.base import Scenario
from steadyload.scenarios.mail import GmailScenario, OutlookScenario
from steadyload.scenarios.news import MsnbcScenario, MsnScenario
from steadyload.scenarios.search import GoogleScenario, WikipediaScenario
from steadyload.scenarios.shopping import AmazonScenario
from steadyload.scenarios.social import FacebookScenario, RedditScenario
from steadyload.scenarios.video import YoutubeScenario

SCENARIO_TYPES = (
    FacebookScenario,
    GmailScenario,
    MsnScenario,
    MsnbcScenario,
    OutlookScenario,
    RedditScenario,
    WikipediaScenario,
    YoutubeScenario,
    AmazonScenario,
    GoogleScenario,
)


def default_registry() -> ScenarioRegistry:
    """Registry holding one instance of every shipped scenario."""
    registry = ScenarioRegistry()
    for scenario_type in SCENARIO_TYPES:
        registry.add(scenario_type())
    return registry


__all__ = ["Scenario", "ScenarioRegistry", "SCENARIO_TYPES", "default_registry"]
