from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from steadyload.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from steadyload.core.credentials import Credentials
    from steadyload.session.driver import BrowserSession


class Scenario(ABC):
    """
    A named, fixed-duration unit of scripted browser interaction.

    Subclasses set ``name`` and ``duration`` and implement :meth:`run`. The
    scheduler gives each scenario a slot of exactly ``duration`` seconds; the
    work done in :meth:`run` (plus opening its tab) must fit inside it.

    Example:
        >>> class Example(Scenario):
        ...     name = "example"
        ...     duration = 20
        ...
        ...     async def run(self, session, browser, credentials):
        ...         await session.goto("https://example.com")
    """

    name: str = ""
    duration: float = 0.0

    def __init__(self, duration: Optional[float] = None) -> None:
        if duration is not None:
            self.duration = float(duration)
        if not self.name or self.name != self.name.lower():
            raise ConfigurationError(
                "Scenario name must be a non-empty lowercase identifier",
                context={"scenario": self.name or type(self).__name__},
            )
        if not (math.isfinite(self.duration) and self.duration > 0):
            raise ConfigurationError(
                "Scenario duration must be a positive, finite number of seconds",
                context={"scenario": self.name, "duration": self.duration},
            )

    @abstractmethod
    async def run(self, session: "BrowserSession", browser: str, credentials: "Credentials") -> None:
        """Drive the browser; returning ends the scenario's work."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, duration={self.duration:g})"
