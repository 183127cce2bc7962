"""Custom exception hierarchy for Steadyload."""
from __future__ import annotations

from typing import Any, Dict, Iterable, Optional


class SteadyloadError(Exception):
    """Base exception for all Steadyload errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.context:
            ctx_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({ctx_str})"
        return self.message


class ConfigurationError(SteadyloadError):
    """Invalid run configuration, detected before any scenario starts."""
    pass


class UnknownBrowserError(ConfigurationError):
    """Browser identifier is not one of the supported browsers."""

    def __init__(
        self,
        browser: str,
        supported: Iterable[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.browser = browser
        self.supported = sorted(supported)
        message = f"Unexpected browser '{browser}'"
        super().__init__(message, context)
        self.context["supported"] = "|".join(self.supported)


class UnknownScenarioError(ConfigurationError):
    """Scenario name is not registered."""

    def __init__(
        self,
        name: str,
        available: Iterable[str],
        context: Optional[Dict[str, Any]] = None,
    ):
        self.name = name
        self.available = sorted(available)
        message = f"Unexpected scenario '{name}'"
        super().__init__(message, context)
        self.context["available"] = "|".join(self.available)


class CredentialError(SteadyloadError):
    """Credentials file is malformed or a site has no login."""

    def __init__(
        self,
        message: str,
        site: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.site = site
        if site:
            self.context["site"] = site


class SessionError(SteadyloadError):
    """The browser session could not be created or driven."""

    def __init__(
        self,
        message: str,
        browser: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, context)
        self.browser = browser
        if browser:
            self.context["browser"] = browser


class SlotOverrunError(SteadyloadError):
    """A scenario returned after its slot had already ended.

    The run is no longer comparable with other runs once this happens, so the
    scheduler never absorbs it.
    """

    def __init__(
        self,
        scenario: str,
        loop: int,
        duration: float,
        elapsed: float,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.scenario = scenario
        self.loop = loop
        self.duration = duration
        self.elapsed = elapsed
        message = (
            f"Scenario '{scenario}' overran its {duration:g}s slot "
            f"by {elapsed - duration:.3f}s"
        )
        super().__init__(message, context)
        self.context["loop"] = loop
        self.context["elapsed"] = round(elapsed, 3)

    @property
    def overrun(self) -> float:
        return self.elapsed - self.duration
