"""Login records for scenarios that need to sign in."""
from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Iterator, List, Optional

import yaml
from pydantic import AliasChoices, BaseModel, Field, ValidationError

from steadyload.core.exceptions import CredentialError
from steadyload.core.logging import get_logger


log = get_logger("credentials")


class Credential(BaseModel):
    """One (site, username, password) record.

    The capitalised keys written by older tooling (``Domain``, ``Username``,
    ``Password``) are accepted as well.
    """
    site: str = Field(validation_alias=AliasChoices("site", "Site", "domain", "Domain"))
    username: str = Field(validation_alias=AliasChoices("username", "Username"))
    password: str = Field(validation_alias=AliasChoices("password", "Password"), repr=False)

    def matches(self, site: str) -> bool:
        return self.site.strip().lower() == site.strip().lower()


class Credentials:
    """Read-only collection of credentials, looked up by site."""

    def __init__(self, records: Optional[Iterable[Credential]] = None) -> None:
        self._records: List[Credential] = list(records or [])

    def __iter__(self) -> Iterator[Credential]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def find(self, site: str) -> Optional[Credential]:
        for record in self._records:
            if record.matches(site):
                return record
        return None

    def for_site(self, site: str) -> Credential:
        record = self.find(site)
        if record is None:
            raise CredentialError("No credentials configured", site=site)
        return record

    @classmethod
    def from_file(cls, path: Path) -> Credentials:
        """Load a list of credential records.

        ``.yaml``/``.yml`` files are read as YAML, anything else as JSON.

        A missing file gives an empty collection; scenarios that need a login
        fail when they ask for it.
        """
        if not path.exists():
            log.warning("credentials_file_missing", path=str(path))
            return cls()

        try:
            with path.open(encoding="utf-8") as f:
                if path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise CredentialError(
                "Failed to parse credentials file", context={"path": str(path)}
            ) from e

        if data is None:
            return cls()
        if not isinstance(data, list):
            raise CredentialError(
                "Credentials file must contain a list of records",
                context={"path": str(path)},
            )

        try:
            records = [Credential.model_validate(item) for item in data]
        except ValidationError as e:
            raise CredentialError(
                "Invalid credential record",
                context={"path": str(path), "errors": e.error_count()},
            ) from e

        log.info("credentials_loaded", path=str(path), count=len(records))
        return cls(records)
