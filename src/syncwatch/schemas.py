"""Schemas for the Syncthing configuration and the roots we watch."""

import os
from dataclasses import dataclass
from typing import List

from pydantic import BaseModel, ConfigDict, Field

from syncwatch.utils import expand_tilde


class RepositoryConfiguration(BaseModel):
    """One repository (folder) as reported by GET /rest/config."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="ID")
    directory: str = Field(alias="Directory")
    read_only: bool = Field(default=False, alias="ReadOnly")
    rescan_interval_s: int = Field(default=0, alias="RescanIntervalS")


class Configuration(BaseModel):
    """The subset of the Syncthing configuration syncwatch reads."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    version: int = Field(alias="Version")
    repositories: List[RepositoryConfiguration] = Field(default_factory=list, alias="Repositories")


@dataclass(frozen=True)
class WatchRoot:
    """A watched directory tree and the repository id rescans are sent for."""

    id: str
    directory: str

    @classmethod
    def from_repository(cls, repo: RepositoryConfiguration) -> "WatchRoot":
        directory = os.path.abspath(expand_tilde(repo.directory))
        return cls(id=repo.id, directory=directory)
