"""Project lookups as an explicit Found / Absent result."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from .model import Project


@dataclass(frozen=True)
class Found:
    project: "Project"


@dataclass(frozen=True)
class Absent:
    path: str


Lookup = Union[Found, Absent]


def lookup_project(root: "Project", path: str) -> Lookup:
    """Look up path under root against the live hierarchy."""
    project = root.find_project(path)
    if project is None:
        return Absent(path)
    return Found(project)
