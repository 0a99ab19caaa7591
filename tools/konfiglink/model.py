"""In-process model of a hierarchical project build.

Mirrors the parts of Gradle's Project API that build plugins talk to: a tree
of projects addressed by colon-separated paths, a per-project plugin
container with deferred ``with_id`` actions, and a dependency handler that
records configuration-scoped edges. Nothing here resolves or builds
dependencies; the model only records what plugins declare.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

from .plugins import get_plugin

logger = logging.getLogger(__name__)

PATH_SEPARATOR = ":"

# Characters that may not appear in a project name.
INVALID_NAME_CHARS = set(PATH_SEPARATOR + "/\\<>\"?*|")


class ConfigurationError(Exception):
    """Raised when configuring a project fails. The cause is chained."""

    def __init__(self, project_path: str):
        super().__init__(f"A problem occurred configuring project '{project_path}'.")
        self.project_path = project_path


@dataclass(frozen=True)
class DependencyEdge:
    consumer: "Project"
    dependency: "Project"
    configuration: str

    def __repr__(self):
        return f"DependencyEdge({self.consumer.path} -> {self.dependency.path}, {self.configuration})"


class DependencyHandler:
    """Records dependency declarations for one project.

    Every ``add`` call produces a new edge; declaring the same dependency twice
    yields two edges.
    """

    def __init__(self, project: "Project"):
        self.project = project
        self.edges: List[DependencyEdge] = []

    def add(self, configuration: str, target: "Project") -> DependencyEdge:
        if not configuration:
            raise ValueError(f"{self.project.path}: configuration name must not be empty")
        edge = DependencyEdge(consumer=self.project, dependency=target, configuration=configuration)
        self.edges.append(edge)
        return edge

    def get(self, configuration: str) -> List[DependencyEdge]:
        return [e for e in self.edges if e.configuration == configuration]

    def __len__(self):
        return len(self.edges)


class PluginContainer:
    """Plugins applied to one project, keyed by plugin id."""

    def __init__(self, project: "Project"):
        self.project = project
        self._applied: List[str] = []
        self._pending: Dict[str, List[Callable[[str], None]]] = {}

    def apply(self, plugin_id: str):
        """Apply a plugin by id. Applying an id twice is a no-op.

        Ids with a registered implementation are instantiated and applied;
        any other id is an opaque marker. Pending ``with_id`` actions run after
        the plugin itself has been applied.
        """
        if plugin_id in self._applied:
            return

        descriptor = get_plugin(plugin_id)
        if descriptor is not None:
            descriptor.implementation().apply(self.project)

        self._applied.append(plugin_id)
        logger.debug("%s: applied plugin %s", self.project.path, plugin_id)

        for action in self._pending.pop(plugin_id, []):
            action(plugin_id)

    def has_plugin(self, plugin_id: str) -> bool:
        return plugin_id in self._applied

    def with_id(self, plugin_id: str, action: Callable[[str], None]):
        """Run action now if plugin_id is applied, otherwise when it is."""
        if plugin_id in self._applied:
            action(plugin_id)
        else:
            self._pending.setdefault(plugin_id, []).append(action)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._applied))

    def __contains__(self, plugin_id):
        return self.has_plugin(plugin_id)


class Project:
    """A node in the project hierarchy."""

    def __init__(self, name: str, parent: Optional["Project"] = None):
        if not name or INVALID_NAME_CHARS.intersection(name):
            raise ValueError(f"invalid project name: {name!r}")
        self.name = name
        self.parent = parent
        self.children: Dict[str, Project] = {}
        self.properties: Dict[str, str] = {}
        self.plugins = PluginContainer(self)
        self.dependencies = DependencyHandler(self)

    def __repr__(self):
        return f"Project({self.path})"

    @property
    def path(self) -> str:
        if self.parent is None:
            return PATH_SEPARATOR
        if self.parent.parent is None:
            return PATH_SEPARATOR + self.name
        return self.parent.path + PATH_SEPARATOR + self.name

    @property
    def root_project(self) -> "Project":
        project = self
        while project.parent is not None:
            project = project.parent
        return project

    @property
    def logger(self) -> logging.Logger:
        return logger

    def child(self, name: str) -> "Project":
        """Return the direct child called name, creating it if needed."""
        existing = self.children.get(name)
        if existing is not None:
            return existing
        project = Project(name, parent=self)
        self.children[name] = project
        return project

    def find_project(self, path: str) -> Optional["Project"]:
        """Find a project by path, or None.

        Absolute paths start at the root project, relative paths at this one.
        """
        if path.startswith(PATH_SEPARATOR):
            project = self.root_project
            path = path[1:]
        else:
            project = self

        for name in path.split(PATH_SEPARATOR) if path else []:
            project = project.children.get(name)
            if project is None:
                return None
        return project

    def all_projects(self) -> Iterator["Project"]:
        """Yield this project and every descendant, depth first."""
        yield self
        for child in self.children.values():
            yield from child.all_projects()


class Build:
    """A project hierarchy plus the plugins each project requests."""

    def __init__(self, root: Project, plugin_requests: Optional[Dict[str, List[str]]] = None):
        self.root = root
        self.plugin_requests: Dict[str, List[str]] = dict(plugin_requests or {})

    def configure(self):
        """Apply every requested plugin, project by project.

        The first failure aborts the whole pass.
        """
        for project in self.root.all_projects():
            try:
                for plugin_id in self.plugin_requests.get(project.path, []):
                    project.plugins.apply(plugin_id)
            except Exception as e:
                raise ConfigurationError(project.path) from e

    def edges(self) -> List[DependencyEdge]:
        result = []
        for project in self.root.all_projects():
            result.extend(project.dependencies.edges)
        return result
