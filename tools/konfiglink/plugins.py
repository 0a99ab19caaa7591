"""Build plugins and the plugin id registry.

A plugin is a class with a single ``apply(project)`` method, called by the
host while the project is being configured. The only plugin shipped here is
the remote-konfig linker: on Android application projects it adds the
sibling ``:api`` project as an ``implementation`` dependency.
"""

from dataclasses import dataclass
from typing import List, Optional, Type

from .lookup import Absent, Found, lookup_project

ANDROID_APPLICATION_PLUGIN_ID = "com.android.application"
REMOTE_KONFIG_PLUGIN_ID = "io.github.remote.konfig"

API_PROJECT_PATH = ":api"
IMPLEMENTATION = "implementation"

# Project property that turns on skipping of already-declared :api edges.
DEDUPLICATE_PROPERTY = "remote-konfig.deduplicate"


class MissingDependencyTarget(Exception):
    """The project a plugin needs to depend on does not exist."""


class BuildExtension:
    """Base class for build plugins."""

    def apply(self, project):
        raise NotImplementedError


class RemoteKonfigPlugin(BuildExtension):

    def apply(self, project):
        project.plugins.with_id(
            ANDROID_APPLICATION_PLUGIN_ID,
            lambda _plugin_id: self._link_api(project),
        )

    def _link_api(self, project):
        result = lookup_project(project.root_project, API_PROJECT_PATH)
        if isinstance(result, Absent):
            raise MissingDependencyTarget(
                f"remote-konfig plugin requires a project named '{API_PROJECT_PATH}'"
            )
        assert isinstance(result, Found)
        api_project = result.project

        if _deduplicate(project) and any(
            e.dependency is api_project for e in project.dependencies.get(IMPLEMENTATION)
        ):
            project.logger.debug(
                "remote-konfig: %s already depends on %s", project.path, API_PROJECT_PATH
            )
            return

        project.dependencies.add(IMPLEMENTATION, api_project)
        project.logger.info(
            "remote-konfig applied: added %s dependency to %s", API_PROJECT_PATH, project.path
        )


def _deduplicate(project) -> bool:
    value = project.properties.get(DEDUPLICATE_PROPERTY, "false")
    return str(value).strip().lower() == "true"


@dataclass(frozen=True)
class PluginDescriptor:
    id: str
    implementation: Type[BuildExtension]
    display_name: str
    description: str


# Registry of all plugins that carry an implementation. Ids not listed here
# are treated as marker plugins by the host.
_PLUGINS: List[PluginDescriptor] = [
    PluginDescriptor(
        id=REMOTE_KONFIG_PLUGIN_ID,
        implementation=RemoteKonfigPlugin,
        display_name="Remote Konfig Gradle Plugin",
        description="Adds the remote-konfig API dependency to Android application modules.",
    ),
]


def get_plugin(plugin_id: str) -> Optional[PluginDescriptor]:
    """Look up the descriptor for a plugin id."""
    for descriptor in _PLUGINS:
        if descriptor.id == plugin_id:
            return descriptor
    return None


def supported_plugins() -> List[str]:
    """Return the ids of all registered plugins, sorted."""
    return sorted(d.id for d in _PLUGINS)
