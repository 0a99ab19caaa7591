"""Settings file loader.

A settings file is a YAML document describing the project hierarchy, in the
spirit of ``settings.gradle.kts``::

    name: remote-konfig
    include:
      - ":api"
      - ":processor"
      - ":sample:app"
    projects:
      ":sample:app":
        plugins:
          - com.android.application
          - io.github.remote.konfig

Including ``:sample:app`` also creates ``:sample``. Per-project blocks may
list ``plugins`` (applied in order during configuration) and string
``properties``.
"""

from typing import Any, Dict, List

import yaml

from .model import PATH_SEPARATOR, Build, Project

SETTINGS_KEYS = ["name", "include", "projects"]
PROJECT_KEYS = ["plugins", "properties"]


class SettingsError(Exception):
    def __init__(self, message, filename="<string>"):
        self.filename = filename
        super().__init__(f"{filename}: {message}")


def _validate_keys(node: Dict[str, Any], valid_keys: List[str], where: str, filename: str):
    for key in node:
        if key not in valid_keys:
            raise SettingsError(
                f"{where}: unexpected key '{key}', expected one of: {', '.join(valid_keys)}",
                filename,
            )


def _string_list(value: Any, where: str, filename: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise SettingsError(f"{where}: expected a list of strings", filename)
    return value


def _normalize_path(path: str) -> str:
    if not path.startswith(PATH_SEPARATOR):
        path = PATH_SEPARATOR + path
    return path


def _include(root: Project, path: str, filename: str):
    names = path[1:].split(PATH_SEPARATOR)
    if not all(names):
        raise SettingsError(f"invalid project path: {path!r}", filename)
    project = root
    for name in names:
        try:
            project = project.child(name)
        except ValueError as e:
            raise SettingsError(f"{path}: {e}", filename) from e


def _load(data: Any, filename: str) -> Build:
    if not isinstance(data, dict):
        raise SettingsError("settings must be a mapping", filename)
    _validate_keys(data, SETTINGS_KEYS, "settings", filename)

    name = data.get("name")
    if not isinstance(name, str) or not name:
        raise SettingsError("'name' is required and must be a string", filename)

    try:
        root = Project(name)
    except ValueError as e:
        raise SettingsError(f"name: {e}", filename) from e
    for path in _string_list(data.get("include"), "include", filename):
        _include(root, _normalize_path(path), filename)

    projects = data.get("projects") or {}
    if not isinstance(projects, dict):
        raise SettingsError("'projects' must be a mapping", filename)

    plugin_requests = {}
    for path, block in projects.items():
        path = _normalize_path(str(path))
        project = root.find_project(path)
        if project is None:
            raise SettingsError(f"project '{path}' is not included", filename)

        block = block or {}
        if not isinstance(block, dict):
            raise SettingsError(f"{path}: project block must be a mapping", filename)
        _validate_keys(block, PROJECT_KEYS, path, filename)

        plugin_requests[path] = _string_list(block.get("plugins"), f"{path}: plugins", filename)

        properties = block.get("properties") or {}
        if not isinstance(properties, dict):
            raise SettingsError(f"{path}: 'properties' must be a mapping", filename)
        for key, value in properties.items():
            if value is None:
                raise SettingsError(f"{path}: property '{key}' has no value", filename)
            if isinstance(value, bool):
                value = "true" if value else "false"
            project.properties[str(key)] = str(value)

    return Build(root, plugin_requests)


def parse_settings(text: str, filename: str = "<string>") -> Build:
    """Parse a settings YAML string into an unconfigured Build."""
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise SettingsError(f"invalid YAML: {e}", filename) from e
    return _load(data, filename)


def load_settings(filepath: str) -> Build:
    """Load a settings file into an unconfigured Build."""
    with open(filepath, "r") as f:
        text = f.read()
    return parse_settings(text, filename=filepath)
