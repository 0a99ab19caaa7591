"""Configured build to .bst YAML generator.

Writes one BuildStream element per project so the dependency edges declared
during configuration can be inspected or built with ``bst``.
"""

import os
from typing import Any, Dict, List

import yaml

from .model import PATH_SEPARATOR, Build, ConfigurationError, Project


class ExportResult:
    """Result of exporting a build."""

    def __init__(self):
        self.elements: List[Dict[str, Any]] = []  # list of {filename, content}
        self.errors: List[str] = []


def element_filename(project: Project) -> str:
    """Map a project to its element filename.

    ``:sample:app`` becomes ``sample/app.bst``; the root project is named
    after itself, e.g. ``remote-konfig.bst``.
    """
    if project.parent is None:
        return project.name + ".bst"
    return "/".join(project.path[1:].split(PATH_SEPARATOR)) + ".bst"


class Exporter:
    """Exports a Build as BuildStream .bst elements."""

    def export(self, build: Build) -> ExportResult:
        """Configure build and convert every project to an element.

        Configuration failures and clashing filenames are reported in
        ``errors`` and yield no elements.
        """
        result = ExportResult()

        try:
            build.configure()
        except ConfigurationError as e:
            cause = e.__cause__
            result.errors.append(f"{e} {cause}" if cause else str(e))
            return result

        owners: Dict[str, Project] = {}
        for project in build.root.all_projects():
            filename = element_filename(project)
            if filename in owners:
                result.errors.append(
                    f"{project.path}: element {filename} is already used by {owners[filename].path}"
                )
                continue
            owners[filename] = project
            result.elements.append({
                "filename": filename,
                "content": self._element(project),
            })

        if result.errors:
            result.elements = []
        return result

    def _element(self, project: Project) -> Dict[str, Any]:
        depends = []
        for edge in project.dependencies.edges:
            filename = element_filename(edge.dependency)
            if filename not in depends:
                depends.append(filename)

        element = {
            "kind": "manual",
            "variables": {
                "project-path": project.path,
            },
        }
        if depends:
            element["depends"] = depends
        plugins = list(project.plugins)
        if plugins:
            element["variables"]["plugins"] = " ".join(plugins)
        return element

    def write_elements(self, result: ExportResult, output_dir: str):
        """Write exported elements to disk as .bst YAML files."""
        for element in result.elements:
            filepath = os.path.join(output_dir, element["filename"])
            os.makedirs(os.path.dirname(filepath), exist_ok=True)

            with open(filepath, "w") as f:
                f.write(format_bst(element["content"]))


def _section(key: str, value: Any) -> str:
    # safe_dump does the quoting, so any scalar reads back unchanged
    return yaml.safe_dump(
        {key: value},
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
        width=float("inf"),
    )


def format_bst(element_dict: dict) -> str:
    """Format a .bst element dict as YAML, one blank-line separated section per key."""
    sections = []
    for key in ("kind", "depends", "variables"):
        if key in element_dict:
            sections.append(_section(key, element_dict[key]))
    return "\n".join(sections)
