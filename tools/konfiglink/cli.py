#!/usr/bin/env python3
"""CLI for konfiglink: configure a project layout and inspect its dependency edges.

Usage:
    konfiglink configure <settings.yaml>   (apply plugins, print dependency edges)
    konfiglink projects <settings.yaml>    (show project hierarchy)
    konfiglink plugins                     (list registered plugins)
    konfiglink export <settings.yaml> [--output-dir elements/] [--dry-run]
"""

import argparse
import logging
import os
import sys

# Add parent directory to path so we can import konfiglink
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from konfiglink.exporter import Exporter, format_bst
from konfiglink.model import ConfigurationError
from konfiglink.plugins import get_plugin, supported_plugins
from konfiglink.settings import SettingsError, load_settings


def _load(path):
    """Load a settings file, printing errors. Returns None on failure."""
    if not os.path.exists(path):
        print(f"Error: file not found: {path}", file=sys.stderr)
        return None
    try:
        return load_settings(path)
    except SettingsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None


def cmd_configure(args):
    """Configure the build and print every dependency edge."""
    build = _load(args.file)
    if build is None:
        return 1

    try:
        build.configure()
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.__cause__ is not None:
            print(f"  {e.__cause__}", file=sys.stderr)
        return 1

    edges = build.edges()
    print(f"Dependency edges ({len(edges)}):")
    for edge in edges:
        print(f"  {edge.consumer.path} -> {edge.dependency.path} ({edge.configuration})")
    return 0


def cmd_projects(args):
    """Show the project hierarchy."""
    build = _load(args.file)
    if build is None:
        return 1

    print(f"Root project: {build.root.name}")
    for project in build.root.all_projects():
        plugins = build.plugin_requests.get(project.path, [])
        print(f"  {project.path}")
        if plugins:
            print(f"    plugins: {', '.join(plugins)}")
    return 0


def cmd_plugins(args):
    """List registered plugins."""
    for plugin_id in supported_plugins():
        descriptor = get_plugin(plugin_id)
        print(f"{plugin_id}: {descriptor.display_name}")
        print(f"  {descriptor.description}")
    return 0


def cmd_export(args):
    """Export the configured build as .bst elements."""
    build = _load(args.file)
    if build is None:
        return 1

    exporter = Exporter()
    result = exporter.export(build)

    if result.errors:
        print("Errors:", file=sys.stderr)
        for err in result.errors:
            print(f"  {err}", file=sys.stderr)
        return 1

    if not result.elements:
        print("No elements generated.", file=sys.stderr)
        return 1

    if args.dry_run:
        print(f"Would generate {len(result.elements)} element(s):")
        for elem in result.elements:
            print(f"  {elem['filename']}")
            print(format_bst(elem["content"]))
            print("---")
    else:
        output_dir = args.output_dir
        exporter.write_elements(result, output_dir)
        print(f"Generated {len(result.elements)} element(s) in {output_dir}/:")
        for elem in result.elements:
            print(f"  {elem['filename']}")

    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="konfiglink: link Android application projects to their :api project"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Log plugin activity")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # configure
    p_configure = subparsers.add_parser("configure", help="Configure and print dependency edges")
    p_configure.add_argument("file", help="Path to settings YAML file")

    # projects
    p_projects = subparsers.add_parser("projects", help="Show project hierarchy")
    p_projects.add_argument("file", help="Path to settings YAML file")

    # plugins
    subparsers.add_parser("plugins", help="List registered plugins")

    # export
    p_export = subparsers.add_parser("export", help="Export configured build as .bst elements")
    p_export.add_argument("file", help="Path to settings YAML file")
    p_export.add_argument("--output-dir", default="elements", help="Output directory (default: elements/)")
    p_export.add_argument("--dry-run", "-n", action="store_true", help="Print elements without writing files")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "configure":
        return cmd_configure(args)
    elif args.command == "projects":
        return cmd_projects(args)
    elif args.command == "plugins":
        return cmd_plugins(args)
    elif args.command == "export":
        return cmd_export(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
