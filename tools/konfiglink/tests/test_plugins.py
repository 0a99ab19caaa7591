"""Tests for the remote-konfig linker plugin."""

import os
import sys
import unittest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from konfiglink.lookup import Absent, Found, lookup_project
from konfiglink.model import Project
from konfiglink.plugins import (
    ANDROID_APPLICATION_PLUGIN_ID,
    DEDUPLICATE_PROPERTY,
    IMPLEMENTATION,
    REMOTE_KONFIG_PLUGIN_ID,
    MissingDependencyTarget,
    RemoteKonfigPlugin,
    get_plugin,
    supported_plugins,
)

LOGGER = "konfiglink.model"


def make_root(*children):
    root = Project("remote-konfig")
    for name in children:
        root.child(name)
    return root


class TestRemoteKonfigPlugin(unittest.TestCase):

    def test_links_app_to_api(self):
        root = make_root("app", "api")
        app = root.find_project(":app")
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        with self.assertLogs(LOGGER, level="INFO") as logs:
            RemoteKonfigPlugin().apply(app)

        self.assertEqual(len(app.dependencies), 1)
        edge = app.dependencies.edges[0]
        self.assertIs(edge.consumer, app)
        self.assertIs(edge.dependency, root.find_project(":api"))
        self.assertEqual(edge.configuration, IMPLEMENTATION)

        self.assertEqual(len(logs.records), 1)
        self.assertIn(":app", logs.output[0])
        self.assertIn("remote-konfig applied", logs.output[0])

    def test_missing_api_raises(self):
        root = make_root("app")
        app = root.find_project(":app")
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        with self.assertRaises(MissingDependencyTarget) as ctx:
            RemoteKonfigPlugin().apply(app)

        self.assertEqual(str(ctx.exception), "remote-konfig plugin requires a project named ':api'")
        self.assertEqual(len(app.dependencies), 0)

    def test_no_marker_plugin_does_nothing(self):
        root = make_root("app", "api")
        app = root.find_project(":app")

        with self.assertNoLogs(LOGGER, level="DEBUG"):
            RemoteKonfigPlugin().apply(app)

        self.assertEqual(len(app.dependencies), 0)
        self.assertEqual(len(root.find_project(":api").dependencies), 0)

    def test_no_marker_and_no_api_does_not_raise(self):
        root = make_root("app")
        app = root.find_project(":app")
        RemoteKonfigPlugin().apply(app)
        self.assertEqual(len(app.dependencies), 0)

    def test_marker_applied_after_plugin(self):
        root = make_root("app", "api")
        app = root.find_project(":app")
        RemoteKonfigPlugin().apply(app)
        self.assertEqual(len(app.dependencies), 0)

        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)
        self.assertEqual(len(app.dependencies.get(IMPLEMENTATION)), 1)

    def test_marker_applied_after_plugin_without_api(self):
        root = make_root("app")
        app = root.find_project(":app")
        RemoteKonfigPlugin().apply(app)

        with self.assertRaises(MissingDependencyTarget):
            app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)
        self.assertEqual(len(app.dependencies), 0)

    def test_lookup_uses_live_hierarchy(self):
        root = make_root("app")
        app = root.find_project(":app")
        RemoteKonfigPlugin().apply(app)

        # :api appears after registration but before the marker fires
        api = root.child("api")
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        self.assertIs(app.dependencies.edges[0].dependency, api)

    def test_nested_app_links_root_level_api(self):
        root = make_root("api")
        app = root.child("sample").child("app")
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        with self.assertLogs(LOGGER, level="INFO") as logs:
            RemoteKonfigPlugin().apply(app)

        self.assertIs(app.dependencies.edges[0].dependency, root.find_project(":api"))
        self.assertIn(":sample:app", logs.output[0])

    def test_nested_api_is_not_a_sibling(self):
        root = Project("remote-konfig")
        root.child("libs").child("api")
        app = root.child("app")
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        with self.assertRaises(MissingDependencyTarget):
            RemoteKonfigPlugin().apply(app)

    def test_apply_twice_adds_twice(self):
        root = make_root("app", "api")
        app = root.find_project(":app")
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        plugin = RemoteKonfigPlugin()
        plugin.apply(app)
        plugin.apply(app)

        self.assertEqual(len(app.dependencies.get(IMPLEMENTATION)), 2)

    def test_apply_twice_before_marker_adds_twice(self):
        root = make_root("app", "api")
        app = root.find_project(":app")
        RemoteKonfigPlugin().apply(app)
        RemoteKonfigPlugin().apply(app)

        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        self.assertEqual(len(app.dependencies.get(IMPLEMENTATION)), 2)

    def test_deduplicate_property(self):
        root = make_root("app", "api")
        app = root.find_project(":app")
        app.properties[DEDUPLICATE_PROPERTY] = "true"
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        RemoteKonfigPlugin().apply(app)
        RemoteKonfigPlugin().apply(app)

        self.assertEqual(len(app.dependencies.get(IMPLEMENTATION)), 1)

    def test_deduplicate_property_false(self):
        root = make_root("app", "api")
        app = root.find_project(":app")
        app.properties[DEDUPLICATE_PROPERTY] = "false"
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        RemoteKonfigPlugin().apply(app)
        RemoteKonfigPlugin().apply(app)

        self.assertEqual(len(app.dependencies.get(IMPLEMENTATION)), 2)

    def test_applied_by_id(self):
        root = make_root("app", "api")
        app = root.find_project(":app")
        app.plugins.apply(REMOTE_KONFIG_PLUGIN_ID)
        app.plugins.apply(ANDROID_APPLICATION_PLUGIN_ID)

        self.assertTrue(app.plugins.has_plugin(REMOTE_KONFIG_PLUGIN_ID))
        self.assertEqual(len(app.dependencies), 1)


class TestLookup(unittest.TestCase):

    def test_found(self):
        root = make_root("api")
        result = lookup_project(root, ":api")
        self.assertIsInstance(result, Found)
        self.assertIs(result.project, root.find_project(":api"))

    def test_absent(self):
        root = make_root("app")
        result = lookup_project(root, ":api")
        self.assertEqual(result, Absent(":api"))


class TestRegistry(unittest.TestCase):

    def test_remote_konfig_registered(self):
        descriptor = get_plugin(REMOTE_KONFIG_PLUGIN_ID)
        self.assertIsNotNone(descriptor)
        self.assertIs(descriptor.implementation, RemoteKonfigPlugin)
        self.assertEqual(descriptor.display_name, "Remote Konfig Gradle Plugin")

    def test_marker_not_registered(self):
        self.assertIsNone(get_plugin(ANDROID_APPLICATION_PLUGIN_ID))

    def test_supported_plugins(self):
        self.assertEqual(supported_plugins(), [REMOTE_KONFIG_PLUGIN_ID])


if __name__ == "__main__":
    unittest.main()
