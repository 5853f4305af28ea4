"""Loading user config modules into a ``Config``."""

from __future__ import annotations

import os
import tempfile
import textwrap
import unittest
from pathlib import Path
from unittest import mock

from fancytree.color import ColorChoice
from fancytree.config import (
    CONFIG_DIR_ENV,
    Config,
    ConfigModule,
    ScriptApi,
    default_config_dir,
    ensure_config_file,
    load_config,
)
from fancytree.diagnostics import DiagnosticKind, Diagnostics
from fancytree.hooks import Hook, HookKind
from fancytree.sorting import DEFAULT_SORT, Directories, Method, SortSpec


class ConfigDirTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.config_dir = Path(self._tmp.name)
        self.diagnostics = Diagnostics()

    def write(self, module: ConfigModule, source: str) -> None:
        (self.config_dir / module.filename).write_text(textwrap.dedent(source), encoding="utf-8")

    def load(self, api: ScriptApi | None = None) -> Config:
        return load_config(self.config_dir, api or ScriptApi(), self.diagnostics)


class LoadConfigTests(ConfigDirTestCase):
    def test_missing_modules_mean_defaults_without_diagnostics(self) -> None:
        self.assertEqual(self.load(), Config())
        self.assertEqual(len(self.diagnostics), 0)

    def test_default_templates_load_cleanly(self) -> None:
        for module in ConfigModule:
            ensure_config_file(module, self.config_dir)
        config = self.load()
        self.assertIs(config.color, ColorChoice.AUTO)
        self.assertEqual(config.sorting, DEFAULT_SORT)
        self.assertIsNone(config.level)
        self.assertIsInstance(config.skip, Hook)
        self.assertIsInstance(config.icon, Hook)
        self.assertIsInstance(config.icon_color, Hook)
        self.assertIs(config.untracked_color.kind, HookKind.UNTRACKED_COLOR)
        self.assertIs(config.tracked_color.kind, HookKind.TRACKED_COLOR)
        self.assertEqual(len(self.diagnostics), 0)

    def test_main_module_values(self) -> None:
        self.write(
            ConfigModule.MAIN,
            """
            color = "ansi"
            level = 2
            sorting = {"method": "natural", "directories": "first"}

            def skip(filepath, attributes, default):
                return attributes.file_type == "symlink"
            """,
        )
        config = self.load()
        self.assertIs(config.color, ColorChoice.ANSI)
        self.assertEqual(config.level, 2)
        self.assertEqual(config.sorting, SortSpec(method=Method.NATURAL, directories=Directories.FIRST))
        self.assertIs(config.skip.kind, HookKind.SKIP)
        self.assertEqual(config.skip.name, "config.skip")

    def test_comparator_function_becomes_hook(self) -> None:
        self.write(
            ConfigModule.MAIN,
            """
            def sorting(left, right):
                return 0
            """,
        )
        config = self.load()
        self.assertIsInstance(config.sorting, Hook)
        self.assertIs(config.sorting.kind, HookKind.COMPARATOR)

    def test_invalid_fields_fall_back_individually(self) -> None:
        self.write(
            ConfigModule.MAIN,
            """
            color = "sometimes"
            level = -1
            sorting = {"method": "shuffle"}
            skip = "not a function"
            """,
        )
        config = self.load()
        self.assertEqual(config, Config())
        records = self.diagnostics.of_kind(DiagnosticKind.CONFIG)
        self.assertEqual(len(records), 4)
        joined = "\n".join(record.message for record in records)
        for field_name in ("color", "level", "sorting", "skip"):
            self.assertIn(field_name, joined)

    def test_broken_module_is_reported_once_and_replaced_by_defaults(self) -> None:
        self.write(ConfigModule.MAIN, "color = 'on'\nraise RuntimeError('oops')\n")
        self.write(ConfigModule.ICONS, "def icon(:\n")
        config = self.load()
        self.assertIs(config.color, ColorChoice.AUTO)
        self.assertIsNone(config.icon)
        records = self.diagnostics.of_kind(DiagnosticKind.CONFIG)
        self.assertEqual(len(records), 2)
        self.assertIn("RuntimeError: oops", records[0].message)
        self.assertIn("SyntaxError", records[1].message)

    def test_git_statuses_may_be_an_object(self) -> None:
        self.write(
            ConfigModule.COLORS,
            """
            class git_statuses:
                @staticmethod
                def tracked(status, default):
                    return "red"
            """,
        )
        config = self.load()
        self.assertIsNone(config.untracked_color)
        self.assertEqual(config.tracked_color.name, "colors.git_statuses.tracked")

    def test_injected_api_is_visible_to_modules(self) -> None:
        self.write(
            ConfigModule.ICONS,
            """
            HAS_GIT = fancytree.git is not None
            PLATFORM = fancytree.os

            def icon(filename, attributes, default):
                if fancytree.glob_matches("*.md", filename):
                    return "M"
                return default
            """,
        )
        config = self.load(ScriptApi(os="linux", is_unix=True))
        self.assertEqual(config.icon.func("README.md", None, "d"), "M")
        self.assertEqual(config.icon.func("main.py", None, "d"), "d")
        module_globals = config.icon.func.__globals__
        self.assertFalse(module_globals["HAS_GIT"])
        self.assertEqual(module_globals["PLATFORM"], "linux")


class ConfigLocationTests(unittest.TestCase):
    def test_environment_override(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch.dict(os.environ, {CONFIG_DIR_ENV: tmp}):
                self.assertEqual(default_config_dir(), Path(tmp))

    def test_platform_directory_is_used_without_override(self) -> None:
        with mock.patch.dict(os.environ, {CONFIG_DIR_ENV: ""}):
            with mock.patch("fancytree.config.user_config_dir", return_value="/cfg/fancy-tree") as config_dir:
                self.assertEqual(default_config_dir(), Path("/cfg/fancy-tree"))
        config_dir.assert_called_once_with("fancy-tree", appauthor=False)

    def test_ensure_config_file_keeps_existing_content(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            target = Path(tmp) / "nested"
            path = ensure_config_file(ConfigModule.ICONS, target)
            self.assertEqual(path, target / "icons.py")
            self.assertIn("def icon(", path.read_text(encoding="utf-8"))

            path.write_text("# mine\n", encoding="utf-8")
            ensure_config_file(ConfigModule.ICONS, target)
            self.assertEqual(path.read_text(encoding="utf-8"), "# mine\n")


if __name__ == "__main__":
    unittest.main()
