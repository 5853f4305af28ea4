"""Icon defaults cascade and icon hook override behavior."""

from __future__ import annotations

import unittest
from pathlib import Path

from fancytree.attributes import Entry, FileType
from fancytree.diagnostics import DiagnosticKind, Diagnostics
from fancytree.hooks import Hook, HookKind
from fancytree.icons import default_icon, fallback_icon, resolve_icon
from fancytree.rules import LANGUAGE_ICONS, Glyphs, RuleTable


def _file(name: str, language: str | None = None, executable: bool = False) -> Entry:
    return Entry(
        path=Path("root") / name,
        file_type=FileType.FILE,
        is_hidden=name.startswith("."),
        is_executable=executable,
        language=language,
    )


RULES = RuleTable(
    filenames=(("build.rs", "L"),),
    extensions=(("rs", "E"),),
    globs=(("build*", "G"),),
)


class IconPrecedenceTests(unittest.TestCase):
    def test_literal_beats_extension(self) -> None:
        self.assertEqual(default_icon(_file("build.rs"), RULES), "L")

    def test_extension_beats_glob(self) -> None:
        self.assertEqual(default_icon(_file("build_helpers.rs"), RULES), "E")

    def test_glob_beats_language(self) -> None:
        self.assertEqual(default_icon(_file("buildfile", language="Python"), RULES), "G")

    def test_language_beats_generic_fallback(self) -> None:
        entry = _file("script", language="Python")
        self.assertEqual(default_icon(entry, RULES), LANGUAGE_ICONS["Python"])

    def test_unknown_language_uses_fallback(self) -> None:
        self.assertEqual(default_icon(_file("thing", language="Brainfuck"), RULES), Glyphs.FILE)


class FallbackIconTests(unittest.TestCase):
    def test_fallback_is_keyed_by_file_type(self) -> None:
        directory = Entry(Path("d"), FileType.DIRECTORY, False, False)
        link = Entry(Path("l"), FileType.SYMLINK, False, False)
        self.assertEqual(fallback_icon(directory), Glyphs.DIRECTORY)
        self.assertEqual(fallback_icon(link), Glyphs.SYMLINK)
        self.assertEqual(fallback_icon(_file("plain")), Glyphs.FILE)
        self.assertEqual(fallback_icon(_file("tool", executable=True)), Glyphs.EXECUTABLE)


class IconHookTests(unittest.TestCase):
    def setUp(self) -> None:
        self.entry = _file("build.rs")
        self.diagnostics = Diagnostics()

    def test_no_hook_returns_default(self) -> None:
        self.assertEqual(resolve_icon(self.entry, None, self.diagnostics, RULES), "L")

    def test_hook_replacement_wins(self) -> None:
        hook = Hook(HookKind.ICON, lambda name, attrs, default: "X", "icons.icon")
        self.assertEqual(resolve_icon(self.entry, hook, self.diagnostics, RULES), "X")
        self.assertEqual(len(self.diagnostics), 0)

    def test_hook_returning_none_disables_icon(self) -> None:
        hook = Hook(HookKind.ICON, lambda name, attrs, default: None, "icons.icon")
        self.assertIsNone(resolve_icon(self.entry, hook, self.diagnostics, RULES))

    def test_hook_receives_basename_attributes_and_default(self) -> None:
        calls = []

        def icon(name, attrs, default):
            calls.append((name, attrs, default))
            return default

        resolve_icon(self.entry, Hook(HookKind.ICON, icon, "icons.icon"), self.diagnostics, RULES)
        name, attrs, default = calls[0]
        self.assertEqual(name, "build.rs")
        self.assertEqual(attrs.file_type, "file")
        self.assertFalse(attrs.is_executable)
        self.assertEqual(default, "L")

    def test_faulting_hook_falls_back_and_reports_once(self) -> None:
        def broken(name, attrs, default):
            raise RuntimeError("boom")

        hook = Hook(HookKind.ICON, broken, "icons.icon")
        for name in ("build.rs", "main.rs", "buildx"):
            self.assertEqual(
                resolve_icon(_file(name), hook, self.diagnostics, RULES),
                default_icon(_file(name), RULES),
            )
        records = self.diagnostics.of_kind(DiagnosticKind.HOOK)
        self.assertEqual(len(records), 1)
        self.assertIn("icons.icon", records[0].message)
        self.assertIn("RuntimeError: boom", records[0].message)

    def test_malformed_return_is_treated_as_fault(self) -> None:
        hook = Hook(HookKind.ICON, lambda name, attrs, default: 42, "icons.icon")
        self.assertEqual(resolve_icon(self.entry, hook, self.diagnostics, RULES), "L")
        self.assertEqual(len(self.diagnostics.of_kind(DiagnosticKind.HOOK)), 1)


if __name__ == "__main__":
    unittest.main()
