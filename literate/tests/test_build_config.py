"""Tests for the build configuration contract."""

import tempfile
import unittest
from pathlib import Path

from core.startup_config import ConfigurationError
from literate.build_config import DocBuildConfig, load_build_config, parse_build_config
from literate.config import HIDE_SCOPE_ENCLOSING_BLOCK
from literate.formats import MARKDOWN


class TestParseBuildConfig(unittest.TestCase):
    def test_empty_payload_uses_defaults(self) -> None:
        config = parse_build_config({})
        self.assertEqual(config.host_language, "csharp")
        self.assertEqual(config.file_patterns, ("*.doc.cs",))
        self.assertEqual(dict(config.symbols), {})
        self.assertTrue(config.drop_structural_runs)
        self.assertEqual(config.hide.markers, ("hide",))

    def test_full_payload(self) -> None:
        config = parse_build_config({
            "input_root": "src/Tests",
            "output_root": "docs/client-concepts",
            "symbols": {"DOTNETCORE": "false", "NET46": True},
            "output_format": "markdown",
            "hide": {"markers": ["hide", "hidden"], "scope": HIDE_SCOPE_ENCLOSING_BLOCK},
            "noise": {"attributes": ["I"], "line_patterns": [r"^\s*#region"]},
            "kebab_case_paths": True,
            "workers": 2,
        })
        self.assertEqual(config.input_root, "src/Tests")
        self.assertEqual(dict(config.symbols), {"DOTNETCORE": False, "NET46": True})
        self.assertIs(config.output_format, MARKDOWN)
        self.assertEqual(config.hide.markers, ("hide", "hidden"))
        self.assertEqual(config.hide.scope, HIDE_SCOPE_ENCLOSING_BLOCK)
        self.assertEqual(config.noise.attributes, ("I",))
        self.assertTrue(config.kebab_case_paths)
        self.assertEqual(config.workers, 2)

    def test_config_is_read_only(self) -> None:
        config = parse_build_config({"symbols": {"DOTNETCORE": True}})
        with self.assertRaises(TypeError):
            config.symbols["DOTNETCORE"] = False
        with self.assertRaises(AttributeError):
            config.host_language = "fsharp"

    def test_invalid_entries_raise(self) -> None:
        bad_payloads = [
            {"symbols": {"DOTNETCORE": "maybe"}},
            {"symbols": {"not a symbol": True}},
            {"symbols": ["DOTNETCORE"]},
            {"output_format": "rst"},
            {"hide": {"scope": "forever"}},
            {"hide": {"markers": [""]}},
            {"noise": {"line_patterns": ["(unclosed"]}},
            {"workers": 0},
            {"tab_width": "wide"},
            {"host_language": "  "},
        ]
        for payload in bad_payloads:
            with self.subTest(payload=payload):
                with self.assertRaises(ConfigurationError):
                    parse_build_config(payload)


class TestLoadBuildConfig(unittest.TestCase):
    def test_none_path_gives_defaults(self) -> None:
        self.assertEqual(load_build_config(None), DocBuildConfig())

    def test_load_yaml_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "docgen.yml"
            path.write_text(
                "input_root: src\n"
                "symbols:\n"
                "  DOTNETCORE: false\n"
                "output_format:\n"
                "  base: asciidoc\n"
                "  extension: .adoc\n",
                encoding="utf-8",
            )
            config = load_build_config(str(path), strict=True)
        self.assertEqual(config.symbols["DOTNETCORE"], False)
        self.assertEqual(config.output_format.extension, ".adoc")

    def test_strict_missing_file_raises(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_build_config("/definitely/missing.yml", strict=True)


if __name__ == "__main__":
    unittest.main()
