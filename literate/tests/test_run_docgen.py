"""Tests for the run_docgen command-line driver."""

import json
import tempfile
import unittest
from pathlib import Path

import run_docgen
from core.startup_config import ConfigurationError


class TestRunDocgen(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        root = Path(self._tmp.name)
        self.input_root = root / "src"
        self.output_root = root / "docs"
        self.report_dir = root / "reports"
        self.input_root.mkdir()

    def _write(self, relative: str, text: str) -> None:
        path = self.input_root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    def _run(self, *extra: str) -> int:
        return run_docgen.main([
            "--input-root", str(self.input_root),
            "--output-root", str(self.output_root),
            "--report-dir", str(self.report_dir),
            "--log-level", "WARNING",
            *extra,
        ])

    def _report(self) -> dict:
        reports = list(self.report_dir.glob("docgen-*.json"))
        self.assertEqual(len(reports), 1)
        return json.loads(reports[0].read_text(encoding="utf-8"))

    def test_success_writes_docs_and_report(self) -> None:
        self._write("Concepts/Intro.doc.cs", "/** Intro. */\n#if !DOTNETCORE\nx();\n#endif\n")
        code = self._run("--define", "DOTNETCORE=true", "--format", "markdown", "--kebab-case-paths")
        self.assertEqual(code, 0)
        output = self.output_root / "concepts" / "intro.md"
        self.assertEqual(output.read_text(encoding="utf-8"), "Intro.\n")
        report = self._report()
        self.assertEqual(report["status"], "success")
        self.assertEqual(report["documents_written"], 1)

    def test_structural_error_exit_code(self) -> None:
        self._write("Broken.doc.cs", "/** never closed\n")
        self._write("Fine.doc.cs", "/** Fine. */\n")
        self.assertEqual(self._run(), 1)
        self.assertTrue((self.output_root / "Fine.asciidoc").is_file())
        report = self._report()
        self.assertEqual(report["status"], "partial_success")
        self.assertEqual(report["failures"][0]["path"], "Broken.doc.cs")

    def test_unknown_symbol_exit_code(self) -> None:
        self._write("A.doc.cs", "/** A. */\n#if NET46\nx();\n#endif\n")
        self.assertEqual(self._run(), run_docgen.EXIT_CONFIGURATION_ERROR)
        self.assertEqual(list(self.output_root.rglob("*.asciidoc")), [])

    def test_bad_define_exit_code(self) -> None:
        self._write("A.doc.cs", "/** A. */\n")
        self.assertEqual(self._run("--define", "DOTNETCORE"), run_docgen.EXIT_CONFIGURATION_ERROR)
        self.assertEqual(self._run("--define", "DOTNETCORE=perhaps"), run_docgen.EXIT_CONFIGURATION_ERROR)

    def test_config_file_with_overrides(self) -> None:
        config_path = Path(self._tmp.name) / "docgen.yml"
        config_path.write_text(
            "input_root: /nowhere\n"
            "symbols:\n"
            "  DOTNETCORE: true\n"
            "output_format: markdown\n",
            encoding="utf-8",
        )
        self._write("A.doc.cs", "/** A. */\n#if DOTNETCORE\ncore();\n#endif\n")
        code = self._run("--config", str(config_path), "--define", "DOTNETCORE=false")
        self.assertEqual(code, 0)
        self.assertEqual((self.output_root / "A.md").read_text(encoding="utf-8"), "A.\n")

    def test_parse_defines(self) -> None:
        self.assertEqual(
            run_docgen.parse_defines(["A=true", " B = False "]),
            {"A": True, "B": False},
        )
        with self.assertRaises(ConfigurationError):
            run_docgen.parse_defines(["A"])


if __name__ == "__main__":
    unittest.main()
