"""Tests for startup config validation helpers."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from core.startup_config import (
    ConfigurationError,
    env_int,
    load_config_payload,
    resolve_strict_config_validation,
    validate_roots,
)


class TestLoadConfigPayload(unittest.TestCase):
    def _write_config(self, content: str, suffix: str = ".yml") -> str:
        handle = tempfile.NamedTemporaryFile(mode="w", suffix=suffix, delete=False)
        handle.write(content)
        handle.flush()
        handle.close()
        self.addCleanup(Path(handle.name).unlink, missing_ok=True)
        return handle.name

    def test_load_non_strict_missing_returns_empty(self) -> None:
        payload = load_config_payload("/definitely/missing.yml", strict=False)
        self.assertEqual(payload, {})

    def test_load_strict_missing_raises(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_config_payload("/definitely/missing.yml", strict=True)

    def test_load_yaml_mapping(self) -> None:
        path = self._write_config("input_root: src\nsymbols:\n  DOTNETCORE: false\n")
        payload = load_config_payload(path)
        self.assertEqual(payload["input_root"], "src")
        self.assertEqual(payload["symbols"], {"DOTNETCORE": False})

    def test_load_json_mapping(self) -> None:
        path = self._write_config('{"output_format": "markdown"}', suffix=".json")
        self.assertEqual(load_config_payload(path), {"output_format": "markdown"})

    def test_malformed_yaml_raises_even_when_not_strict(self) -> None:
        path = self._write_config("symbols: [unclosed\n")
        with self.assertRaises(ConfigurationError):
            load_config_payload(path, strict=False)

    def test_non_mapping_payload_raises(self) -> None:
        path = self._write_config("- just\n- a list\n")
        with self.assertRaises(ConfigurationError):
            load_config_payload(path)

    def test_empty_file_depends_on_strict_mode(self) -> None:
        path = self._write_config("")
        self.assertEqual(load_config_payload(path, strict=False), {})
        with self.assertRaises(ConfigurationError):
            load_config_payload(path, strict=True)


class TestEnvironmentHelpers(unittest.TestCase):
    def test_strict_flag_from_env(self) -> None:
        with mock.patch.dict(os.environ, {"STRICT_CONFIG_VALIDATION": "yes"}):
            self.assertTrue(resolve_strict_config_validation())
        with mock.patch.dict(os.environ, {"STRICT_CONFIG_VALIDATION": "0"}):
            self.assertFalse(resolve_strict_config_validation(default=True))

    def test_env_int_falls_back_on_bad_values(self) -> None:
        with mock.patch.dict(os.environ, {"LITERATE_WORKERS": "8"}):
            self.assertEqual(env_int("LITERATE_WORKERS", 4), 8)
        with mock.patch.dict(os.environ, {"LITERATE_WORKERS": "many"}):
            self.assertEqual(env_int("LITERATE_WORKERS", 4), 4)
        with mock.patch.dict(os.environ, {"LITERATE_WORKERS": "0"}):
            self.assertEqual(env_int("LITERATE_WORKERS", 4), 4)


class TestValidateRoots(unittest.TestCase):
    def test_creates_missing_output_root(self) -> None:
        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "nested", "docs")
            roots = validate_roots(src, out)
            self.assertTrue(Path(out).is_dir())
            self.assertEqual(roots["input_root"], str(Path(src).resolve()))
            self.assertEqual(roots["output_root"], str(Path(out).resolve()))

    def test_missing_input_root_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigurationError):
                validate_roots(os.path.join(tmp, "absent"), os.path.join(tmp, "docs"))

    def test_output_root_that_is_a_file_raises(self) -> None:
        with tempfile.TemporaryDirectory() as src, tempfile.TemporaryDirectory() as tmp:
            out = Path(tmp) / "docs.txt"
            out.write_text("not a directory", encoding="utf-8")
            with self.assertRaises(ConfigurationError):
                validate_roots(src, str(out))

    def test_same_root_raises(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(ConfigurationError):
                validate_roots(tmp, tmp)


if __name__ == "__main__":
    unittest.main()
