"""Unit tests for wedge.config."""
import argparse
import os
import tempfile
import unittest
from unittest.mock import patch

from wedge import config


class TestConfigPaths(unittest.TestCase):
    def test_get_config_dir_uses_xdg_config_home(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                dir_path = config.get_config_dir()
            self.assertEqual(dir_path, os.path.join(tmp, "wedge"))

    def test_get_config_dir_fallback_when_xdg_unset(self):
        with patch.dict(os.environ, {"XDG_CONFIG_HOME": ""}, clear=False):
            dir_path = config.get_config_dir()
        home = os.path.expanduser("~")
        self.assertEqual(dir_path, os.path.join(home, ".config", "wedge"))

    def test_get_config_dir_strips_whitespace(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp + "  "}, clear=False):
                dir_path = config.get_config_dir()
            self.assertEqual(dir_path, os.path.join(tmp.strip(), "wedge"))

    def test_get_config_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                path = config.get_config_path()
            self.assertEqual(path, os.path.join(tmp, "wedge", "wedge.yaml"))


class TestDefaultConfig(unittest.TestCase):
    def test_get_default_config_has_expected_keys(self):
        defaults = config.get_default_config()
        expected = {
            "buffer_ms", "use_key_down", "termination", "min_length",
            "terminator", "device", "poll_ms", "output", "verbose",
        }
        self.assertEqual(set(defaults.keys()), expected)

    def test_get_default_config_values(self):
        defaults = config.get_default_config()
        self.assertEqual(defaults["buffer_ms"], 100)
        self.assertFalse(defaults["use_key_down"])
        self.assertEqual(defaults["termination"], "count")
        self.assertEqual(defaults["min_length"], 4)
        self.assertIsNone(defaults["device"])


class TestEnsureAndLoadConfig(unittest.TestCase):
    def _write(self, tmp, content):
        config_dir = os.path.join(tmp, "wedge")
        os.makedirs(config_dir, exist_ok=True)
        with open(os.path.join(config_dir, "wedge.yaml"), "w", encoding="utf-8") as f:
            f.write(content)

    def test_load_config_creates_file_when_missing(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                cfg = config.load_config()
                path = config.get_config_path()  # path while env is patched
            self.assertTrue(os.path.isfile(path))
            self.assertEqual(cfg, config.get_default_config())

    def test_written_default_file_matches_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                config.ensure_config_file()
                cfg = config.load_config()
            self.assertEqual(cfg, config.get_default_config())

    def test_load_config_merges_file_over_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            self._write(tmp, "buffer_ms: 50\ntermination: terminator\n")
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                cfg = config.load_config()
            self.assertEqual(cfg["buffer_ms"], 50)
            self.assertEqual(cfg["termination"], "terminator")
            self.assertEqual(cfg["min_length"], 4)

    def test_load_config_ignores_unknown_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            self._write(tmp, "colour: blue\n")
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                cfg = config.load_config()
            self.assertNotIn("colour", cfg)

    def test_load_config_invalid_yaml_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            self._write(tmp, "invalid: yaml: content:\n")
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                with self.assertLogs("wedge.config", level="WARNING"):
                    cfg = config.load_config()
            self.assertEqual(cfg, config.get_default_config())

    def test_load_config_non_mapping_returns_defaults(self):
        with tempfile.TemporaryDirectory() as tmp:
            self._write(tmp, "- just\n- a list\n")
            with patch.dict(os.environ, {"XDG_CONFIG_HOME": tmp}, clear=False):
                cfg = config.load_config()
            self.assertEqual(cfg, config.get_default_config())


class TestMergeCliArgs(unittest.TestCase):
    def test_given_arguments_win(self):
        cfg = config.get_default_config()
        args = argparse.Namespace(buffer_ms=30, use_key_down=True, device=None)
        merged = config.merge_cli_args(cfg, args)
        self.assertEqual(merged["buffer_ms"], 30)
        self.assertTrue(merged["use_key_down"])
        self.assertIsNone(merged["device"])
        self.assertEqual(cfg["buffer_ms"], 100)

    def test_false_is_an_explicit_value(self):
        cfg = dict(config.get_default_config(), verbose=True)
        merged = config.merge_cli_args(cfg, argparse.Namespace(verbose=False))
        self.assertFalse(merged["verbose"])


if __name__ == "__main__":
    unittest.main()
