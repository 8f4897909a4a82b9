import importlib
import os
import shutil
import tempfile
import unittest
from unittest.mock import patch

from flavorconvert import config

DATA_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "data", "flavorconvert"))
CONFIG_DIR = os.path.abspath(os.path.join(DATA_DIR, "config"))


class TestConfig(unittest.TestCase):
    def setUp(self):
        """Start from a fresh config module, other tests may have cached a configuration"""
        importlib.reload(config)

    def tearDown(self):
        """The config module should be reloaded."""
        # Because we can alter global state, we should reload the
        # config module after every test
        importlib.reload(config)

    def use_files(self, files, snippets=""):
        config.CONFIG_FILES = {"flavorconvert": files}
        config.CONFIG_ENV = {"flavorconvert": ""}
        config.CONFIG_SNIPPETS_DIRS = {"flavorconvert": [snippets] if snippets else []}

    def test_default_config_files(self):
        """Test default config file list."""
        self.assertEqual(
            config.CONFIG_FILES,
            {
                "flavorconvert": [
                    "/etc/flavorconvert/flavorconvert.conf",
                    "/usr/etc/flavorconvert/flavorconvert.conf",
                ],
                "logging": ["/etc/flavorconvert/logging.conf", "/usr/etc/flavorconvert/logging.conf"],
            },
        )

    def test_no_component(self):
        """Test that no component causes exception"""
        self.assertRaises(Exception, config.get, "", "templates_dir")

    def test_invalid_env(self):
        """Test that invalid CONFIG_ENV causes exception"""
        config.CONFIG_ENV = []
        self.assertRaises(Exception, config.get_config, "flavorconvert")

    def test_invalid_component(self):
        """Test that invalid component causes exception"""
        self.assertRaises(Exception, config.get_config, "test")

    def test_defaults_without_config(self):
        """Test that all options have defaults when no file is found"""
        self.use_files([os.path.join(CONFIG_DIR, "missing.conf")])
        self.assertEqual(config.templates_dir(), "/opt/hvs-flavortemplates")
        self.assertEqual(config.output_file(), "/opt/newflavorpart.json")
        self.assertTrue(config.print_output())

    def test_single_config(self):
        """Test reading a single config file."""
        self.use_files([os.path.join(CONFIG_DIR, "flavorconvert.conf")])
        self.assertEqual(config.templates_dir(), "/tmp/flavorconvert-test/templates")
        # Quotes are stripped
        self.assertEqual(config.output_file(), "/tmp/flavorconvert-test/newflavorpart.json")
        self.assertFalse(config.print_output())

    def test_first_base_file_used(self):
        """Test giving multiple possibilities for base file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            second = os.path.join(tmpdir, "second.conf")
            with open(second, "w", encoding="utf-8") as f:
                f.write("[flavorconvert]\ntemplates_dir = /second\n")
            self.use_files([os.path.join(CONFIG_DIR, "flavorconvert.conf"), second])
            self.assertEqual(config.templates_dir(), "/tmp/flavorconvert-test/templates")

    def test_snippets_override(self):
        """Test that snippets override the base file, in name order."""
        tmpdir = tempfile.mkdtemp()
        try:
            for name, value in (("20-second.conf", "/from-second"), ("10-first.conf", "/from-first")):
                with open(os.path.join(tmpdir, name), "w", encoding="utf-8") as f:
                    f.write(f"[flavorconvert]\ntemplates_dir = {value}\n")
            self.use_files([os.path.join(CONFIG_DIR, "flavorconvert.conf")], tmpdir)
            self.assertEqual(config.templates_dir(), "/from-second")
            self.assertEqual(config.output_file(), "/tmp/flavorconvert-test/newflavorpart.json")
        finally:
            shutil.rmtree(tmpdir)

    def test_env_config_file(self):
        """Test that the file set through environment variable is used."""
        config.CONFIG_FILES = {"flavorconvert": ["/nonexistent.conf"]}
        config.CONFIG_ENV = {"flavorconvert": os.path.join(CONFIG_DIR, "flavorconvert.conf")}
        self.assertEqual(config.templates_dir(), "/tmp/flavorconvert-test/templates")

    def test_env_option_override(self):
        """Test that environment variables override single options."""
        self.use_files([os.path.join(CONFIG_DIR, "flavorconvert.conf")])
        env = {
            "FLAVORCONVERT_FLAVORCONVERT_OUTPUT_FILE": '"/env/out.json"',
            "FLAVORCONVERT_FLAVORCONVERT_PRINT_OUTPUT": "on",
        }
        with patch.dict(os.environ, env):
            self.assertEqual(config.output_file(), "/env/out.json")
            self.assertTrue(config.print_output())

    def test_env_invalid_boolean_uses_fallback(self):
        self.use_files([os.path.join(CONFIG_DIR, "flavorconvert.conf")])
        with patch.dict(os.environ, {"FLAVORCONVERT_FLAVORCONVERT_PRINT_OUTPUT": "maybe"}):
            self.assertTrue(config.print_output())


if __name__ == "__main__":
    unittest.main()
